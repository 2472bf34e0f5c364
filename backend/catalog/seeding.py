from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from sqlalchemy.orm import Session

from catalog.errors import SeedInputError
from catalog.mutations import insert_if_absent
from catalog.schemas import MonsterRecord, SeedResult, SpellRecord
from models import Monster, Spell

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedTable:
    kind: str
    plural: str
    model: type[Any]
    schema: type[BaseModel]
    progress_every: int


MONSTERS = SeedTable(
    kind="monster",
    plural="monsters",
    model=Monster,
    schema=MonsterRecord,
    progress_every=50,
)
SPELLS = SeedTable(
    kind="spell",
    plural="spells",
    model=Spell,
    schema=SpellRecord,
    progress_every=25,
)


def _describe(record: Any) -> tuple[str, str]:
    if isinstance(record, dict):
        return str(record.get("name", "?")), str(record.get("slug", "?"))
    return "?", "?"


def seed_all(db: Session, table: SeedTable, records: list[Any]) -> SeedResult:
    """Load ``records`` into ``table`` one at a time, skipping known slugs.

    Every record is committed (or rolled back) before the next one starts.
    A failing record is reported in ``errors`` and does not stop the batch;
    only a ``records`` value that is not a list raises.
    """
    if not isinstance(records, list):
        raise SeedInputError(f"{table.plural} must be a list")

    result = SeedResult(total=len(records))
    log.info("Starting %s seeding: %d %s to process", table.kind, result.total, table.plural)

    for record in records:
        try:
            payload = table.schema.model_validate(record).model_dump()
            outcome = insert_if_absent(db, table.model, payload)
            db.commit()
        except Exception as exc:
            db.rollback()
            name, slug = _describe(record)
            message = f'Failed to insert {table.kind} "{name}" ({slug}): {exc}'
            log.error(message)
            result.errors.append(message)
            continue

        if outcome.status == "inserted":
            result.inserted += 1
            if result.inserted % table.progress_every == 0:
                log.info("Progress: %d %s inserted...", result.inserted, table.plural)
        else:
            result.skipped += 1

    log.info(
        "Seeding complete: %d inserted, %d skipped, %d errors",
        result.inserted,
        result.skipped,
        len(result.errors),
    )
    return result
