from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session

from catalog.lookup import list_sorted_by_name


def normalize_term(term: str | None) -> str | None:
    if term is None:
        return None
    trimmed = term.strip()
    return trimmed.lower() or None


def search_records(db: Session, model: type[Any], term: str | None = None) -> list[Any]:
    """Case-insensitive substring match on ``name``.

    The whole table is loaded in name order and filtered in memory, so the
    result keeps the name ordering of ``list_sorted_by_name``. A missing or
    blank term returns every row.
    """
    records = list_sorted_by_name(db, model)
    needle = normalize_term(term)
    if needle is None:
        return records
    return [record for record in records if needle in record.name.lower()]
