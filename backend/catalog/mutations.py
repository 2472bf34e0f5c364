from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.lookup import find_by_slug
from catalog.schemas import InsertResult

log = logging.getLogger(__name__)


def insert_if_absent(db: Session, model: type[Any], record: dict) -> InsertResult:
    """Insert ``record`` unless a row with the same slug already exists.

    The first write for a slug wins; later ones are reported as skipped and
    leave the stored row untouched. The caller owns the commit.
    """
    slug = record["slug"]
    if find_by_slug(db, model, slug) is not None:
        return InsertResult(status="skipped", slug=slug)

    db.add(model(**record))
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        # Only a slug inserted by another writer since our lookup counts as a skip.
        if find_by_slug(db, model, slug) is None:
            raise
        log.info("Slug %s was inserted concurrently, skipping", slug)
        return InsertResult(status="skipped", slug=slug)
    return InsertResult(status="inserted", slug=slug)
