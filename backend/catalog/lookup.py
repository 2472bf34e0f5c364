from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session


def find_by_slug(db: Session, model: type[Any], slug: str) -> Any | None:
    return db.query(model).filter(model.slug == slug).first()


def find_by_user_id(db: Session, model: type[Any], user_id: int) -> Any | None:
    # Unique per user; duplicate rows, if any, resolve to the oldest one.
    return (
        db.query(model)
        .filter(model.user_id == user_id)
        .order_by(model.id.asc())
        .first()
    )


def list_sorted_by_name(db: Session, model: type[Any]) -> list[Any]:
    return db.query(model).order_by(model.name.asc(), model.id.asc()).all()


def list_by_level(db: Session, model: type[Any], level: int) -> list[Any]:
    return (
        db.query(model)
        .filter(model.level == level)
        .order_by(model.name.asc(), model.id.asc())
        .all()
    )
