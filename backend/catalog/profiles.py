from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.errors import NotFound, Unauthenticated
from catalog.lookup import find_by_user_id
from catalog.schemas import FavoriteTablesPreferences
from identity.tokens import Identity
from models import UserProfile

log = logging.getLogger(__name__)


def _require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise Unauthenticated("Must be authenticated")
    return identity


def profile_payload(profile: UserProfile, email: str | None = None) -> dict:
    return {
        "id": profile.id,
        "user_id": profile.user_id,
        "display_name": profile.display_name,
        "avatar_url": profile.avatar_url,
        "favorite_tables_preferences": profile.favorite_tables_preferences,
        "theme_preference": profile.theme_preference,
        "created_at": profile.created_at.isoformat() if profile.created_at else None,
        "email": email,
    }


def get_current_user_id(identity: Identity | None) -> int | None:
    return identity.user_id if identity else None


def get_current_profile(db: Session, identity: Identity | None) -> dict | None:
    if identity is None:
        return None
    profile = find_by_user_id(db, UserProfile, identity.user_id)
    if profile is None:
        return None
    return profile_payload(profile, email=identity.email)


def upsert_profile(
    db: Session,
    identity: Identity | None,
    display_name: str,
    avatar_url: str | None = None,
) -> int:
    """Create the caller's profile or patch its display fields.

    Preferences are never touched here. Commits before returning the id.
    """
    user_id = _require_identity(identity).user_id
    profile = find_by_user_id(db, UserProfile, user_id)
    if profile is None:
        profile = UserProfile(
            user_id=user_id,
            display_name=display_name,
            avatar_url=avatar_url,
        )
        db.add(profile)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            log.info("Profile for user %s created concurrently, patching", user_id)
            profile = find_by_user_id(db, UserProfile, user_id)
            if profile is None:
                raise
            profile.display_name = display_name
            profile.avatar_url = avatar_url
    else:
        profile.display_name = display_name
        profile.avatar_url = avatar_url

    db.commit()
    db.refresh(profile)
    return profile.id


def update_preferences(
    db: Session,
    identity: Identity | None,
    favorite_tables_preferences: FavoriteTablesPreferences | None = None,
    theme_preference: str | None = None,
) -> None:
    user_id = _require_identity(identity).user_id
    profile = find_by_user_id(db, UserProfile, user_id)
    if profile is None:
        raise NotFound("User profile not found")

    # Both fields are overwritten, so an omitted value clears the stored one.
    profile.favorite_tables_preferences = (
        favorite_tables_preferences.model_dump()
        if favorite_tables_preferences is not None
        else None
    )
    profile.theme_preference = theme_preference
    db.commit()


def ensure_profile(
    db: Session,
    user_id: int,
    display_name: str,
    avatar_url: str | None = None,
) -> UserProfile:
    """Return the user's profile, creating it on first sign-in."""
    profile = find_by_user_id(db, UserProfile, user_id)
    if profile is not None:
        return profile
    profile = UserProfile(
        user_id=user_id,
        display_name=display_name,
        avatar_url=avatar_url,
    )
    db.add(profile)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        profile = find_by_user_id(db, UserProfile, user_id)
        if profile is None:
            raise
    return profile
