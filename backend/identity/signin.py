from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.profiles import ensure_profile
from identity.discord import ProviderIdentity
from identity.tokens import Identity
from models import User, UserProfile

log = logging.getLogger(__name__)


def find_user(db: Session, provider: str, account_id: str) -> User | None:
    return (
        db.query(User)
        .filter(User.provider == provider)
        .filter(User.provider_account_id == account_id)
        .first()
    )


def record_user(db: Session, provider_identity: ProviderIdentity) -> User:
    """Create or refresh the user row for a provider account.

    Two first sign-ins for the same account can race; the loser's insert hits
    the (provider, provider_account_id) unique constraint and falls back to
    updating the row the winner created.
    """
    provider = provider_identity.provider
    account_id = provider_identity.account_id
    user = find_user(db, provider, account_id)
    if user is None:
        user = User(provider=provider, provider_account_id=account_id)
        db.add(user)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            user = find_user(db, provider, account_id)
            if user is None:
                raise
            log.info("User %s %s was created concurrently, updating", provider, account_id)
        else:
            log.info("New %s user %s", provider, account_id)
    user.email = provider_identity.email
    user.name = provider_identity.name
    user.image = provider_identity.image
    db.commit()
    db.refresh(user)
    return user


def sign_in(
    db: Session, provider_identity: ProviderIdentity
) -> tuple[Identity, UserProfile]:
    """Record the provider identity and make sure the user has a profile."""
    user = record_user(db, provider_identity)
    profile = ensure_profile(
        db,
        user.id,
        display_name=user.name or "Adventurer",
        avatar_url=user.image,
    )
    db.commit()
    db.refresh(profile)
    identity = Identity(
        user_id=user.id,
        email=user.email,
        name=user.name,
        image=user.image,
    )
    return identity, profile
