"""Shared fixtures: an in-memory SQLite store and an app bound to it."""
from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import create_app
from identity.discord import DiscordClientError, ProviderIdentity
from identity.tokens import Identity, TokenSigner
from models import Base, User

DEPLOY_KEY = "test-deploy-key"
JWT_SECRET = "test-secret"
DISCORD_TOKEN = "good-token"


class FakeDiscordClient:
    def __init__(self) -> None:
        self.calls: list[str] = []

    def fetch_identity(self, access_token: str) -> ProviderIdentity:
        self.calls.append(access_token)
        if access_token != DISCORD_TOKEN:
            raise DiscordClientError("bad token")
        return ProviderIdentity(
            provider="discord",
            account_id="4242",
            email="rook@example.com",
            name="Rook",
            image="https://cdn.discordapp.com/avatars/4242/abc.png",
        )


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


@pytest.fixture
def token_signer() -> TokenSigner:
    return TokenSigner(secret=JWT_SECRET, issuer="tests", ttl_seconds=3600)


@pytest.fixture
def discord_client() -> FakeDiscordClient:
    return FakeDiscordClient()


@pytest.fixture
def client(session_factory, token_signer, discord_client) -> TestClient:
    app = create_app(
        session_factory=session_factory,
        token_signer=token_signer,
        deploy_key=DEPLOY_KEY,
        discord_client=discord_client,
    )
    return TestClient(app)


@pytest.fixture
def user(db) -> User:
    record = User(
        provider="discord",
        provider_account_id="80351110224678912",
        email="nelly@example.com",
        name="Nelly",
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


@pytest.fixture
def identity(user) -> Identity:
    return Identity(user_id=user.id, email=user.email, name=user.name)


@pytest.fixture
def auth_headers(identity, token_signer) -> dict[str, str]:
    return {"Authorization": f"Bearer {token_signer.issue(identity)}"}


@pytest.fixture
def monster_record():
    def build(**overrides: Any) -> dict[str, Any]:
        record = {
            "name": "Goblin",
            "slug": "goblin",
            "description": "A small, cunning humanoid.",
            "armor_class": 11,
            "armor_type": "leather",
            "hit_points": 5,
            "attacks": "1 club +0 (1d4)",
            "movement": "near",
            "strength": 0,
            "dexterity": 1,
            "constitution": 0,
            "intelligence": -1,
            "wisdom": -1,
            "charisma": -2,
            "alignment": "C",
            "level": 1,
            "traits": [{"name": "Keen Senses", "description": "Can't be surprised."}],
        }
        record.update(overrides)
        return record

    return build


@pytest.fixture
def spell_record():
    def build(**overrides: Any) -> dict[str, Any]:
        record = {
            "name": "Magic Missile",
            "slug": "magic-missile",
            "description": "You have advantage on your check to cast this spell.",
            "classes": ["wizard"],
            "duration": "Instant",
            "range": "Far",
            "tier": "1",
        }
        record.update(overrides)
        return record

    return build
