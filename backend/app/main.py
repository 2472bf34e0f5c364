import hmac
import logging
import os
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from pydantic import BaseModel
from sqlalchemy.orm import Session, sessionmaker

from catalog.errors import NotFound, SeedInputError, Unauthenticated
from catalog.lookup import find_by_slug, list_by_level, list_sorted_by_name
from catalog.profiles import (
    get_current_profile,
    get_current_user_id,
    update_preferences,
    upsert_profile,
)
from catalog.schemas import ALIGNMENT_NAMES, FavoriteTablesPreferences, SeedResult
from catalog.search import search_records
from catalog.seeding import MONSTERS, SPELLS, seed_all
from db import check_db_connection, create_session_factory
from identity.discord import DiscordClient, DiscordClientError
from identity.signin import sign_in
from identity.tokens import Identity, TokenError, TokenSigner
from models import Monster, Spell

log = logging.getLogger(__name__)

router = APIRouter()


def get_db(request: Request):
    session = request.app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def get_identity(
    request: Request,
    authorization: str | None = Header(None),
) -> Identity | None:
    return request.app.state.token_signer.resolve(authorization)


def require_deploy_key(
    request: Request,
    x_deploy_key: str | None = Header(None),
) -> None:
    expected = request.app.state.deploy_key
    if not expected or not x_deploy_key or not hmac.compare_digest(x_deploy_key, expected):
        raise HTTPException(status_code=403, detail="Deploy key required")


class MonsterSeedRequest(BaseModel):
    monsters: Any


class SpellSeedRequest(BaseModel):
    spells: Any


class ProfileUpsertRequest(BaseModel):
    display_name: str
    avatar_url: str | None = None


class PreferencesUpdateRequest(BaseModel):
    favorite_tables_preferences: FavoriteTablesPreferences | None = None
    theme_preference: str | None = None


class SignInRequest(BaseModel):
    access_token: str


def _monster_payload(monster: Monster) -> dict:
    return {
        "id": monster.id,
        "created_at": monster.created_at.isoformat() if monster.created_at else None,
        "name": monster.name,
        "slug": monster.slug,
        "description": monster.description,
        "armor_class": monster.armor_class,
        "armor_type": monster.armor_type,
        "hit_points": monster.hit_points,
        "attacks": monster.attacks,
        "movement": monster.movement,
        "strength": monster.strength,
        "dexterity": monster.dexterity,
        "constitution": monster.constitution,
        "intelligence": monster.intelligence,
        "wisdom": monster.wisdom,
        "charisma": monster.charisma,
        "alignment": monster.alignment,
        "alignment_name": ALIGNMENT_NAMES.get(monster.alignment, "Unknown"),
        "level": monster.level,
        "traits": monster.traits or [],
    }


def _spell_payload(spell: Spell) -> dict:
    return {
        "id": spell.id,
        "created_at": spell.created_at.isoformat() if spell.created_at else None,
        "name": spell.name,
        "slug": spell.slug,
        "description": spell.description,
        "classes": spell.classes or [],
        "duration": spell.duration,
        "range": spell.range,
        "tier": spell.tier,
    }


@router.get("/health")
def health(request: Request) -> dict:
    try:
        check_db_connection(request.app.state.session_factory)
    except Exception as exc:
        raise HTTPException(status_code=503, detail="Database unavailable") from exc
    return {"status": "ok"}


@router.get("/monsters")
def list_monsters(search: str | None = None, db: Session = Depends(get_db)) -> list[dict]:
    records = search_records(db, Monster, search)
    return [_monster_payload(record) for record in records]


@router.get("/monsters/level/{level}")
def list_monsters_by_level(level: int, db: Session = Depends(get_db)) -> list[dict]:
    return [_monster_payload(record) for record in list_by_level(db, Monster, level)]


@router.get("/monsters/{slug}")
def get_monster(slug: str, db: Session = Depends(get_db)) -> dict | None:
    monster = find_by_slug(db, Monster, slug)
    return _monster_payload(monster) if monster else None


@router.get("/spells")
def list_spells(search: str | None = None, db: Session = Depends(get_db)) -> list[dict]:
    records = search_records(db, Spell, search)
    return [_spell_payload(record) for record in records]


@router.get("/spells/{slug}")
def get_spell(slug: str, db: Session = Depends(get_db)) -> dict | None:
    spell = find_by_slug(db, Spell, slug)
    return _spell_payload(spell) if spell else None


@router.post(
    "/seed/monsters",
    response_model=SeedResult,
    dependencies=[Depends(require_deploy_key)],
)
def seed_monsters(payload: MonsterSeedRequest, db: Session = Depends(get_db)) -> SeedResult:
    try:
        return seed_all(db, MONSTERS, payload.monsters)
    except SeedInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.post(
    "/seed/spells",
    response_model=SeedResult,
    dependencies=[Depends(require_deploy_key)],
)
def seed_spells(payload: SpellSeedRequest, db: Session = Depends(get_db)) -> SeedResult:
    try:
        return seed_all(db, SPELLS, payload.spells)
    except SeedInputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/me/id")
def current_user_id(identity: Identity | None = Depends(get_identity)) -> int | None:
    return get_current_user_id(identity)


@router.get("/me/profile")
def current_user_profile(
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> dict | None:
    return get_current_profile(db, identity)


@router.put("/me/profile")
def upsert_user_profile(
    payload: ProfileUpsertRequest,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> dict:
    try:
        profile_id = upsert_profile(
            db,
            identity,
            display_name=payload.display_name,
            avatar_url=payload.avatar_url,
        )
    except Unauthenticated as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    return {"id": profile_id}


@router.put("/me/preferences")
def update_user_preferences(
    payload: PreferencesUpdateRequest,
    identity: Identity | None = Depends(get_identity),
    db: Session = Depends(get_db),
) -> None:
    try:
        update_preferences(
            db,
            identity,
            favorite_tables_preferences=payload.favorite_tables_preferences,
            theme_preference=payload.theme_preference,
        )
    except Unauthenticated as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except NotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return None


@router.post("/auth/discord")
def sign_in_with_discord(
    payload: SignInRequest,
    request: Request,
    db: Session = Depends(get_db),
) -> dict:
    try:
        client = request.app.state.discord_client
        provider_identity = client.fetch_identity(payload.access_token)
    except DiscordClientError as exc:
        raise HTTPException(status_code=401, detail="Discord sign-in failed") from exc

    identity, profile = sign_in(db, provider_identity)
    try:
        token = request.app.state.token_signer.issue(identity)
    except TokenError as exc:
        log.error("Cannot issue token: %s", exc)
        raise HTTPException(status_code=500, detail="Sign-in unavailable") from exc
    return {"token": token, "user_id": identity.user_id, "profile_id": profile.id}


def create_app(
    *,
    session_factory: sessionmaker | None = None,
    token_signer: TokenSigner | None = None,
    deploy_key: str | None = None,
    discord_client: DiscordClient | None = None,
) -> FastAPI:
    """Build the API around explicit collaborators.

    Anything left out is built from the environment here, not at import, so
    importing this module never opens a database engine. Serve it with
    `uvicorn app.main:create_app --factory`.
    """
    application = FastAPI(
        title="Shadowdark GM Tools API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )
    application.state.session_factory = session_factory or create_session_factory()
    application.state.token_signer = token_signer or TokenSigner()
    application.state.deploy_key = deploy_key or os.getenv("DEPLOY_KEY")
    application.state.discord_client = discord_client or DiscordClient()
    application.include_router(router)
    return application
