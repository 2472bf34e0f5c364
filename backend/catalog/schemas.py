from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

ALIGNMENT_NAMES = {"L": "Lawful", "C": "Chaotic", "N": "Neutral"}


class MonsterTrait(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: StrictStr
    description: StrictStr


class MonsterRecord(BaseModel):
    """One monster entry of the seed JSON, field for field."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr
    slug: StrictStr = Field(min_length=1)
    description: StrictStr
    armor_class: StrictInt
    armor_type: StrictStr | None
    hit_points: StrictInt
    attacks: StrictStr
    movement: StrictStr
    strength: StrictInt
    dexterity: StrictInt
    constitution: StrictInt
    intelligence: StrictInt
    wisdom: StrictInt
    charisma: StrictInt
    alignment: Literal["L", "C", "N"]
    level: StrictInt
    traits: list[MonsterTrait]


class SpellRecord(BaseModel):
    """One spell entry of the seed JSON, field for field."""

    model_config = ConfigDict(extra="forbid")

    name: StrictStr
    slug: StrictStr = Field(min_length=1)
    description: StrictStr
    classes: list[StrictStr]
    duration: StrictStr
    range: StrictStr
    tier: Literal["1", "2", "3", "4", "5"]


class FavoriteTablesPreferences(BaseModel):
    model_config = ConfigDict(extra="forbid")

    version: Literal[1] = 1
    monsters: list[str] = Field(default_factory=list)
    spells: list[str] = Field(default_factory=list)


class InsertResult(BaseModel):
    status: Literal["inserted", "skipped"]
    slug: str


class SeedResult(BaseModel):
    total: int = 0
    inserted: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)
