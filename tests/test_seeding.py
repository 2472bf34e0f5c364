import logging

import pytest

from catalog.errors import SeedInputError
from catalog.lookup import find_by_slug, list_sorted_by_name
from catalog.mutations import insert_if_absent
from catalog.seeding import MONSTERS, SPELLS, seed_all
from models import Monster, Spell


def _snapshot(db, model):
    return [
        (record.id, record.slug, record.name, record.description)
        for record in list_sorted_by_name(db, model)
    ]


def test_insert_if_absent_first_write_wins(db, monster_record) -> None:
    first = insert_if_absent(db, Monster, monster_record(description="Original"))
    db.commit()
    second = insert_if_absent(
        db, Monster, monster_record(name="Goblin Boss", description="Changed", hit_points=20)
    )
    db.commit()

    assert first.status == "inserted"
    assert second.status == "skipped"
    assert second.slug == "goblin"
    stored = find_by_slug(db, Monster, "goblin")
    assert stored.name == "Goblin"
    assert stored.description == "Original"
    assert stored.hit_points == 5
    assert db.query(Monster).count() == 1


def test_seed_duplicate_slug_in_batch(db, monster_record) -> None:
    result = seed_all(db, MONSTERS, [monster_record(), monster_record(name="Other")])
    assert result.model_dump() == {"total": 2, "inserted": 1, "skipped": 1, "errors": []}


def test_seeding_twice_is_idempotent(db, monster_record) -> None:
    records = [
        monster_record(name="Goblin", slug="goblin"),
        monster_record(name="Orc", slug="orc"),
        monster_record(name="Troll", slug="troll", level=5),
    ]
    first = seed_all(db, MONSTERS, records)
    after_first = _snapshot(db, Monster)
    second = seed_all(db, MONSTERS, records)

    assert first.inserted == 3
    assert second.inserted == 0
    assert second.skipped == len(records)
    assert _snapshot(db, Monster) == after_first


def test_malformed_record_fails_alone(db, spell_record) -> None:
    broken = spell_record(name="Fireball", slug="fireball")
    del broken["range"]
    result = seed_all(db, SPELLS, [spell_record(), broken])

    assert result.total == 2
    assert result.inserted == 1
    assert result.skipped == 0
    assert len(result.errors) == 1
    assert result.errors[0].startswith('Failed to insert spell "Fireball" (fireball):')
    assert find_by_slug(db, Spell, "magic-missile") is not None
    assert find_by_slug(db, Spell, "fireball") is None


def test_errors_keep_input_order_and_batch_continues(db, monster_record) -> None:
    records = [
        monster_record(slug="bad-one", alignment="X"),
        monster_record(name="Orc", slug="orc"),
        "not a monster",
        monster_record(name="Wolf", slug="wolf", unknown_field=1),
        monster_record(name="Bear", slug="bear"),
    ]
    result = seed_all(db, MONSTERS, records)

    assert result.total == 5
    assert result.inserted == 2
    assert len(result.errors) == 3
    assert "(bad-one)" in result.errors[0]
    assert result.errors[1].startswith('Failed to insert monster "?" (?)')
    assert "(wolf)" in result.errors[2]
    assert [record.slug for record in list_sorted_by_name(db, Monster)] == ["bear", "orc"]


def test_invalid_tier_is_rejected(db, spell_record) -> None:
    result = seed_all(db, SPELLS, [spell_record(tier="6")])
    assert result.inserted == 0
    assert len(result.errors) == 1


@pytest.mark.parametrize(
    "overrides",
    [
        {"armor_class": "11"},
        {"level": True},
        {"hit_points": 5.0},
        {"traits": [{"name": "Keen Senses", "description": 3}]},
    ],
)
def test_monster_fields_are_not_coerced(db, monster_record, overrides) -> None:
    result = seed_all(db, MONSTERS, [monster_record(**overrides)])
    assert result.inserted == 0
    assert len(result.errors) == 1
    assert result.errors[0].startswith('Failed to insert monster "Goblin" (goblin):')
    assert find_by_slug(db, Monster, "goblin") is None


def test_monster_without_traits_is_rejected(db, monster_record) -> None:
    record = monster_record()
    del record["traits"]
    result = seed_all(db, MONSTERS, [record])

    assert result.inserted == 0
    assert len(result.errors) == 1
    assert "traits" in result.errors[0]


def test_monster_with_empty_traits_is_accepted(db, monster_record) -> None:
    result = seed_all(db, MONSTERS, [monster_record(traits=[])])
    assert result.inserted == 1
    assert find_by_slug(db, Monster, "goblin").traits == []


def test_spell_classes_must_be_strings(db, spell_record) -> None:
    result = seed_all(db, SPELLS, [spell_record(classes=["wizard", 2])])
    assert result.inserted == 0
    assert len(result.errors) == 1


def test_non_list_input_raises(db) -> None:
    with pytest.raises(SeedInputError):
        seed_all(db, MONSTERS, {"slug": "goblin"})


def test_empty_batch(db) -> None:
    assert seed_all(db, SPELLS, []).model_dump() == {
        "total": 0,
        "inserted": 0,
        "skipped": 0,
        "errors": [],
    }


def test_progress_is_logged_every_interval(db, spell_record, caplog) -> None:
    records = [
        spell_record(name=f"Spell {index:02d}", slug=f"spell-{index:02d}")
        for index in range(60)
    ]
    with caplog.at_level(logging.INFO, logger="catalog.seeding"):
        result = seed_all(db, SPELLS, records)

    assert result.inserted == 60
    progress = [
        record.getMessage()
        for record in caplog.records
        if record.getMessage().startswith("Progress:")
    ]
    assert progress == ["Progress: 25 spells inserted...", "Progress: 50 spells inserted..."]


def test_monster_progress_is_logged_every_fifty(db, monster_record, caplog) -> None:
    records = [
        monster_record(name=f"Monster {index:03d}", slug=f"monster-{index:03d}")
        for index in range(120)
    ]
    with caplog.at_level(logging.INFO, logger="catalog.seeding"):
        result = seed_all(db, MONSTERS, records)

    assert result.inserted == 120
    progress = [
        record.getMessage()
        for record in caplog.records
        if record.getMessage().startswith("Progress:")
    ]
    assert progress == [
        "Progress: 50 monsters inserted...",
        "Progress: 100 monsters inserted...",
    ]


def test_skipped_records_do_not_count_towards_progress(db, monster_record, caplog) -> None:
    records = [
        monster_record(name=f"Monster {index:03d}", slug=f"monster-{index:03d}")
        for index in range(49)
    ]
    seed_all(db, MONSTERS, records)
    with caplog.at_level(logging.INFO, logger="catalog.seeding"):
        result = seed_all(db, MONSTERS, records + [monster_record()])

    assert result.inserted == 1
    assert result.skipped == 49
    assert not [
        record for record in caplog.records if record.getMessage().startswith("Progress:")
    ]


def test_concurrent_insert_is_reported_as_skipped(db, monster_record, monkeypatch) -> None:
    db.add(Monster(**monster_record(description="Winner")))
    db.commit()

    calls = []

    def stale_lookup(session, model, slug):
        calls.append(slug)
        if len(calls) == 1:
            return None
        return find_by_slug(session, model, slug)

    monkeypatch.setattr("catalog.mutations.find_by_slug", stale_lookup)
    result = insert_if_absent(db, Monster, monster_record(description="Loser"))
    db.commit()

    assert result.status == "skipped"
    assert len(calls) == 2
    assert find_by_slug(db, Monster, "goblin").description == "Winner"
    assert db.query(Monster).count() == 1
