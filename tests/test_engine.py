"""Tests for the spawn/catch engine over the in-memory store."""

import asyncio
from datetime import timedelta

import pytest

from kickdex.core.engine import GameEngine
from kickdex.core.memory_store import MemoryCatchUnit, MemoryGameStore
from kickdex.core.types import CaptureTool, CatchOutcome
from kickdex.exceptions import SpeciesNotFoundError

PIDGEY, PIKACHU, SNORLAX, MEW = 1, 2, 3, 4


async def add_catches(store, participant_id, species_id, times, shiny=False):
    for _ in range(times):
        async with store.catch_unit() as unit:
            await unit.upsert_participant(participant_id, participant_id)
            await unit.increment_collection(participant_id, species_id, shiny)
            await unit.commit()


# ---------------------------------------------------------------- spawning


async def test_spawn_once_creates_spawn_with_expiry(engine, clock):
    spawn = await engine.spawn_once(PIDGEY)

    assert spawn is not None
    assert spawn.name == "Pidgey"
    assert spawn.rarity == "common"
    assert spawn.spawned_at == clock.now
    assert spawn.expires_at == clock.now + timedelta(seconds=30)
    assert spawn.is_active(clock.now)
    assert not spawn.is_active(clock.now + timedelta(seconds=30))
    assert (await engine.get_active_spawn()).id == spawn.id


async def test_spawn_once_is_noop_while_spawn_active(engine):
    assert await engine.spawn_once(PIDGEY) is not None
    assert await engine.spawn_once(PIKACHU) is None
    assert await engine.spawn_once() is None


async def test_concurrent_spawn_once_creates_single_spawn(engine, store):
    results = await asyncio.gather(*(engine.spawn_once() for _ in range(10)))

    assert sum(1 for r in results if r is not None) == 1
    assert len(store.spawns) == 1


async def test_spawn_once_after_expiry(engine, clock):
    first = await engine.spawn_once(PIDGEY)
    clock.advance(31)

    assert await engine.get_active_spawn() is None
    second = await engine.spawn_once(MEW)
    assert second is not None
    assert second.id != first.id


async def test_spawn_once_unknown_species(engine):
    with pytest.raises(SpeciesNotFoundError):
        await engine.spawn_once(999)


async def test_spawn_once_empty_catalog(clock, rng):
    engine = GameEngine(MemoryGameStore(), rng=rng, clock=clock)
    assert await engine.spawn_once() is None


async def test_ensure_catalog_seeds_once(clock):
    engine = GameEngine(MemoryGameStore(), clock=clock)

    assert await engine.ensure_catalog() == 151
    assert await engine.ensure_catalog() == 0
    species = await engine.store.list_species()
    assert species[0].name == "Bulbasaur"
    assert {s.name: s.rarity for s in species}["Mewtwo"] == "legendary"


async def test_clear_active_spawn(engine, clock):
    await engine.spawn_once(PIDGEY)

    assert await engine.clear_active_spawn() == 1
    assert await engine.get_active_spawn() is None
    assert await engine.clear_active_spawn() == 0
    assert await engine.spawn_once(PIKACHU) is not None


# ---------------------------------------------------------------- catching


async def test_catch_succeeds_when_roll_below_chance(engine, rng, store):
    spawn = await engine.spawn_once(PIDGEY)
    rng.values = [0.5, 0.9]

    result = await engine.attempt_catch("Ash")

    assert result.ok
    assert result.outcome is CatchOutcome.OK
    assert result.species_id == PIDGEY
    assert result.species_name == "Pidgey"
    assert result.shiny is False
    assert store.spawns[0].captured_by == "ash"
    assert store.spawns[0].id == spawn.id
    assert store.participants == {"ash": "ash"}
    entry = store.collection[("ash", PIDGEY)]
    assert (entry.count, entry.shiny_count) == (1, 0)
    assert await engine.get_active_spawn() is None


async def test_catch_fails_when_roll_above_chance(engine, rng, store):
    await engine.spawn_once(PIDGEY)
    rng.values = [0.9, 0.9]

    result = await engine.attempt_catch("ash")

    assert result.outcome is CatchOutcome.FAILED
    assert result.roll == 0.9
    assert result.catch_chance == pytest.approx(0.7)
    assert store.spawns[0].captured_by is None
    assert store.collection == {}
    assert await engine.get_active_spawn() is not None


async def test_catch_chance_uses_tool_modifier(engine, rng):
    await engine.spawn_once(PIKACHU)
    rng.values = [0.3, 0.9]

    result = await engine.attempt_catch("ash", CaptureTool.GREATBALL)

    assert result.ok
    assert result.catch_chance == pytest.approx(0.375)


async def test_catch_chance_is_capped(engine, rng):
    await engine.spawn_once(PIDGEY)
    rng.values = [0.995, 0.9]

    result = await engine.attempt_catch("ash", CaptureTool.ULTRABALL)

    assert result.outcome is CatchOutcome.FAILED
    assert result.catch_chance == pytest.approx(0.99)


async def test_shiny_capture_increments_shiny_count(engine, rng, store):
    await engine.spawn_once(PIDGEY)
    rng.values = [0.1, 0.0]

    result = await engine.attempt_catch("misty")

    assert result.shiny is True
    entry = store.collection[("misty", PIDGEY)]
    assert (entry.count, entry.shiny_count) == (1, 1)


async def test_repeat_captures_increment_same_entry(engine, rng, store, clock):
    for _ in range(2):
        await engine.spawn_once(PIDGEY)
        rng.values = [0.1, 0.9]
        assert (await engine.attempt_catch("brock")).ok
        clock.advance(60)

    assert len(store.collection) == 1
    assert store.collection[("brock", PIDGEY)].count == 2


async def test_catch_without_spawn(engine):
    result = await engine.attempt_catch("ash")
    assert result.outcome is CatchOutcome.NO_SPAWN


async def test_catch_after_expiry_is_no_spawn(engine, clock):
    await engine.spawn_once(PIDGEY)
    clock.advance(30)

    result = await engine.attempt_catch("ash")
    assert result.outcome is CatchOutcome.NO_SPAWN


async def test_catch_after_capture_is_already_captured(engine, rng, clock):
    await engine.spawn_once(PIDGEY)
    rng.values = [0.1, 0.9]
    assert (await engine.attempt_catch("ash")).ok

    result = await engine.attempt_catch("misty")
    assert result.outcome is CatchOutcome.ALREADY_CAPTURED

    # Once the spawn would have expired anyway, it is just nothing to catch
    clock.advance(31)
    result = await engine.attempt_catch("brock")
    assert result.outcome is CatchOutcome.NO_SPAWN


async def test_concurrent_catches_have_single_winner(engine, rng, store):
    await engine.spawn_once(PIDGEY)
    rng.values = [0.0] * 40

    results = await asyncio.gather(
        *(engine.attempt_catch(f"trainer{i}") for i in range(20))
    )

    winners = [r for r in results if r.ok]
    assert len(winners) == 1
    assert all(
        r.outcome in (CatchOutcome.ALREADY_CAPTURED, CatchOutcome.NO_SPAWN)
        for r in results
        if not r.ok
    )
    assert sum(e.count for e in store.collection.values()) == 1


# ---------------------------------------------------------------- cooldown


async def test_cooldown_rejects_attempt_two_seconds_later(engine, clock):
    await engine.attempt_catch("ash")
    clock.advance(2)

    result = await engine.attempt_catch("ash")
    assert result.outcome is CatchOutcome.COOLDOWN


async def test_cooldown_is_per_participant(engine, clock):
    await engine.attempt_catch("ash")
    clock.advance(2)

    assert (await engine.attempt_catch("misty")).outcome is CatchOutcome.NO_SPAWN


async def test_cooldown_rejection_refreshes_timestamp(engine, clock):
    await engine.attempt_catch("ash")
    clock.advance(2)
    assert (await engine.attempt_catch("ash")).outcome is CatchOutcome.COOLDOWN

    clock.advance(4)
    assert (await engine.attempt_catch("ash")).outcome is CatchOutcome.COOLDOWN

    clock.advance(5)
    assert (await engine.attempt_catch("ash")).outcome is CatchOutcome.NO_SPAWN


async def test_cooldown_uses_normalized_participant(engine, clock):
    await engine.attempt_catch("Ash")
    clock.advance(1)

    assert (await engine.attempt_catch("  ASH ")).outcome is CatchOutcome.COOLDOWN


async def test_error_in_transaction_rolls_back_and_keeps_cooldown(
    engine, rng, store, clock, monkeypatch
):
    await engine.spawn_once(PIDGEY)
    rng.values = [0.1, 0.9]

    async def broken(self, participant_id, species_id, shiny):
        raise RuntimeError("disk full")

    monkeypatch.setattr(MemoryCatchUnit, "increment_collection", broken)

    with pytest.raises(RuntimeError):
        await engine.attempt_catch("ash")

    assert store.spawns[0].captured_by is None
    assert store.participants == {}
    assert "ash" in engine.cooldowns._last_attempt
    clock.advance(1)
    assert (await engine.attempt_catch("ash")).outcome is CatchOutcome.COOLDOWN


# ---------------------------------------------------------------- queries


async def test_leaderboard_orders_and_limits(engine, store):
    await add_catches(store, "ash", PIDGEY, 5)
    await add_catches(store, "misty", PIKACHU, 3, shiny=True)
    await add_catches(store, "brock", PIDGEY, 4)
    await add_catches(store, "brock", MEW, 5, shiny=True)

    rows = await engine.leaderboard(2)

    assert [(r.participant_id, r.total_caught) for r in rows] == [("brock", 9), ("ash", 5)]
    assert rows[0].shiny_total == 5


async def test_leaderboard_ties_are_stable(engine, store):
    await add_catches(store, "zed", PIDGEY, 2)
    await add_catches(store, "amy", PIDGEY, 2)

    rows = await engine.leaderboard(10)
    assert [r.participant_id for r in rows] == ["amy", "zed"]


async def test_get_pokedex(engine, store):
    await add_catches(store, "ash", SNORLAX, 1)
    await add_catches(store, "ash", PIDGEY, 2, shiny=True)
    await add_catches(store, "misty", MEW, 1)

    rows = await engine.get_pokedex("ASH")

    assert [(r.name, r.count, r.shiny_count) for r in rows] == [
        ("Pidgey", 2, 2),
        ("Snorlax", 1, 0),
    ]
