"""Shared fixtures for the Kickdex test suite."""

from __future__ import annotations

import asyncio
import random
from datetime import datetime, timedelta

import pytest

from kickdex.core.engine import GameEngine
from kickdex.core.memory_store import MemoryGameStore, MemoryKeyValueStore

START = datetime(2024, 1, 1, 12, 0, 0)

SPECIES_ROWS = [
    {"name": "Pidgey", "rarity": "common", "base_rate": 0.7},
    {"name": "Pikachu", "rarity": "uncommon", "base_rate": 0.25},
    {"name": "Snorlax", "rarity": "rare", "base_rate": 0.08},
    {"name": "Mew", "rarity": "legendary", "base_rate": 0.01},
]


class FakeClock:
    """Settable stand-in for ``utcnow``."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class SequenceRandom(random.Random):
    """Random whose ``random()`` replays a fixed sequence, then falls back."""

    def __init__(self, values: list[float] | None = None, seed: int = 0) -> None:
        super().__init__(seed)
        self.values = list(values or [])

    def random(self) -> float:
        if self.values:
            return self.values.pop(0)
        return super().random()


class FakeTimer:
    """Fake ``sleep``/``monotonic`` pair; sleeping advances the clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay
        await asyncio.sleep(0)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> SequenceRandom:
    return SequenceRandom()


@pytest.fixture
def timer() -> FakeTimer:
    return FakeTimer()


@pytest.fixture
def species_rows() -> list[dict]:
    return [dict(row) for row in SPECIES_ROWS]


@pytest.fixture
async def store(species_rows: list[dict]) -> MemoryGameStore:
    store = MemoryGameStore()
    await store.add_species(species_rows)
    return store


@pytest.fixture
def kv_store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def engine(store: MemoryGameStore, clock: FakeClock, rng: SequenceRandom) -> GameEngine:
    return GameEngine(
        store,
        spawn_duration_seconds=30,
        cooldown_seconds=5,
        shiny_rate=1 / 4096,
        rng=rng,
        clock=clock,
    )
