"""In-process implementations of the storage contracts.

A single ``asyncio.Lock`` serializes catch units, and writes are staged until
commit, so the same at-most-one-captor guarantee holds as with row locks.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from kickdex.core.types import LeaderboardRow, PokedexRow, SpawnInfo, SpeciesInfo


@dataclass
class _SpawnRecord:
    id: uuid.UUID
    species_id: int
    spawned_at: datetime
    expires_at: datetime
    captured_by: str | None = None
    captured_at: datetime | None = None


@dataclass
class _CollectionRecord:
    count: int = 0
    shiny_count: int = 0


class MemoryGameStore:
    """Game store backed by plain dictionaries."""

    def __init__(self) -> None:
        self.species: dict[int, SpeciesInfo] = {}
        self.spawns: list[_SpawnRecord] = []
        self.participants: dict[str, str] = {}
        self.collection: dict[tuple[str, int], _CollectionRecord] = {}
        self._lock = asyncio.Lock()

    async def count_species(self) -> int:
        return len(self.species)

    async def add_species(self, rows: Sequence[dict]) -> int:
        next_id = max(self.species, default=0) + 1
        for offset, row in enumerate(rows):
            species_id = row.get("id", next_id + offset)
            self.species[species_id] = SpeciesInfo(
                id=species_id,
                name=row["name"],
                rarity=row["rarity"],
                base_rate=row["base_rate"],
            )
        return len(rows)

    async def list_species(self) -> list[SpeciesInfo]:
        return [self.species[k] for k in sorted(self.species)]

    async def get_species(self, species_id: int) -> SpeciesInfo | None:
        return self.species.get(species_id)

    def _info(self, record: _SpawnRecord) -> SpawnInfo:
        species = self.species[record.species_id]
        return SpawnInfo(
            id=record.id,
            species_id=record.species_id,
            name=species.name,
            rarity=species.rarity,
            base_rate=species.base_rate,
            spawned_at=record.spawned_at,
            expires_at=record.expires_at,
            captured_by=record.captured_by,
            captured_at=record.captured_at,
        )

    def _latest(self, now: datetime, active_only: bool) -> _SpawnRecord | None:
        for record in sorted(self.spawns, key=lambda r: r.spawned_at, reverse=True):
            if not active_only:
                return record
            if record.captured_by is None and record.expires_at > now:
                return record
        return None

    async def get_active_spawn(self, now: datetime) -> SpawnInfo | None:
        record = self._latest(now, active_only=True)
        return self._info(record) if record else None

    async def insert_spawn(
        self, species_id: int, spawned_at: datetime, expires_at: datetime
    ) -> SpawnInfo:
        record = _SpawnRecord(
            id=uuid.uuid4(),
            species_id=species_id,
            spawned_at=spawned_at,
            expires_at=expires_at,
        )
        self.spawns.append(record)
        return self._info(record)

    async def expire_active_spawns(self, now: datetime) -> int:
        expired = 0
        for record in self.spawns:
            if record.captured_by is None and record.expires_at > now:
                record.expires_at = now
                expired += 1
        return expired

    async def leaderboard(self, limit: int) -> list[LeaderboardRow]:
        totals: dict[str, list[int]] = {}
        for (pid, _), entry in self.collection.items():
            row = totals.setdefault(pid, [0, 0])
            row[0] += entry.count
            row[1] += entry.shiny_count
        ordered = sorted(totals.items(), key=lambda item: (-item[1][0], item[0]))
        return [
            LeaderboardRow(participant_id=pid, total_caught=total, shiny_total=shiny)
            for pid, (total, shiny) in ordered[:limit]
        ]

    async def pokedex(self, participant_id: str) -> list[PokedexRow]:
        rows = []
        for (pid, species_id), entry in sorted(self.collection.items()):
            if pid != participant_id:
                continue
            rows.append(PokedexRow(
                species_id=species_id,
                name=self.species[species_id].name,
                count=entry.count,
                shiny_count=entry.shiny_count,
            ))
        return rows

    @asynccontextmanager
    async def catch_unit(self) -> AsyncIterator[MemoryCatchUnit]:
        async with self._lock:
            yield MemoryCatchUnit(self)


class MemoryCatchUnit:
    """Unit of work over ``MemoryGameStore``; writes apply on ``commit``."""

    def __init__(self, store: MemoryGameStore) -> None:
        self._store = store
        self._captures: list[tuple[uuid.UUID, str, datetime]] = []
        self._participants: dict[str, str] = {}
        self._increments: list[tuple[str, int, bool]] = []
        self.committed = False

    async def lock_active_spawn(self, now: datetime) -> SpawnInfo | None:
        return await self._store.get_active_spawn(now)

    async def recently_captured(self, now: datetime) -> bool:
        latest = self._store._latest(now, active_only=False)
        return bool(latest and latest.captured_by and latest.expires_at > now)

    async def mark_captured(
        self, spawn_id: uuid.UUID, participant_id: str, captured_at: datetime
    ) -> None:
        self._captures.append((spawn_id, participant_id, captured_at))

    async def upsert_participant(self, participant_id: str, username: str) -> None:
        self._participants[participant_id] = username

    async def increment_collection(
        self, participant_id: str, species_id: int, shiny: bool
    ) -> None:
        self._increments.append((participant_id, species_id, shiny))

    async def commit(self) -> None:
        store = self._store
        by_id = {record.id: record for record in store.spawns}
        for spawn_id, participant_id, captured_at in self._captures:
            record = by_id[spawn_id]
            if record.captured_by is not None:
                raise RuntimeError(f"Spawn {spawn_id} is already captured")
            record.captured_by = participant_id
            record.captured_at = captured_at
        for participant_id, username in self._participants.items():
            store.participants.setdefault(participant_id, username)
        for participant_id, species_id, shiny in self._increments:
            entry = store.collection.setdefault(
                (participant_id, species_id), _CollectionRecord()
            )
            entry.count += 1
            if shiny:
                entry.shiny_count += 1
        self.committed = True


class MemoryKeyValueStore:
    """Key/value store backed by a dictionary."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    async def get_value(self, key: str) -> str | None:
        return self.values.get(key)

    async def set_value(self, key: str, value: str) -> None:
        self.values[key] = value
