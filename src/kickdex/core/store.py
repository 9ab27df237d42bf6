"""Storage contracts used by the game engine and the credential manager.

``GameStore.catch_unit`` is the locked read: it yields a ``CatchUnit`` that
holds exclusive access to the active spawn until the unit ends. Writes staged
on the unit only become visible after ``commit``; leaving the context without
committing, or through an exception, discards them.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager
from datetime import datetime
from typing import Protocol

from kickdex.core.types import LeaderboardRow, PokedexRow, SpawnInfo, SpeciesInfo


class CatchUnit(Protocol):
    async def lock_active_spawn(self, now: datetime) -> SpawnInfo | None:
        """Lock and return the active spawn, if any."""

    async def recently_captured(self, now: datetime) -> bool:
        """Whether the latest spawn was captured before it would have expired."""

    async def mark_captured(
        self, spawn_id: uuid.UUID, participant_id: str, captured_at: datetime
    ) -> None: ...

    async def upsert_participant(self, participant_id: str, username: str) -> None: ...

    async def increment_collection(
        self, participant_id: str, species_id: int, shiny: bool
    ) -> None: ...

    async def commit(self) -> None: ...


class GameStore(Protocol):
    async def count_species(self) -> int: ...

    async def add_species(self, rows: Sequence[dict]) -> int: ...

    async def list_species(self) -> list[SpeciesInfo]: ...

    async def get_species(self, species_id: int) -> SpeciesInfo | None: ...

    async def get_active_spawn(self, now: datetime) -> SpawnInfo | None: ...

    async def insert_spawn(
        self, species_id: int, spawned_at: datetime, expires_at: datetime
    ) -> SpawnInfo: ...

    async def expire_active_spawns(self, now: datetime) -> int: ...

    async def leaderboard(self, limit: int) -> list[LeaderboardRow]: ...

    async def pokedex(self, participant_id: str) -> list[PokedexRow]: ...

    def catch_unit(self) -> AbstractAsyncContextManager[CatchUnit]: ...


class KeyValueStore(Protocol):
    async def get_value(self, key: str) -> str | None: ...

    async def set_value(self, key: str, value: str) -> None: ...
