"""SQLAlchemy implementations of the game and credential stores."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kickdex.core.types import LeaderboardRow, PokedexRow, SpawnInfo, SpeciesInfo
from kickdex.database.models import PokedexEntry, PokemonSpecies, Spawn, TokenEntry, User
from kickdex.logging import get_logger

logger = get_logger(__name__)


def _active_spawn_query(now: datetime):
    return (
        select(Spawn)
        .where(Spawn.captured_by.is_(None))
        .where(Spawn.expires_at > now)
        .order_by(Spawn.spawned_at.desc())
        .limit(1)
    )


class SqlGameStore:
    """Game store over an async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def count_species(self) -> int:
        async with self._session_factory() as session:
            result = await session.execute(select(func.count(PokemonSpecies.id)))
            return result.scalar() or 0

    async def add_species(self, rows: Sequence[dict]) -> int:
        async with self._session_factory() as session:
            session.add_all([PokemonSpecies(**row) for row in rows])
            await session.commit()
        return len(rows)

    async def list_species(self) -> list[SpeciesInfo]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PokemonSpecies).order_by(PokemonSpecies.id)
            )
            return [species.to_info() for species in result.scalars().all()]

    async def get_species(self, species_id: int) -> SpeciesInfo | None:
        async with self._session_factory() as session:
            species = await session.get(PokemonSpecies, species_id)
            return species.to_info() if species else None

    async def get_active_spawn(self, now: datetime) -> SpawnInfo | None:
        async with self._session_factory() as session:
            result = await session.execute(_active_spawn_query(now))
            spawn = result.scalar_one_or_none()
            return spawn.to_info() if spawn else None

    async def insert_spawn(
        self, species_id: int, spawned_at: datetime, expires_at: datetime
    ) -> SpawnInfo:
        async with self._session_factory() as session:
            species = await session.get(PokemonSpecies, species_id)
            if species is None:
                raise LookupError(f"Species {species_id} does not exist")
            spawn = Spawn(
                id=uuid.uuid4(),
                species_id=species_id,
                spawned_at=spawned_at,
                expires_at=expires_at,
            )
            spawn.species = species
            info = spawn.to_info()
            session.add(spawn)
            await session.commit()
        return info

    async def expire_active_spawns(self, now: datetime) -> int:
        async with self._session_factory() as session:
            result = await session.execute(
                update(Spawn)
                .where(Spawn.captured_by.is_(None))
                .where(Spawn.expires_at > now)
                .values(expires_at=now)
            )
            await session.commit()
            return result.rowcount or 0

    async def leaderboard(self, limit: int) -> list[LeaderboardRow]:
        total = func.sum(PokedexEntry.count).label("total_caught")
        shiny = func.sum(PokedexEntry.shiny_count).label("shiny_total")
        async with self._session_factory() as session:
            result = await session.execute(
                select(PokedexEntry.user_id, total, shiny)
                .group_by(PokedexEntry.user_id)
                .order_by(total.desc(), PokedexEntry.user_id)
                .limit(limit)
            )
            return [
                LeaderboardRow(
                    participant_id=user_id,
                    total_caught=int(total_caught or 0),
                    shiny_total=int(shiny_total or 0),
                )
                for user_id, total_caught, shiny_total in result.all()
            ]

    async def pokedex(self, participant_id: str) -> list[PokedexRow]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(
                    PokemonSpecies.id,
                    PokemonSpecies.name,
                    PokedexEntry.count,
                    PokedexEntry.shiny_count,
                )
                .join(PokemonSpecies, PokedexEntry.species_id == PokemonSpecies.id)
                .where(PokedexEntry.user_id == participant_id)
                .order_by(PokemonSpecies.id)
            )
            return [
                PokedexRow(species_id=sid, name=name, count=count, shiny_count=shiny)
                for sid, name, count, shiny in result.all()
            ]

    @asynccontextmanager
    async def catch_unit(self) -> AsyncIterator[SqlCatchUnit]:
        async with self._session_factory() as session:
            unit = SqlCatchUnit(session)
            try:
                yield unit
            finally:
                if not unit.committed:
                    await session.rollback()


class SqlCatchUnit:
    """One catch transaction; the active spawn row is held ``FOR UPDATE``."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.committed = False

    async def lock_active_spawn(self, now: datetime) -> SpawnInfo | None:
        result = await self.session.execute(
            _active_spawn_query(now).with_for_update(of=Spawn)
        )
        spawn = result.scalar_one_or_none()
        return spawn.to_info() if spawn else None

    async def recently_captured(self, now: datetime) -> bool:
        result = await self.session.execute(
            select(Spawn.captured_by, Spawn.expires_at)
            .order_by(Spawn.spawned_at.desc())
            .limit(1)
        )
        row = result.first()
        return bool(row and row.captured_by is not None and row.expires_at > now)

    async def mark_captured(
        self, spawn_id: uuid.UUID, participant_id: str, captured_at: datetime
    ) -> None:
        result = await self.session.execute(
            update(Spawn)
            .where(Spawn.id == spawn_id)
            .where(Spawn.captured_by.is_(None))
            .values(captured_by=participant_id, captured_at=captured_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise RuntimeError(f"Spawn {spawn_id} is already captured")

    async def upsert_participant(self, participant_id: str, username: str) -> None:
        user = await self.session.get(User, participant_id)
        if user is None:
            self.session.add(User(id=participant_id, username=username))
            await self.session.flush()

    async def increment_collection(
        self, participant_id: str, species_id: int, shiny: bool
    ) -> None:
        entry = await self.session.get(PokedexEntry, (participant_id, species_id))
        if entry is None:
            entry = PokedexEntry(
                user_id=participant_id,
                species_id=species_id,
                count=0,
                shiny_count=0,
            )
            self.session.add(entry)
        entry.count += 1
        if shiny:
            entry.shiny_count += 1

    async def commit(self) -> None:
        await self.session.commit()
        self.committed = True


class SqlKeyValueStore:
    """Credential key/value store over the ``tokens`` table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_value(self, key: str) -> str | None:
        async with self._session_factory() as session:
            entry = await session.get(TokenEntry, key)
            return entry.value if entry else None

    async def set_value(self, key: str, value: str) -> None:
        async with self._session_factory() as session:
            entry = await session.get(TokenEntry, key)
            if entry is None:
                session.add(TokenEntry(key=key, value=value))
            else:
                entry.value = value
            await session.commit()
