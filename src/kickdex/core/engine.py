"""Spawn and catch engine."""

import asyncio
import random
from collections.abc import Callable
from datetime import datetime, timedelta

from kickdex.core.catalog import build_catalog
from kickdex.core.cooldown import CooldownTracker
from kickdex.core.rarity import catch_chance, pick_weighted_species
from kickdex.core.store import GameStore
from kickdex.core.types import (
    CaptureTool,
    CatchOutcome,
    CatchResult,
    LeaderboardRow,
    PokedexRow,
    SpawnInfo,
)
from kickdex.exceptions import SpeciesNotFoundError
from kickdex.logging import get_logger
from kickdex.utils import normalize_participant, utcnow

logger = get_logger(__name__)

DEFAULT_SHINY_RATE = 1 / 4096


class GameEngine:
    """Owns the single active spawn and the catch transaction."""

    def __init__(
        self,
        store: GameStore,
        *,
        spawn_duration_seconds: float = 30,
        cooldown_seconds: float = 5,
        shiny_rate: float = DEFAULT_SHINY_RATE,
        cooldowns: CooldownTracker | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.spawn_duration = timedelta(seconds=spawn_duration_seconds)
        self.shiny_rate = shiny_rate
        self.cooldowns = cooldowns or CooldownTracker(cooldown_seconds)
        self.rng = rng or random.Random()
        self.clock = clock
        self._spawn_lock = asyncio.Lock()

    async def ensure_catalog(self) -> int:
        """Seed the Generation I catalog if the species table is empty."""
        if await self.store.count_species():
            return 0
        rows = build_catalog()
        inserted = await self.store.add_species(rows)
        logger.info("Seeded species catalog", count=inserted)
        return inserted

    async def get_active_spawn(self) -> SpawnInfo | None:
        """Get the uncaptured, unexpired spawn, if any."""
        return await self.store.get_active_spawn(self.clock())

    async def spawn_once(self, species_id: int | None = None) -> SpawnInfo | None:
        """Create a spawn unless one is already active.

        Returns ``None`` when a spawn is active or the catalog is empty.
        """
        async with self._spawn_lock:
            if await self.get_active_spawn() is not None:
                return None

            if species_id is not None:
                species = await self.store.get_species(species_id)
                if species is None:
                    raise SpeciesNotFoundError(species_id)
            else:
                species = pick_weighted_species(
                    await self.store.list_species(), self.rng
                )
                if species is None:
                    logger.warning("No species found in catalog")
                    return None

            spawned_at = self.clock()
            spawn = await self.store.insert_spawn(
                species.id, spawned_at, spawned_at + self.spawn_duration
            )
            self.cooldowns.prune(spawned_at)

        logger.info(
            "Created spawn",
            spawn_id=str(spawn.id),
            species=spawn.name,
            rarity=spawn.rarity,
        )
        return spawn

    async def attempt_catch(
        self,
        participant_id: str,
        tool: CaptureTool = CaptureTool.POKEBALL,
    ) -> CatchResult:
        """Try to catch the active spawn for a participant."""
        participant_id = normalize_participant(participant_id)
        now = self.clock()

        if self.cooldowns.hit(participant_id, now):
            return CatchResult.failure(CatchOutcome.COOLDOWN)

        async with self.store.catch_unit() as unit:
            spawn = await unit.lock_active_spawn(now)
            if spawn is None:
                if await unit.recently_captured(now):
                    return CatchResult.failure(CatchOutcome.ALREADY_CAPTURED)
                return CatchResult.failure(CatchOutcome.NO_SPAWN)

            chance = catch_chance(spawn.base_rate, tool.modifier)
            roll = self.rng.random()
            shiny = self.rng.random() < self.shiny_rate

            if roll >= chance:
                logger.debug(
                    "Catch failed",
                    participant=participant_id,
                    species=spawn.name,
                    roll=roll,
                    catch_chance=chance,
                )
                return CatchResult.failure(
                    CatchOutcome.FAILED,
                    spawn_id=spawn.id,
                    species_id=spawn.species_id,
                    species_name=spawn.name,
                    roll=roll,
                    catch_chance=chance,
                )

            await unit.upsert_participant(participant_id, participant_id)
            await unit.mark_captured(spawn.id, participant_id, self.clock())
            await unit.increment_collection(participant_id, spawn.species_id, shiny)
            await unit.commit()

        logger.info(
            "Spawn captured",
            participant=participant_id,
            spawn_id=str(spawn.id),
            species=spawn.name,
            shiny=shiny,
            tool=tool.value,
        )
        return CatchResult(
            outcome=CatchOutcome.OK,
            spawn_id=spawn.id,
            species_id=spawn.species_id,
            species_name=spawn.name,
            shiny=shiny,
            roll=roll,
            catch_chance=chance,
        )

    async def leaderboard(self, limit: int = 10) -> list[LeaderboardRow]:
        """Get participants ranked by total captures."""
        return await self.store.leaderboard(max(0, limit))

    async def get_pokedex(self, participant_id: str) -> list[PokedexRow]:
        """Get a participant's collection entries."""
        return await self.store.pokedex(normalize_participant(participant_id))

    async def clear_active_spawn(self) -> int:
        """Force the active spawn to expire now."""
        expired = await self.store.expire_active_spawns(self.clock())
        if expired:
            logger.info("Cleared active spawn", expired=expired)
        return expired
