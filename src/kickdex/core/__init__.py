"""Game core: spawning, catching and the rarity model."""

from kickdex.core.cooldown import CooldownTracker
from kickdex.core.engine import GameEngine
from kickdex.core.scheduler import SpawnScheduler
from kickdex.core.types import (
    CaptureTool,
    CatchOutcome,
    CatchResult,
    LeaderboardRow,
    PokedexRow,
    Rarity,
    SpawnInfo,
    SpeciesInfo,
)

__all__ = [
    "GameEngine",
    "SpawnScheduler",
    "CooldownTracker",
    "CaptureTool",
    "CatchOutcome",
    "CatchResult",
    "LeaderboardRow",
    "PokedexRow",
    "Rarity",
    "SpawnInfo",
    "SpeciesInfo",
]
