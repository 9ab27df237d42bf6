"""Value types shared by the engine, the stores and the chat layer."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Rarity(str, Enum):
    """Rarity tiers of the species catalog."""

    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    LEGENDARY = "legendary"


class CaptureTool(str, Enum):
    """Balls a participant can throw, each with a fixed catch modifier."""

    POKEBALL = "pokeball"
    GREATBALL = "greatball"
    ULTRABALL = "ultraball"

    @property
    def modifier(self) -> float:
        return CAPTURE_TOOL_MODIFIERS[self]

    @classmethod
    def parse(cls, value: str | None) -> CaptureTool:
        """Resolve a chat argument to a tool; ``None`` or blank means a Poke Ball.

        Raises ``ValueError`` for names that are not a known ball.
        """
        if value is None or not value.strip():
            return cls.POKEBALL
        name = value.strip().lower().replace(" ", "").replace("-", "")
        return cls(CAPTURE_TOOL_ALIASES.get(name, name))


CAPTURE_TOOL_MODIFIERS: dict[CaptureTool, float] = {
    CaptureTool.POKEBALL: 1.0,
    CaptureTool.GREATBALL: 1.5,
    CaptureTool.ULTRABALL: 2.0,
}

CAPTURE_TOOL_ALIASES: dict[str, str] = {
    "ball": "pokeball",
    "great": "greatball",
    "ultra": "ultraball",
}


class CatchOutcome(str, Enum):
    """Result codes of a catch attempt."""

    OK = "ok"
    NO_SPAWN = "no_spawn"
    ALREADY_CAPTURED = "already_captured"
    COOLDOWN = "cooldown"
    FAILED = "failed"


@dataclass(frozen=True)
class SpeciesInfo:
    """A catalog entry."""

    id: int
    name: str
    rarity: str
    base_rate: float


@dataclass(frozen=True)
class SpawnInfo:
    """A spawn joined with its species, as returned to callers."""

    id: uuid.UUID
    species_id: int
    name: str
    rarity: str
    base_rate: float
    spawned_at: datetime
    expires_at: datetime
    captured_by: str | None = None
    captured_at: datetime | None = None

    def is_active(self, now: datetime) -> bool:
        return self.captured_by is None and self.expires_at > now


@dataclass(frozen=True)
class CatchResult:
    """Outcome of ``GameEngine.attempt_catch``.

    ``roll`` and ``catch_chance`` are diagnostics for a missed throw and are not
    meant to be shown in chat.
    """

    outcome: CatchOutcome
    spawn_id: uuid.UUID | None = None
    species_id: int | None = None
    species_name: str | None = None
    shiny: bool = False
    roll: float | None = None
    catch_chance: float | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is CatchOutcome.OK

    @classmethod
    def failure(cls, outcome: CatchOutcome, **kwargs) -> CatchResult:
        return cls(outcome=outcome, **kwargs)


@dataclass(frozen=True)
class LeaderboardRow:
    participant_id: str
    total_caught: int
    shiny_total: int


@dataclass(frozen=True)
class PokedexRow:
    species_id: int
    name: str
    count: int
    shiny_count: int
