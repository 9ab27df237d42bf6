"""Database models package."""

from kickdex.database.models.base import Base, TimestampMixin
from kickdex.database.models.pokedex import PokedexEntry
from kickdex.database.models.spawn import Spawn
from kickdex.database.models.species import PokemonSpecies
from kickdex.database.models.token import TokenEntry
from kickdex.database.models.user import User

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Core
    "User",
    "PokemonSpecies",
    "Spawn",
    "PokedexEntry",
    # Credentials
    "TokenEntry",
]
