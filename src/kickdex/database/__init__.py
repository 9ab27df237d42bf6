"""Database package."""

from kickdex.database.repository import SqlGameStore, SqlKeyValueStore
from kickdex.database.session import (
    async_session_factory,
    close_db,
    engine,
    init_db,
)

__all__ = [
    "engine",
    "async_session_factory",
    "init_db",
    "close_db",
    "SqlGameStore",
    "SqlKeyValueStore",
]
