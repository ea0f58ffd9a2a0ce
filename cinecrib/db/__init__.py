"""Database module."""

from cinecrib.db.database import (
    async_session_maker,
    begin_read_snapshot,
    engine,
    get_db,
    init_db,
    ping_database,
)

__all__ = [
    "async_session_maker",
    "begin_read_snapshot",
    "engine",
    "get_db",
    "init_db",
    "ping_database",
]
