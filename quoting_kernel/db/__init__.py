"""Database infrastructure for the versioned record store."""

from quoting_kernel.db.base import Base
from quoting_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    init_engine_from_url,
    reset_engine,
    session_scope,
)

__all__ = [
    "Base",
    "create_tables",
    "drop_tables",
    "get_engine",
    "get_session",
    "init_engine_from_url",
    "reset_engine",
    "session_scope",
]
