"""Database infrastructure helpers (engine, sessions, migrations)."""

from .base import Base
from .session import close_db, get_engine, get_session, init_db

__all__ = ["Base", "close_db", "get_engine", "get_session", "init_db"]
