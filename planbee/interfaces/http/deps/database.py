"""Database session dependency."""

from planbee.infrastructure.database import get_session as get_db_session

__all__ = ["get_db_session"]
