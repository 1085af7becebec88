"""Database module."""
from emdn_matching.db.base import (
    Base,
    UUIDMixin,
    engine,
    async_session_maker,
)

__all__ = [
    "Base",
    "UUIDMixin",
    "engine",
    "async_session_maker",
]
