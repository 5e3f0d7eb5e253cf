"""Async database infrastructure (SQLAlchemy 2.0)."""

from realmforge.core.database.base import Base, IdMixin, TimestampMixin
from realmforge.core.database.service import (
    DatabaseInitializationError,
    DatabaseNotInitializedError,
    DatabaseService,
)

__all__ = [
    "Base",
    "IdMixin",
    "TimestampMixin",
    "DatabaseService",
    "DatabaseInitializationError",
    "DatabaseNotInitializedError",
]
