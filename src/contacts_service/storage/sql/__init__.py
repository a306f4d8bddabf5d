"""SQLAlchemy-backed contact storage."""

from .connection import create_all, create_engine, create_session_factory, engine_from_config
from .models import Base, ContactRecord
from .store import SqlContactStore

__all__ = [
    "Base",
    "ContactRecord",
    "SqlContactStore",
    "create_all",
    "create_engine",
    "create_session_factory",
    "engine_from_config",
]
