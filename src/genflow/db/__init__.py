"""Database models and session helpers."""

from .db_init import create_db_engine, create_session_factory, init_db
from .db_models import Base, GenerationTaskModel

__all__ = [
    "Base",
    "GenerationTaskModel",
    "create_db_engine",
    "create_session_factory",
    "init_db",
]
