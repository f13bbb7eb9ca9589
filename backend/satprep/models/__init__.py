"""
Models package for the SAT practice backend.
"""
from .base import Base, async_engine, AsyncSessionLocal, get_db, create_all_tables
from .models import (
    User,
    PracticeSession,
    Response,
    SessionMode,
)

__all__ = [
    "Base",
    "async_engine",
    "AsyncSessionLocal",
    "get_db",
    "create_all_tables",
    "User",
    "PracticeSession",
    "Response",
    "SessionMode",
]
