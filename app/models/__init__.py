# app/models/__init__.py
"""
Models package
SQLAlchemy models and DB connection setup
"""

from .base import Base, get_async_session, init_db, utc_now
from .user import User
from .letter import PermissionLetter, PermissionParticipant, LETTER_TYPES, LETTER_STATUSES

__all__ = [
    "Base",
    "get_async_session",
    "init_db",
    "utc_now",
    "User",
    "PermissionLetter",
    "PermissionParticipant",
    "LETTER_TYPES",
    "LETTER_STATUSES",
]
