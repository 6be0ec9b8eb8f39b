"""Repository classes for database operations."""

from chatsync.db.repositories.base import BaseRepository
from chatsync.db.repositories.preference import PreferenceRepository

__all__ = ["BaseRepository", "PreferenceRepository"]
