"""SQLAlchemy models."""

from chatsync.models.base import Base, TimestampMixin
from chatsync.models.preference import Preference

__all__ = ["Base", "Preference", "TimestampMixin"]
