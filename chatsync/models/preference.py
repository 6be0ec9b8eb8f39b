"""Preference model for durable engine settings."""

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from chatsync.models.base import Base, TimestampMixin


class Preference(Base, TimestampMixin):
    """One key-value preference row (block list, mute list, toggles, pins)."""

    __tablename__ = "preferences"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
