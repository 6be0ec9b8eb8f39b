"""Key-value preference persistence.

Preferences are read once at startup into an in-memory snapshot. Getters serve
from the snapshot; setters update it and write through to durable storage
before returning, so callers never observe a value that was not persisted.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chatsync.db.repositories import PreferenceRepository

logger = logging.getLogger(__name__)


class PreferenceStore(ABC):
    """Typed key-value access over a preference snapshot."""

    def __init__(self):
        self._values: dict[str, Any] = {}

    async def load(self) -> None:
        """Read every preference. Storage failures leave the snapshot empty."""
        try:
            self._values = await self._read_all()
        except Exception as e:
            logger.warning(f"Failed to load preferences, using defaults: {e}")
            self._values = {}

    @abstractmethod
    async def _read_all(self) -> dict[str, Any]:
        """Return every stored preference."""

    @abstractmethod
    async def _write(self, key: str, value: Any) -> None:
        """Persist a single preference."""

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        return value if isinstance(value, bool) else default

    def get_string(self, key: str, default: str | None = None) -> str | None:
        value = self._values.get(key)
        return value if isinstance(value, str) else default

    def get_string_list(self, key: str, default: list[str] | None = None) -> list[str]:
        value = self._values.get(key)
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return list(value)
        return list(default or [])

    async def set_bool(self, key: str, value: bool) -> None:
        await self._set(key, bool(value))

    async def set_string(self, key: str, value: str) -> None:
        await self._set(key, value)

    async def set_string_list(self, key: str, value: list[str]) -> None:
        await self._set(key, list(value))

    async def _set(self, key: str, value: Any) -> None:
        await self._write(key, value)
        self._values[key] = value


class InMemoryPreferenceStore(PreferenceStore):
    """Preference store that lives only as long as the process."""

    def __init__(self, initial: dict[str, Any] | None = None):
        super().__init__()
        self._backing: dict[str, Any] = dict(initial or {})

    async def _read_all(self) -> dict[str, Any]:
        return dict(self._backing)

    async def _write(self, key: str, value: Any) -> None:
        self._backing[key] = value


class SqlPreferenceStore(PreferenceStore):
    """Preference store persisted in the `preferences` table."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        super().__init__()
        self.session_maker = session_maker

    async def _read_all(self) -> dict[str, Any]:
        async with self.session_maker() as db:
            return await PreferenceRepository(db).as_dict()

    async def _write(self, key: str, value: Any) -> None:
        async with self.session_maker() as db:
            await PreferenceRepository(db).upsert(key, value)
        logger.debug(f"Preference '{key}' saved")
