"""Repository for preference operations."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chatsync.db.repositories.base import BaseRepository
from chatsync.models import Preference


class PreferenceRepository(BaseRepository[Preference]):
    """Repository for managing key-value preferences."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, Preference)

    async def get_by_key(self, key: str) -> Preference | None:
        """Get a preference by key."""
        stmt = select(Preference).where(Preference.key == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def as_dict(self) -> dict[str, Any]:
        """Load every preference as a plain mapping."""
        return {row.key: row.value for row in await self.get_all()}

    async def upsert(self, key: str, value: Any) -> Preference:
        """Create or update a preference by key."""
        existing = await self.get_by_key(key)
        if existing:
            return await self.update(existing, value=value)
        return await self.create(key=key, value=value)
