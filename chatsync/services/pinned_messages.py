"""Pinned message tracking."""

import json
import logging

from chatsync.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

PINNED_MESSAGES_KEY = "pinned_messages"


class PinnedMessages:
    """Per-contact sets of pinned message ids, persisted as one JSON object."""

    def __init__(self, store: PreferenceStore):
        self.store = store
        self._pinned: dict[str, set[str]] = {}

    def load(self) -> None:
        raw = self.store.get_string(PINNED_MESSAGES_KEY)
        self._pinned = {}
        if not raw:
            return
        try:
            for contact_id, ids in json.loads(raw).items():
                self._pinned[contact_id] = set(ids)
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Error loading pinned messages: {e}")
            self._pinned = {}

    async def _save(self, pinned: dict[str, set[str]]) -> None:
        data = {k: sorted(v) for k, v in pinned.items() if v}
        await self.store.set_string(PINNED_MESSAGES_KEY, json.dumps(data))
        self._pinned = {k: v for k, v in pinned.items() if v}

    def _with(self, contact_id: str, ids: set[str]) -> dict[str, set[str]]:
        return {**self._pinned, contact_id: ids}

    def is_pinned(self, contact_id: str, message_id: str) -> bool:
        return message_id in self._pinned.get(contact_id, set())

    async def pin(self, contact_id: str, message_id: str) -> None:
        await self._save(self._with(contact_id, self.pinned_ids(contact_id) | {message_id}))

    async def unpin(self, contact_id: str, message_id: str) -> None:
        await self._save(self._with(contact_id, self.pinned_ids(contact_id) - {message_id}))

    async def toggle(self, contact_id: str, message_id: str) -> bool:
        """Flip the pin state. Returns True if the message is now pinned."""
        ids = self.pinned_ids(contact_id) ^ {message_id}
        await self._save(self._with(contact_id, ids))
        return message_id in ids

    def pinned_ids(self, contact_id: str) -> set[str]:
        return set(self._pinned.get(contact_id, set()))

    def pinned_count(self, contact_id: str) -> int:
        return len(self._pinned.get(contact_id, set()))

    async def clear_for_contact(self, contact_id: str) -> None:
        if contact_id in self._pinned:
            await self._save({k: v for k, v in self._pinned.items() if k != contact_id})
