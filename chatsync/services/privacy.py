"""Block and mute state."""

import json
import logging
import time
from collections.abc import Callable

from chatsync.schemas import Message
from chatsync.services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

BLOCKED_CONTACTS_KEY = "blocked_contacts"
BLOCKED_SINCE_KEY = "blocked_since"
MUTED_CONTACTS_KEY = "muted_contacts"


class PrivacyPolicy:
    """Block and mute records for contacts.

    Blocking is a visibility cutover: received messages newer than the block
    timestamp are hidden, older history stays visible. Muting only silences
    notifications. Neither deletes backend data.
    """

    def __init__(self, store: PreferenceStore, clock: Callable[[], float] = time.time):
        self.store = store
        self.clock = clock
        self._blocked: list[str] = []
        self._blocked_since: dict[str, int] = {}
        self._muted: list[str] = []

    @property
    def blocked_contacts(self) -> list[str]:
        return list(self._blocked)

    @property
    def muted_contacts(self) -> list[str]:
        return list(self._muted)

    def load(self) -> None:
        """Read block and mute records from the (already loaded) store."""
        blocked = self.store.get_string_list(BLOCKED_CONTACTS_KEY)
        since = self._decode_since(self.store.get_string(BLOCKED_SINCE_KEY))

        consistent = [c for c in blocked if c in since]
        dropped = set(blocked) ^ set(since)
        if dropped:
            logger.warning(f"Ignoring incomplete block records for: {sorted(dropped)}")

        self._blocked = consistent
        self._blocked_since = {c: since[c] for c in consistent}
        self._muted = self.store.get_string_list(MUTED_CONTACTS_KEY)

    @staticmethod
    def _decode_since(raw: str | None) -> dict[str, int]:
        if not raw:
            return {}
        try:
            decoded = json.loads(raw)
            return {str(k): int(v) for k, v in decoded.items()}
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Unreadable block timestamps, ignoring: {e}")
            return {}

    async def _save_blocks(self, blocked: list[str], since: dict[str, int]) -> None:
        await self.store.set_string_list(BLOCKED_CONTACTS_KEY, blocked)
        await self.store.set_string(BLOCKED_SINCE_KEY, json.dumps(since))
        self._blocked = blocked
        self._blocked_since = since

    def is_blocked(self, contact_id: str) -> bool:
        return contact_id in self._blocked and contact_id in self._blocked_since

    def blocked_since(self, contact_id: str) -> int | None:
        return self._blocked_since.get(contact_id) if self.is_blocked(contact_id) else None

    async def block(self, contact_id: str) -> bool:
        """Block a contact from now on. Returns False if already blocked."""
        if self.is_blocked(contact_id):
            return False
        blocked = [c for c in self._blocked if c != contact_id] + [contact_id]
        since = {**self._blocked_since, contact_id: int(self.clock())}
        await self._save_blocks(blocked, since)
        logger.info(f"Blocked {contact_id} at {since[contact_id]}")
        return True

    async def unblock(self, contact_id: str) -> bool:
        """Remove a block. Returns False if the contact was not blocked."""
        if contact_id not in self._blocked and contact_id not in self._blocked_since:
            return False
        blocked = [c for c in self._blocked if c != contact_id]
        since = {c: ts for c, ts in self._blocked_since.items() if c != contact_id}
        await self._save_blocks(blocked, since)
        logger.info(f"Unblocked {contact_id}")
        return True

    def is_muted(self, contact_id: str) -> bool:
        return contact_id in self._muted

    async def _save_muted(self, muted: list[str]) -> None:
        await self.store.set_string_list(MUTED_CONTACTS_KEY, muted)
        self._muted = muted

    async def mute(self, contact_id: str) -> bool:
        if self.is_muted(contact_id):
            return False
        await self._save_muted([*self._muted, contact_id])
        logger.info(f"Muted {contact_id}")
        return True

    async def unmute(self, contact_id: str) -> bool:
        if not self.is_muted(contact_id):
            return False
        await self._save_muted([c for c in self._muted if c != contact_id])
        logger.info(f"Unmuted {contact_id}")
        return True

    def visible(self, contact_id: str, messages: list[Message]) -> list[Message]:
        """Drop received messages that arrived after the contact was blocked."""
        cutover = self.blocked_since(contact_id)
        if cutover is None:
            return list(messages)
        return [m for m in messages if not (m.is_received and m.timestamp > cutover)]
