"""Shared in-memory state bag and change-notification channel."""

import logging
from collections.abc import Callable

from chatsync.schemas import Contact, Message

logger = logging.getLogger(__name__)

Listener = Callable[[], None]


class ChatState:
    """Derived view of backend chat state shared by every component.

    All mutations happen on the event loop thread between awaits, which keeps
    each map update atomic with respect to the poller and user actions.
    """

    def __init__(self):
        self.contacts: list[Contact] = []
        self.archived_contacts: list[Contact] = []
        self.messages: list[Message] = []  # open conversation, oldest first
        self.unread_counts: dict[str, int] = {}
        self.last_received_counts: dict[str, int] = {}
        self.last_received_at: dict[str, int] = {}
        self.previews: dict[str, str] = {}
        self.last_known_contact_count = 0
        self.contacts_loaded = False
        self.public_pending_count = 0
        self.is_loading = False
        self._listeners: list[Listener] = []

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify_listeners(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.warning(f"State listener failed: {e}")

    def find_contact(self, contact_id: str) -> Contact | None:
        for contact in self.contacts:
            if contact.id == contact_id:
                return contact
        for contact in self.archived_contacts:
            if contact.id == contact_id:
                return contact
        return None

    def known_ids(self) -> set[str]:
        return {c.id for c in self.contacts} | {c.id for c in self.archived_contacts}

    def get_unread_count(self, contact_id: str) -> int:
        return self.unread_counts.get(contact_id, 0)

    def get_preview(self, contact_id: str) -> str:
        return self.previews.get(contact_id, "")

    def has_messages(self, contact_id: str) -> bool:
        return bool(self.previews.get(contact_id)) or self.last_received_counts.get(contact_id, 0) > 0

    def add_unread(self, contact_id: str, count: int) -> None:
        if count > 0:
            self.unread_counts[contact_id] = self.unread_counts.get(contact_id, 0) + count

    def forget_messages(self, contact_id: str) -> None:
        """Drop every derived message cache for a contact."""
        self.previews.pop(contact_id, None)
        self.last_received_counts.pop(contact_id, None)
        self.last_received_at.pop(contact_id, None)
        self.unread_counts.pop(contact_id, None)

    def prune(self, live_ids: set[str]) -> list[str]:
        """Forget caches of contacts the backend no longer reports."""
        cached = (
            set(self.previews)
            | set(self.last_received_counts)
            | set(self.last_received_at)
            | set(self.unread_counts)
        )
        stale = sorted(cached - live_ids)
        for contact_id in stale:
            self.forget_messages(contact_id)
        self.archived_contacts = [c for c in self.archived_contacts if c.id in live_ids]
        return stale
