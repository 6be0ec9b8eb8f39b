"""Notification decisions and the delivery sink interface."""

import logging
from collections.abc import Awaitable, Callable
from typing import Protocol

from chatsync.core.text import preview_for, sanitize_text
from chatsync.schemas import Contact, Message, NotificationIntent
from chatsync.services.preference_store import PreferenceStore
from chatsync.services.privacy import PrivacyPolicy
from chatsync.services.selection import SelectionState

logger = logging.getLogger(__name__)

NOTIFICATIONS_ENABLED_KEY = "notifications_enabled"
SOUND_ENABLED_KEY = "sound_enabled"

FocusProvider = Callable[[], Awaitable[bool]]


class NotificationSink(Protocol):
    """External delivery of user-visible notifications."""

    def notify(self, title: str, body: str, silent: bool) -> None: ...


class LoggingNotificationSink:
    """Sink that only logs; used when no desktop integration is wired in."""

    def notify(self, title: str, body: str, silent: bool) -> None:
        logger.info(f"Notification (silent={silent}): {title} - {body}")


async def always_focused() -> bool:
    return True


class NotificationDecider:
    """Decides whether a contact delta should notify, and renders the text.

    Every path goes through `should_notify` so the enablement, mute, and
    focus rules cannot drift apart.
    """

    def __init__(
        self,
        store: PreferenceStore,
        privacy: PrivacyPolicy,
        selection: SelectionState,
        sink: NotificationSink | None = None,
        is_focused: FocusProvider = always_focused,
    ):
        self.store = store
        self.privacy = privacy
        self.selection = selection
        self.sink = sink or LoggingNotificationSink()
        self.is_focused = is_focused
        self.notifications_enabled = True
        self.sound_enabled = True

    def load(self) -> None:
        self.notifications_enabled = self.store.get_bool(NOTIFICATIONS_ENABLED_KEY, True)
        self.sound_enabled = self.store.get_bool(SOUND_ENABLED_KEY, True)

    async def set_notifications_enabled(self, value: bool) -> None:
        await self.store.set_bool(NOTIFICATIONS_ENABLED_KEY, value)
        self.notifications_enabled = value

    async def set_sound_enabled(self, value: bool) -> None:
        await self.store.set_bool(SOUND_ENABLED_KEY, value)
        self.sound_enabled = value

    async def should_notify(self, contact_id: str) -> bool:
        if not self.notifications_enabled or self.privacy.is_muted(contact_id):
            return False
        if not self.selection.is_selected(contact_id):
            return True
        try:
            return not await self.is_focused()
        except Exception as e:
            logger.warning(f"Focus check failed, assuming unfocused: {e}")
            return True

    def emit(self, title: str, body: str) -> NotificationIntent:
        intent = NotificationIntent(
            title=sanitize_text(title),
            body=sanitize_text(body),
            silent=not self.sound_enabled,
        )
        logger.debug(f"Showing notification (silent: {intent.silent})")
        try:
            self.sink.notify(intent.title, intent.body, intent.silent)
        except Exception as e:
            logger.warning(f"Notification sink failed: {e}")
        return intent

    async def notify_new_contact(
        self, contact: Contact, preview: str | None
    ) -> NotificationIntent | None:
        """Notify about a contact that appeared since the last refresh."""
        if not await self.should_notify(contact.id):
            return None
        return self.emit("New message", preview or "New message")

    async def notify_messages(
        self, contact: Contact, newest_received: Message
    ) -> NotificationIntent | None:
        """Notify about newly received messages from a known contact."""
        if not await self.should_notify(contact.id):
            return None
        name = contact.display_name or "Unknown"
        return self.emit(f"New message from {name}", preview_for(newest_received))
