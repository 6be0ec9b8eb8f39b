"""Per-contact message diffing, unread counting, and preview extraction."""

import logging
from dataclasses import dataclass

from chatsync.config import settings
from chatsync.core.text import preview_for, sanitize_text
from chatsync.schemas import Contact, Message, newest_first
from chatsync.services.backend import ChatBackend
from chatsync.services.privacy import PrivacyPolicy
from chatsync.services.selection import SelectionState
from chatsync.services.state import ChatState

logger = logging.getLogger(__name__)


@dataclass
class MessageDelta:
    """What one contact's reconciliation observed."""

    contact: Contact
    new_count: int = 0
    newest_received: Message | None = None
    preview_changed: bool = False


def display_copy(message: Message) -> Message:
    """Sanitized copy for display. Media payloads are passed through untouched."""
    if message.kind.is_media:
        return message
    return message.model_copy(update={"text": sanitize_text(message.text)})


class MessageReconciler:
    """Detects newly received messages and keeps previews current.

    Counting is a low-water-mark diff: `last_received_counts` holds the largest
    received count seen in the fetch window and `last_received_at` the newest
    received timestamp. The unread counter only ever grows here.
    """

    def __init__(
        self,
        backend: ChatBackend,
        state: ChatState,
        privacy: PrivacyPolicy,
        selection: SelectionState,
        background_limit: int | None = None,
        conversation_limit: int | None = None,
        preview_limit: int | None = None,
    ):
        self.backend = backend
        self.state = state
        self.privacy = privacy
        self.selection = selection
        self.background_limit = (
            settings.BACKGROUND_FETCH_LIMIT if background_limit is None else background_limit
        )
        self.conversation_limit = (
            settings.CONVERSATION_FETCH_LIMIT if conversation_limit is None else conversation_limit
        )
        self.preview_limit = (
            settings.PREVIEW_FETCH_LIMIT if preview_limit is None else preview_limit
        )

    async def fetch_visible(self, contact_id: str, limit: int) -> list[Message]:
        """Fetch newest-first messages with the block cutover applied."""
        messages = newest_first(await self.backend.list_messages(contact_id, limit))
        return self.privacy.visible(contact_id, messages)

    def _set_preview(self, contact_id: str, newest: Message) -> bool:
        preview = preview_for(newest)
        changed = self.state.previews.get(contact_id) != preview
        self.state.previews[contact_id] = preview
        return changed

    def _record_baseline(self, contact_id: str, received: list[Message]) -> None:
        self.state.last_received_counts[contact_id] = max(
            self.state.last_received_counts.get(contact_id, 0), len(received)
        )
        if received:
            self.state.last_received_at[contact_id] = max(
                self.state.last_received_at.get(contact_id, received[0].timestamp),
                received[0].timestamp,
            )

    def count_new(self, contact_id: str, received: list[Message]) -> int:
        """Number of newly observed received messages; updates the baseline."""
        last_known = self.state.last_received_counts.get(contact_id, 0)
        by_count = max(len(received) - last_known, 0)

        by_time = 0
        last_at = self.state.last_received_at.get(contact_id)
        if last_at is not None:
            by_time = sum(1 for m in received if m.timestamp > last_at)

        self._record_baseline(contact_id, received)
        return max(by_count, by_time)

    async def reconcile_contact(self, contact: Contact) -> MessageDelta | None:
        """Background pass for one contact. Returns None when there is nothing to show.

        The first successful fetch for a contact without a baseline only
        records one, so history that predates it is never counted as unread.
        """
        messages = await self.fetch_visible(contact.id, self.background_limit)
        if contact.id not in self.state.known_ids():
            # Deleted while the fetch was in flight
            return None

        received = [m for m in messages if m.is_received]
        if contact.id not in self.state.last_received_counts:
            self._record_baseline(contact.id, received)
            if not messages:
                return None
            logger.debug(f"Recorded baseline of {len(received)} for {contact.id}")
            return MessageDelta(
                contact=contact, preview_changed=self._set_preview(contact.id, messages[0])
            )
        if not messages:
            return None

        delta = MessageDelta(contact=contact)
        delta.new_count = self.count_new(contact.id, received)
        if delta.new_count:
            self.state.add_unread(contact.id, delta.new_count)
            delta.newest_received = received[0]
            logger.debug(f"{delta.new_count} new message(s) from {contact.id}")

        delta.preview_changed = self._set_preview(contact.id, messages[0])
        return delta

    async def prime(self, contact: Contact) -> None:
        """Record a starting baseline and preview without counting anything unread."""
        messages = await self.fetch_visible(contact.id, self.background_limit)
        if contact.id not in self.state.last_received_counts:
            self._record_baseline(contact.id, [m for m in messages if m.is_received])
        if messages:
            self._set_preview(contact.id, messages[0])

    async def seed_new_contact(self, contact: Contact) -> str | None:
        """Load the preview of a newly discovered contact and mark it unread."""
        messages = await self.fetch_visible(contact.id, self.preview_limit)
        self._record_baseline(contact.id, [m for m in messages if m.is_received])
        if not messages:
            return None
        self._set_preview(contact.id, messages[0])
        self.state.add_unread(contact.id, 1)
        return self.state.previews[contact.id]

    async def refresh_conversation(self, silent: bool = False) -> bool:
        """Reload the open conversation. Returns True if the displayed list changed.

        A silent refresh is the background variant: it skips rendering when the
        list length and newest message id match what is already displayed.
        """
        contact = self.selection.selected_contact
        if contact is None:
            return False

        messages = await self.fetch_visible(contact.id, self.conversation_limit)
        if not self.selection.is_selected(contact.id):
            # Selection moved on while the fetch was in flight
            return False
        if not silent:
            logger.debug(f"Loaded {len(messages)} messages for {contact.id}")

        displayed = self.state.messages
        if (
            silent
            and messages
            and displayed
            and len(messages) == len(displayed)
            and messages[0].id == displayed[-1].id
        ):
            return False

        if messages:
            self._set_preview(contact.id, messages[0])

        ordered = [display_copy(m) for m in reversed(messages)]
        changed = len(displayed) != len(ordered) or (
            bool(displayed) and bool(ordered) and displayed[-1].id != ordered[-1].id
        )
        if changed or not silent:
            self.state.messages = ordered
        return changed
