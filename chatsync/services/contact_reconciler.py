"""Contact list refresh and new-contact detection."""

import logging

from chatsync.config import settings
from chatsync.core.text import sanitize_text
from chatsync.schemas import Contact
from chatsync.services.backend import ChatBackend
from chatsync.services.message_reconciler import MessageReconciler
from chatsync.services.notifications import NotificationDecider
from chatsync.services.privacy import PrivacyPolicy
from chatsync.services.selection import SelectionState
from chatsync.services.state import ChatState

logger = logging.getLogger(__name__)


def sanitize_contact(contact: Contact) -> Contact:
    return contact.model_copy(update={"display_name": sanitize_text(contact.display_name)})


class ContactReconciler:
    """Keeps the local contact list in step with the backend."""

    def __init__(
        self,
        backend: ChatBackend,
        state: ChatState,
        selection: SelectionState,
        privacy: PrivacyPolicy,
        messages: MessageReconciler,
        decider: NotificationDecider,
        public_channel_id: str | None = None,
    ):
        self.backend = backend
        self.state = state
        self.selection = selection
        self.privacy = privacy
        self.messages = messages
        self.decider = decider
        self.public_channel_id = (
            settings.PUBLIC_CHANNEL_ID if public_channel_id is None else public_channel_id
        )

    async def fetch(self) -> list[Contact]:
        return [sanitize_contact(c) for c in await self.backend.list_contacts()]

    def apply(self, contacts: list[Contact]) -> None:
        """Replace local contact records with a sanitized backend snapshot.

        Archived contacts stay archived, the selected contact's record is
        refreshed, and caches of vanished contacts are dropped.
        """
        archived_ids = {c.id for c in self.state.archived_contacts}
        self.state.contacts = [c for c in contacts if c.id not in archived_ids]
        self.state.archived_contacts = [c for c in contacts if c.id in archived_ids]
        self.state.last_known_contact_count = len(contacts)
        self.state.contacts_loaded = True

        for contact in contacts:
            self.selection.refresh_record(contact)

        stale = self.state.prune({c.id for c in contacts})
        if stale:
            logger.info(f"Dropped state for removed contacts: {stale}")

    async def load(self) -> list[Contact]:
        """Full refresh without new-contact events."""
        contacts = await self.fetch()
        self.apply(contacts)
        return contacts

    async def reconcile(self, force_refresh: bool = False) -> list[Contact]:
        """Detect contacts that appeared since the last refresh.

        The id-set difference is computed on every call. The local records are
        rewritten when ids were added, the total count changed, or the caller
        forces a refresh.

        Returns:
            The newly discovered contacts
        """
        contacts = await self.fetch()
        if not self.state.contacts_loaded:
            self.apply(contacts)
            return []

        known = self.state.known_ids()
        new_contacts = [c for c in contacts if c.id not in known]
        count_changed = len(contacts) != self.state.last_known_contact_count

        if not (new_contacts or count_changed or force_refresh):
            return []

        self.apply(contacts)
        if new_contacts:
            # Show the new entries before their previews load
            self.state.notify_listeners()

        for contact in new_contacts:
            logger.info(f"New contact detected: {contact.id}")
            if contact.id == self.public_channel_id or self.privacy.is_blocked(contact.id):
                continue

            preview = None
            try:
                preview = await self.messages.seed_new_contact(contact)
            except Exception as e:
                logger.warning(f"Error loading preview for {contact.id}: {e}")

            await self.decider.notify_new_contact(contact, preview)

        return new_contacts
