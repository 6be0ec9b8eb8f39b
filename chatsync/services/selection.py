"""Active conversation and auxiliary view tracking."""

import logging

from chatsync.config import settings
from chatsync.schemas import Contact
from chatsync.services.state import ChatState

logger = logging.getLogger(__name__)


class SelectionState:
    """Which contact is open, and whether the profile or contact-detail view is shown.

    The auxiliary views are mutually exclusive with each other and are reset
    whenever the selection changes.
    """

    def __init__(self, state: ChatState, public_channel_id: str | None = None):
        self.state = state
        self.public_channel_id = (
            settings.PUBLIC_CHANNEL_ID if public_channel_id is None else public_channel_id
        )
        self.selected_contact: Contact | None = None
        self.showing_contact_info = False
        self.showing_my_profile = False

    @property
    def selected_id(self) -> str | None:
        return self.selected_contact.id if self.selected_contact else None

    @property
    def is_viewing_public_channel(self) -> bool:
        return self.selected_id == self.public_channel_id

    def is_selected(self, contact_id: str) -> bool:
        return self.selected_id == contact_id

    def select(self, contact: Contact) -> None:
        """Open a contact's conversation and acknowledge its unread messages."""
        self.selected_contact = contact
        self.showing_contact_info = False
        self.showing_my_profile = False

        if contact.id == self.public_channel_id:
            self.state.public_pending_count = 0

        self.state.unread_counts[contact.id] = 0
        logger.debug(f"Selected {contact.id}")

    def clear(self) -> None:
        """Close the open conversation."""
        self.selected_contact = None
        self.state.messages = []
        self.showing_contact_info = False
        self.showing_my_profile = False

    def refresh_record(self, contact: Contact) -> None:
        """Swap in an updated record (e.g. renamed) for the selected contact."""
        if self.is_selected(contact.id):
            self.selected_contact = contact

    def show_contact_info(self) -> None:
        self.showing_contact_info = True
        self.showing_my_profile = False

    def hide_contact_info(self) -> None:
        self.showing_contact_info = False

    def show_my_profile(self) -> None:
        self.showing_my_profile = True
        self.showing_contact_info = False

    def hide_my_profile(self) -> None:
        self.showing_my_profile = False
