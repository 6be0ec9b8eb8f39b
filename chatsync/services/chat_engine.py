"""Chat synchronization engine."""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from chatsync.config import settings
from chatsync.core.exceptions import BadRequestError, ReservedContactError
from chatsync.core.telemetry import get_tracer
from chatsync.core.text import abbreviate_id
from chatsync.schemas import Contact, MessageKind
from chatsync.services.backend import ChatBackend
from chatsync.services.contact_reconciler import ContactReconciler
from chatsync.services.message_reconciler import MessageReconciler
from chatsync.services.notifications import (
    FocusProvider,
    NotificationDecider,
    NotificationSink,
    always_focused,
)
from chatsync.services.pinned_messages import PinnedMessages
from chatsync.services.preference_store import PreferenceStore
from chatsync.services.privacy import PrivacyPolicy
from chatsync.services.reactions import MessageReactions
from chatsync.services.selection import SelectionState
from chatsync.services.state import ChatState
from chatsync.workers.poller import Poller

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

_UNSAFE_FILENAME = re.compile(r"[^a-zA-Z0-9]")


@dataclass
class CycleReport:
    """Summary of one reconciliation cycle."""

    new_contacts: list[Contact] = field(default_factory=list)
    new_messages: int = 0
    failed_contacts: list[str] = field(default_factory=list)
    notifications: int = 0


class ChatEngine:
    """Reconciles local chat state against the backend and serves user actions.

    The presentation layer reads `state` and `selection`, subscribes with
    `state.add_listener`, and calls the action methods. Background failures
    are logged and retried on the next tick; action failures are re-raised.
    """

    def __init__(
        self,
        backend: ChatBackend,
        store: PreferenceStore,
        sink: NotificationSink | None = None,
        is_focused: FocusProvider = always_focused,
        poll_interval: float | None = None,
        background_limit: int | None = None,
        conversation_limit: int | None = None,
        public_channel_id: str | None = None,
        export_dir: str | Path | None = None,
        privacy: PrivacyPolicy | None = None,
        pinned: PinnedMessages | None = None,
        reactions: MessageReactions | None = None,
    ):
        self.backend = backend
        self.store = store
        self.public_channel_id = (
            settings.PUBLIC_CHANNEL_ID if public_channel_id is None else public_channel_id
        )
        if export_dir is None:
            export_dir = settings.EXPORT_DIR
        self.export_dir = Path(export_dir).expanduser()

        self.state = ChatState()
        self.selection = SelectionState(self.state, self.public_channel_id)
        self.privacy = privacy or PrivacyPolicy(store)
        self.pinned = pinned or PinnedMessages(store)
        self.reactions = reactions or MessageReactions(store)
        self.decider = NotificationDecider(
            store, self.privacy, self.selection, sink=sink, is_focused=is_focused
        )
        self.messages = MessageReconciler(
            backend,
            self.state,
            self.privacy,
            self.selection,
            background_limit=background_limit,
            conversation_limit=conversation_limit,
        )
        self.contacts = ContactReconciler(
            backend,
            self.state,
            self.selection,
            self.privacy,
            self.messages,
            self.decider,
            public_channel_id=self.public_channel_id,
        )
        self.poller = Poller(self.run_cycle, interval=poll_interval)

    # -- lifecycle ---------------------------------------------------------

    async def start(self) -> None:
        """Load preferences and contacts, prime baselines, then start polling."""
        await self.store.load()
        self.privacy.load()
        self.decider.load()
        self.pinned.load()
        self.reactions.load()

        await self.load_contacts()
        await self.prime_previews()
        self.poller.start()
        logger.info(f"Chat engine started with {len(self.state.contacts)} contacts")

    def start_polling(self) -> None:
        self.poller.start()

    def stop(self) -> None:
        """Stop polling. A cycle already running is allowed to finish."""
        self.poller.stop()

    async def close(self) -> None:
        self.stop()
        await self.poller.wait_idle()
        logger.info("Chat engine stopped")

    # -- reconciliation ----------------------------------------------------

    async def load_contacts(self) -> None:
        """Full contact refresh. Failures are logged and leave state as it was."""
        initial = not self.state.contacts
        if initial:
            self.state.is_loading = True
            self.state.notify_listeners()
        try:
            await self.contacts.load()
        except Exception as e:
            logger.warning(f"Error loading contacts: {e}")
        finally:
            self.state.is_loading = False
            self.state.notify_listeners()

    async def prime_previews(self) -> None:
        """Record per-contact baselines so existing history is not counted as unread."""
        for contact in list(self.state.contacts):
            if contact.id == self.public_channel_id:
                continue
            try:
                await self.messages.prime(contact)
            except Exception as e:
                logger.warning(f"Error loading preview for {contact.id}: {e}")
        self.state.notify_listeners()

    async def run_cycle(self) -> CycleReport:
        """One reconciliation pass: contacts, public channel, per-contact messages."""
        report = CycleReport()
        with tracer.start_as_current_span("reconciliation_cycle") as span:
            changed = False

            signal = 0
            try:
                signal = await self.backend.new_message_signal()
            except Exception as e:
                logger.warning(f"Error reading new-message signal: {e}")

            try:
                report.new_contacts = await self.contacts.reconcile(force_refresh=signal > 0)
                changed = changed or bool(report.new_contacts) or signal > 0
            except Exception as e:
                logger.warning(f"Error checking contacts: {e}")

            try:
                pending = await self.backend.pending_inbound_count()
                if pending != self.state.public_pending_count:
                    self.state.public_pending_count = pending
                    changed = True
            except Exception as e:
                logger.warning(f"Error reading public channel count: {e}")

            for contact in list(self.state.contacts):
                if contact.id == self.public_channel_id:
                    continue
                try:
                    delta = await self.messages.reconcile_contact(contact)
                except Exception as e:
                    logger.warning(f"Error checking messages for {contact.id}: {e}")
                    report.failed_contacts.append(contact.id)
                    continue

                if delta is None:
                    continue
                changed = changed or delta.preview_changed or delta.new_count > 0
                if delta.new_count and delta.newest_received is not None:
                    report.new_messages += delta.new_count
                    intent = await self.decider.notify_messages(contact, delta.newest_received)
                    if intent is not None:
                        report.notifications += 1

            if self.selection.selected_contact and not self.selection.is_viewing_public_channel:
                try:
                    changed = await self.messages.refresh_conversation(silent=True) or changed
                except Exception as e:
                    logger.warning(f"Error refreshing open conversation: {e}")

            if changed:
                self.state.notify_listeners()

            span.set_attribute("chatsync.contacts", len(self.state.contacts))
            span.set_attribute("chatsync.new_contacts", len(report.new_contacts))
            span.set_attribute("chatsync.new_messages", report.new_messages)
            span.set_attribute("chatsync.failed_contacts", len(report.failed_contacts))
        return report

    async def load_messages(self, silent: bool = False) -> None:
        """Reload the open conversation."""
        try:
            if await self.messages.refresh_conversation(silent=silent) or not silent:
                self.state.notify_listeners()
        except Exception as e:
            logger.warning(f"Error loading messages: {e}")

    # -- selection ---------------------------------------------------------

    async def select_contact(self, contact: Contact) -> None:
        self.selection.select(contact)
        self.state.notify_listeners()
        await self.load_messages()

    def clear_selection(self) -> None:
        self.selection.clear()
        self.state.notify_listeners()

    def show_contact_info(self) -> None:
        self.selection.show_contact_info()
        self.state.notify_listeners()

    def hide_contact_info(self) -> None:
        self.selection.hide_contact_info()
        self.state.notify_listeners()

    def show_my_profile(self) -> None:
        self.selection.show_my_profile()
        self.state.notify_listeners()

    def hide_my_profile(self) -> None:
        self.selection.hide_my_profile()
        self.state.notify_listeners()

    # -- contact queries ---------------------------------------------------

    def is_saved_contact(self, contact: Contact) -> bool:
        if contact.id == self.public_channel_id:
            return True
        name = contact.display_name.strip().lower()
        return bool(name) and name != contact.id.strip().lower()

    def display_name(self, contact: Contact) -> str:
        if self.is_saved_contact(contact):
            return contact.display_name
        return abbreviate_id(contact.id)

    def _ensure_not_public(self, contact_id: str, action: str) -> None:
        if contact_id == self.public_channel_id:
            raise ReservedContactError(action)

    # -- sending -----------------------------------------------------------

    async def send_message(self, text: str) -> None:
        contact = self.selection.selected_contact
        if contact is None or not text:
            logger.debug("send_message: no contact selected or empty text")
            return
        self._ensure_not_public(contact.id, "send messages to")

        logger.info(f"Sending message to {contact.id}")
        try:
            await self.backend.send_message(contact.id, text)
        except Exception as e:
            logger.error(f"Error sending message: {e}")
            raise
        await self.load_messages()

    async def send_file(self, file_path: str | Path, kind: MessageKind | str) -> None:
        contact = self.selection.selected_contact
        if contact is None:
            return
        self._ensure_not_public(contact.id, "send files to")

        if not MessageKind(kind).is_media:
            raise BadRequestError(f"Unsupported file kind: {kind}")
        kind = MessageKind(kind)
        path = Path(file_path)
        if not path.is_file():
            raise BadRequestError(f"File not found: {path}")

        logger.info(f"Sending {kind.value} {path} to {contact.id}")
        try:
            await self.backend.send_file(contact.id, str(path), kind)
        except Exception as e:
            logger.error(f"Error sending file: {e}")
            raise
        await self.load_messages()

    # -- contact and chat management ---------------------------------------

    async def add_contact(self, contact_id: str, nickname: str) -> None:
        try:
            await self.backend.add_contact(contact_id, nickname)
        except Exception as e:
            logger.error(f"Error adding contact: {e}")
            raise
        await self.load_contacts()

    async def delete_chat(self, contact_id: str) -> None:
        """Delete a contact together with all of its messages."""
        self._ensure_not_public(contact_id, "delete")
        try:
            await self.backend.delete_contact_and_messages(contact_id)
        except Exception as e:
            logger.error(f"Error deleting chat: {e}")
            raise

        self.state.forget_messages(contact_id)
        await self.load_contacts()
        if self.selection.is_selected(contact_id):
            self.selection.clear()
        self.state.notify_listeners()
        logger.info(f"Deleted chat with {contact_id}")

    async def clear_chat(self, contact_id: str) -> int:
        """Delete every message of a contact but keep the contact."""
        try:
            deleted = await self.backend.clear_messages(contact_id)
        except Exception as e:
            logger.error(f"Error clearing chat: {e}")
            raise
        logger.info(f"Cleared {deleted} messages for {contact_id}")

        self.state.forget_messages(contact_id)
        # The chat is empty now, so anything that arrives later is new
        self.state.last_received_counts[contact_id] = 0
        if self.selection.is_selected(contact_id):
            self.state.messages = []
        await self.pinned.clear_for_contact(contact_id)
        self.state.notify_listeners()
        return deleted

    async def delete_message(self, message_id: str) -> bool:
        try:
            deleted = await self.backend.delete_message(message_id)
        except Exception as e:
            logger.error(f"Error deleting message: {e}")
            raise
        logger.debug(f"Delete message {message_id} result: {deleted}")

        if deleted:
            self.state.messages = [m for m in self.state.messages if m.id != message_id]
            await self.reactions.remove_reaction(message_id)
            self.state.notify_listeners()
        return deleted

    def archive_chat(self, contact_id: str) -> bool:
        self._ensure_not_public(contact_id, "archive")
        contact = next((c for c in self.state.contacts if c.id == contact_id), None)
        if contact is None:
            return False

        self.state.contacts.remove(contact)
        self.state.archived_contacts.append(contact)
        if self.selection.is_selected(contact_id):
            self.selection.clear()
        self.state.notify_listeners()
        return True

    def unarchive_chat(self, contact_id: str) -> bool:
        contact = next((c for c in self.state.archived_contacts if c.id == contact_id), None)
        if contact is None:
            return False

        self.state.archived_contacts.remove(contact)
        self.state.contacts.append(contact)
        self.state.notify_listeners()
        return True

    async def clear_all_chats(self) -> None:
        for contact in list(self.state.contacts):
            await self.clear_chat(contact.id)

    def archive_all_chats(self) -> None:
        for contact in list(self.state.contacts):
            if contact.id != self.public_channel_id:
                self.archive_chat(contact.id)

    async def delete_all_chats(self) -> None:
        for contact in list(self.state.contacts):
            if contact.id != self.public_channel_id:
                await self.delete_chat(contact.id)

    # -- privacy and settings ----------------------------------------------

    async def block_contact(self, contact_id: str) -> None:
        if await self.privacy.block(contact_id):
            self.state.notify_listeners()

    async def unblock_contact(self, contact_id: str) -> None:
        if await self.privacy.unblock(contact_id):
            self.state.notify_listeners()
            if self.selection.is_selected(contact_id):
                # Messages hidden by the block must show up again
                await self.load_messages()

    def is_blocked(self, contact_id: str) -> bool:
        return self.privacy.is_blocked(contact_id)

    async def mute_contact(self, contact_id: str) -> None:
        if await self.privacy.mute(contact_id):
            self.state.notify_listeners()

    async def unmute_contact(self, contact_id: str) -> None:
        if await self.privacy.unmute(contact_id):
            self.state.notify_listeners()

    def is_muted(self, contact_id: str) -> bool:
        return self.privacy.is_muted(contact_id)

    async def set_notifications_enabled(self, value: bool) -> None:
        await self.decider.set_notifications_enabled(value)
        self.state.notify_listeners()

    async def set_sound_enabled(self, value: bool) -> None:
        await self.decider.set_sound_enabled(value)
        self.state.notify_listeners()

    # -- export ------------------------------------------------------------

    async def export_chat(self, contact_id: str, directory: str | Path | None = None) -> Path:
        """Write a plain-text transcript (oldest first) and return its path."""
        try:
            messages = await self.backend.list_messages(contact_id, settings.EXPORT_FETCH_LIMIT)
            contact = self.state.find_contact(contact_id) or Contact(
                id=contact_id, display_name="Unknown"
            )
            name = contact.display_name

            lines = [
                f"Chat Export with {name} ({contact_id})",
                f"Exported on {datetime.now()}",
                "-" * 50,
                "",
            ]
            for message in sorted(messages, key=lambda m: m.timestamp):
                sender = "Me" if message.is_sent else name
                lines.append(
                    f"[{datetime.fromtimestamp(message.timestamp)}] {sender}: {message.text}"
                )

            target_dir = Path(directory).expanduser() if directory else self.export_dir
            target_dir.mkdir(parents=True, exist_ok=True)
            path = target_dir / f"chat_export_{_UNSAFE_FILENAME.sub('_', name)}.txt"
            await asyncio.to_thread(path.write_text, "\n".join(lines) + "\n", "utf-8")
        except Exception as e:
            logger.error(f"Error exporting chat: {e}")
            raise

        logger.info(f"Chat exported to {path}")
        return path
