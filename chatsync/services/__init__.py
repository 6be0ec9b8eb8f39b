"""Engine services."""

from chatsync.services.backend import ChatBackend
from chatsync.services.backend_client import BackendClient
from chatsync.services.chat_engine import ChatEngine, CycleReport
from chatsync.services.contact_reconciler import ContactReconciler
from chatsync.services.message_reconciler import MessageDelta, MessageReconciler
from chatsync.services.notifications import (
    LoggingNotificationSink,
    NotificationDecider,
    NotificationSink,
)
from chatsync.services.pinned_messages import PinnedMessages
from chatsync.services.preference_store import (
    InMemoryPreferenceStore,
    PreferenceStore,
    SqlPreferenceStore,
)
from chatsync.services.privacy import PrivacyPolicy
from chatsync.services.reactions import MessageReactions
from chatsync.services.selection import SelectionState
from chatsync.services.state import ChatState

__all__ = [
    "BackendClient",
    "ChatBackend",
    "ChatEngine",
    "ChatState",
    "ContactReconciler",
    "CycleReport",
    "InMemoryPreferenceStore",
    "LoggingNotificationSink",
    "MessageDelta",
    "MessageReactions",
    "MessageReconciler",
    "NotificationDecider",
    "NotificationSink",
    "PinnedMessages",
    "PreferenceStore",
    "PrivacyPolicy",
    "SelectionState",
    "SqlPreferenceStore",
]
