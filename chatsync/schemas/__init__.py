"""Pydantic schemas for contacts, messages, and notifications."""

from chatsync.schemas.contact import Contact
from chatsync.schemas.message import Message, MessageDirection, MessageKind, newest_first
from chatsync.schemas.notification import NotificationIntent

__all__ = [
    "Contact",
    "Message",
    "MessageDirection",
    "MessageKind",
    "NotificationIntent",
    "newest_first",
]
