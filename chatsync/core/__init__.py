"""Core module for exceptions, telemetry, and text utilities."""

from chatsync.core.exceptions import (
    BackendAPIError,
    BadRequestError,
    ChatSyncError,
    ReservedContactError,
)
from chatsync.core.telemetry import get_tracer, setup_all_instrumentation, setup_telemetry
from chatsync.core.text import abbreviate_id, preview_for, sanitize_text

__all__ = [
    "BackendAPIError",
    "BadRequestError",
    "ChatSyncError",
    "ReservedContactError",
    "abbreviate_id",
    "get_tracer",
    "preview_for",
    "sanitize_text",
    "setup_all_instrumentation",
    "setup_telemetry",
]
