"""Contract the engine consumes from the messaging backend."""

from typing import Any, Protocol

from chatsync.schemas import Contact, Message, MessageKind


class ChatBackend(Protocol):
    """Request/response contact and message API.

    Transport-agnostic: `BackendClient` binds it over HTTP, tests bind it in
    memory. Message lists are expected newest-first, but the engine sorts them
    again before relying on that.
    """

    async def list_contacts(self) -> list[Contact]: ...

    async def list_messages(self, contact_id: str, limit: int) -> list[Message]: ...

    async def send_message(self, contact_id: str, text: str) -> Any: ...

    async def send_file(self, contact_id: str, file_path: str, kind: MessageKind) -> Any: ...

    async def delete_message(self, message_id: str) -> bool: ...

    async def clear_messages(self, contact_id: str) -> int: ...

    async def delete_contact_and_messages(self, contact_id: str) -> Any: ...

    async def add_contact(self, contact_id: str, nickname: str) -> Any: ...

    async def pending_inbound_count(self) -> int: ...

    async def new_message_signal(self) -> int: ...
