"""HTTP client for the messaging backend."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from chatsync.config import settings
from chatsync.core.exceptions import BackendAPIError
from chatsync.schemas import Contact, Message, MessageKind

logger = logging.getLogger(__name__)


class BackendClient:
    """HTTP/JSON binding of the `ChatBackend` contract."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if base_url is None:
            base_url = settings.BACKEND_API_URL
        self.base_url = base_url.rstrip("/")
        self.token = settings.BACKEND_API_TOKEN if token is None else token
        self.timeout = settings.BACKEND_TIMEOUT_SECONDS if timeout is None else timeout
        self._transport = transport
        logger.debug(
            f"BackendClient initialized: base_url={self.base_url}, "
            f"auth={'set' if self.token else 'none'}"
        )

    def get_auth_header(self) -> dict[str, str]:
        """Get the bearer authorization header, if a token is configured."""
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs,
    ) -> dict[str, Any]:
        """Make an HTTP request to the backend."""
        url = f"{self.base_url}{path}"
        logger.debug(f"Backend request: {method} {url}")

        async with httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            headers = kwargs.pop("headers", {})
            headers.update(self.get_auth_header())

            try:
                response = await client.request(method, url, headers=headers, **kwargs)
            except httpx.RequestError as e:
                logger.error(f"Backend connection error: {e}")
                raise BackendAPIError(f"Connection error: {e}") from e

            logger.debug(f"Backend response: {response.status_code}")

            if response.status_code >= 400:
                logger.error(f"Backend error: {response.status_code} - {response.text}")
                raise BackendAPIError(response.text, status_code=response.status_code)

            if not response.content:
                return {}
            return response.json()

    async def list_contacts(self) -> list[Contact]:
        """Get all contacts."""
        data = await self._request("GET", "/contacts")
        return [Contact.model_validate(c) for c in data.get("contacts", [])]

    async def list_messages(self, contact_id: str, limit: int) -> list[Message]:
        """Get the most recent messages for a contact, newest first."""
        data = await self._request(
            "GET",
            f"/contacts/{quote(contact_id, safe='')}/messages",
            params={"limit": limit},
        )
        return [Message.model_validate(m) for m in data.get("messages", [])]

    async def send_message(self, contact_id: str, text: str) -> dict[str, Any]:
        """Send a text message to a contact."""
        return await self._request(
            "POST",
            "/messages",
            json={"contact_id": contact_id, "text": text},
        )

    async def send_file(
        self,
        contact_id: str,
        file_path: str,
        kind: MessageKind,
    ) -> dict[str, Any]:
        """Send a local file (image, audio, or generic file) to a contact."""
        return await self._request(
            "POST",
            "/files",
            json={"contact_id": contact_id, "file_path": file_path, "kind": kind.value},
        )

    async def delete_message(self, message_id: str) -> bool:
        """Delete a single message. Returns whether anything was deleted."""
        data = await self._request("DELETE", f"/messages/{quote(message_id, safe='')}")
        return bool(data.get("deleted", False))

    async def clear_messages(self, contact_id: str) -> int:
        """Delete every message of a contact, keeping the contact."""
        data = await self._request(
            "DELETE", f"/contacts/{quote(contact_id, safe='')}/messages"
        )
        return int(data.get("deleted_count", 0))

    async def delete_contact_and_messages(self, contact_id: str) -> dict[str, Any]:
        """Delete a contact together with its messages."""
        return await self._request("DELETE", f"/contacts/{quote(contact_id, safe='')}")

    async def add_contact(self, contact_id: str, nickname: str) -> dict[str, Any]:
        """Add or rename a contact."""
        return await self._request(
            "POST",
            "/contacts",
            json={"contact_id": contact_id, "nickname": nickname},
        )

    async def pending_inbound_count(self) -> int:
        """Get the number of pending messages on the public channel."""
        data = await self._request("GET", "/public/pending")
        return int(data.get("count", 0))

    async def new_message_signal(self) -> int:
        """Get the coarse new-message counter."""
        data = await self._request("GET", "/signal")
        return int(data.get("count", 0))
