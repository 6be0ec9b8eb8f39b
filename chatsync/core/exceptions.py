"""Engine exceptions."""


class ChatSyncError(Exception):
    """Base exception for engine failures."""

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class BackendAPIError(ChatSyncError):
    """Exception raised when the chat backend returns an error."""

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(f"Backend API error: {detail}")
        self.status_code = status_code


class ReservedContactError(ChatSyncError):
    """Exception raised when an action targets the inbound-only public channel."""

    def __init__(self, action: str):
        super().__init__(f"Cannot {action} the public channel")


class BadRequestError(ChatSyncError):
    """Exception raised for invalid user input."""
