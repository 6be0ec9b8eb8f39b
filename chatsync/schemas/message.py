"""Message schemas."""

from enum import Enum

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator


class MessageDirection(str, Enum):
    """Message direction enum."""

    SENT = "sent"
    RECEIVED = "received"


class MessageKind(str, Enum):
    """Message content kind."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    FILE = "file"

    @classmethod
    def _missing_(cls, value):
        # Backend-specific text flavours ("web_message", None) render as text
        return cls.TEXT

    @property
    def is_media(self) -> bool:
        return self is not MessageKind.TEXT


class Message(BaseModel):
    """A message as delivered by the backend. Immutable once fetched."""

    model_config = {"frozen": True, "populate_by_name": True}

    id: str
    text: str = ""
    sender_id: str = Field(default="", validation_alias=AliasChoices("sender_id", "senderId"))
    recipient_id: str = Field(
        default="", validation_alias=AliasChoices("recipient_id", "recipientId")
    )
    timestamp: int = Field(..., description="Unix seconds")
    direction: MessageDirection
    read: bool = Field(default=False, validation_alias=AliasChoices("read", "is_read"))
    kind: MessageKind = Field(
        default=MessageKind.TEXT, validation_alias=AliasChoices("kind", "msg_type")
    )

    @model_validator(mode="before")
    @classmethod
    def _direction_from_is_sent(cls, data):
        if isinstance(data, dict) and "direction" not in data and "is_sent" in data:
            data = dict(data)
            data["direction"] = (
                MessageDirection.SENT if data.pop("is_sent") else MessageDirection.RECEIVED
            )
        return data

    @field_validator("kind", mode="before")
    @classmethod
    def _normalize_kind(cls, value):
        return MessageKind(value)

    @property
    def is_received(self) -> bool:
        return self.direction is MessageDirection.RECEIVED

    @property
    def is_sent(self) -> bool:
        return self.direction is MessageDirection.SENT


def newest_first(messages: list[Message]) -> list[Message]:
    """Order messages newest-first by timestamp, keeping backend order for ties."""
    return sorted(messages, key=lambda m: m.timestamp, reverse=True)
