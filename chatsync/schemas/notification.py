"""Notification intent schema."""

from pydantic import BaseModel


class NotificationIntent(BaseModel):
    """What the engine asks the delivery sink to show."""

    model_config = {"frozen": True}

    title: str
    body: str
    silent: bool = False
