"""Unit tests for contact and message schemas."""

import pytest
from pydantic import ValidationError

from chatsync.schemas import Contact, Message, MessageDirection, MessageKind, newest_first
from tests.fakes import make_message


class TestMessage:
    """Tests for the Message schema."""

    def test_accepts_backend_field_names(self):
        message = Message.model_validate(
            {
                "id": "abc",
                "text": "hello",
                "sender_id": "peer",
                "recipient_id": "me",
                "timestamp": 1706140800,
                "is_sent": False,
                "is_read": True,
                "msg_type": "image",
            }
        )

        assert message.direction is MessageDirection.RECEIVED
        assert message.is_received
        assert message.read is True
        assert message.kind is MessageKind.IMAGE

    def test_sent_flag_maps_to_direction(self):
        message = Message.model_validate(
            {"id": "abc", "timestamp": 1, "is_sent": True, "msg_type": "text"}
        )
        assert message.direction is MessageDirection.SENT

    def test_unknown_or_missing_kind_is_text(self):
        web = Message.model_validate(
            {"id": "w", "timestamp": 1, "is_sent": False, "msg_type": "web_message"}
        )
        missing = Message.model_validate(
            {"id": "n", "timestamp": 1, "is_sent": False, "msg_type": None}
        )

        assert web.kind is MessageKind.TEXT
        assert missing.kind is MessageKind.TEXT

    def test_messages_are_immutable(self):
        message = make_message("m1", 1)
        with pytest.raises(ValidationError):
            message.text = "changed"

    def test_newest_first_sorts_by_timestamp(self):
        older = make_message("old", 100)
        newer = make_message("new", 200)
        tie = make_message("tie", 100)

        assert [m.id for m in newest_first([older, newer, tie])] == ["new", "old", "tie"]


class TestContact:
    """Tests for the Contact schema."""

    def test_accepts_backend_field_names(self):
        contact = Contact.model_validate(
            {"onion_address": "abc.onion", "nickname": "Alice", "last_seen": 5}
        )

        assert contact.id == "abc.onion"
        assert contact.display_name == "Alice"
        assert contact.last_seen == 5

    def test_id_is_required(self):
        with pytest.raises(ValidationError):
            Contact.model_validate({"nickname": "Nobody"})
