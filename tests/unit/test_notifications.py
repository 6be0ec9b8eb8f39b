"""Unit tests for NotificationDecider."""

import pytest

from chatsync.core.text import MEDIA_PLACEHOLDERS
from chatsync.schemas import MessageKind
from chatsync.services import NotificationDecider
from tests.fakes import (
    FailingWritesStore,
    FocusSwitch,
    RecordingSink,
    make_contact,
    make_message,
)


@pytest.fixture
def decider(store, privacy, selection, sink, focus) -> NotificationDecider:
    return NotificationDecider(store, privacy, selection, sink=sink, is_focused=focus)


class TestShouldNotify:
    """Tests for the notification conditions."""

    @pytest.mark.asyncio
    async def test_unselected_contact_notifies(self, decider):
        assert await decider.should_notify("alice") is True

    @pytest.mark.asyncio
    async def test_disabled_notifications_never_notify(self, decider):
        await decider.set_notifications_enabled(False)
        assert await decider.should_notify("alice") is False

    @pytest.mark.asyncio
    async def test_muted_contact_never_notifies(self, decider, privacy):
        await privacy.mute("alice")
        assert await decider.should_notify("alice") is False

    @pytest.mark.asyncio
    async def test_selected_and_focused_does_not_notify(self, decider, selection, focus):
        selection.select(make_contact("alice"))
        focus.focused = True

        assert await decider.should_notify("alice") is False

    @pytest.mark.asyncio
    async def test_selected_but_unfocused_notifies(self, decider, selection, focus):
        selection.select(make_contact("alice"))
        focus.focused = False

        assert await decider.should_notify("alice") is True

    @pytest.mark.asyncio
    async def test_focus_failure_counts_as_unfocused(self, store, privacy, selection, sink):
        async def broken_focus() -> bool:
            raise RuntimeError("no window")

        decider = NotificationDecider(store, privacy, selection, sink=sink, is_focused=broken_focus)
        selection.select(make_contact("alice"))

        assert await decider.should_notify("alice") is True


class TestNotificationContent:
    """Tests for rendered notifications."""

    @pytest.mark.asyncio
    async def test_message_notification_names_the_contact(self, decider, sink):
        contact = make_contact("alice.onion", "Alice")

        intent = await decider.notify_messages(contact, make_message("m1", 1, text="hi+there"))

        assert intent is not None
        assert sink.notifications == [("New message from Alice", "hi there", False)]

    @pytest.mark.asyncio
    async def test_empty_display_name_falls_back_to_unknown(self, decider, sink):
        await decider.notify_messages(make_contact("x", ""), make_message("m1", 1))

        assert sink.notifications[0][0] == "New message from Unknown"

    @pytest.mark.asyncio
    async def test_media_message_uses_placeholder(self, decider, sink):
        message = make_message("m1", 1, kind=MessageKind.AUDIO, text="BASE64")

        await decider.notify_messages(make_contact("alice"), message)

        assert sink.notifications[0][1] == MEDIA_PLACEHOLDERS[MessageKind.AUDIO]

    @pytest.mark.asyncio
    async def test_silent_flag_follows_sound_setting(self, decider, sink):
        await decider.set_sound_enabled(False)

        await decider.notify_messages(make_contact("alice"), make_message("m1", 1))

        assert sink.notifications[0][2] is True

    @pytest.mark.asyncio
    async def test_new_contact_notification(self, decider, sink):
        await decider.notify_new_contact(make_contact("zed"), "first words")
        await decider.notify_new_contact(make_contact("yan"), None)

        assert sink.notifications == [
            ("New message", "first words", False),
            ("New message", "New message", False),
        ]

    @pytest.mark.asyncio
    async def test_new_contact_path_respects_mute(self, decider, privacy, sink):
        await privacy.mute("zed")

        assert await decider.notify_new_contact(make_contact("zed"), "hello") is None
        assert sink.notifications == []

    @pytest.mark.asyncio
    async def test_sink_failure_is_swallowed(self, store, privacy, selection):
        class ExplodingSink(RecordingSink):
            def notify(self, title, body, silent):
                raise RuntimeError("notification daemon gone")

        decider = NotificationDecider(
            store, privacy, selection, sink=ExplodingSink(), is_focused=FocusSwitch()
        )

        intent = await decider.notify_messages(make_contact("alice"), make_message("m1", 1))

        assert intent is not None


class TestNotificationSettings:
    """Tests for persisted toggles."""

    @pytest.mark.asyncio
    async def test_toggles_persist_and_reload(self, decider, store, privacy, selection):
        await decider.set_notifications_enabled(False)
        await decider.set_sound_enabled(False)

        reloaded = NotificationDecider(store, privacy, selection)
        reloaded.load()

        assert reloaded.notifications_enabled is False
        assert reloaded.sound_enabled is False

    def test_defaults_are_enabled(self, decider):
        decider.load()

        assert decider.notifications_enabled is True
        assert decider.sound_enabled is True

    @pytest.mark.asyncio
    async def test_failed_write_keeps_previous_toggles(self, privacy, selection):
        store = FailingWritesStore()
        decider = NotificationDecider(store, privacy, selection)
        store.fail_writes = True

        with pytest.raises(OSError):
            await decider.set_notifications_enabled(False)
        with pytest.raises(OSError):
            await decider.set_sound_enabled(False)

        assert decider.notifications_enabled is True
        assert decider.sound_enabled is True
