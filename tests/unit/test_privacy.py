"""Unit tests for PrivacyPolicy."""

import json

import pytest

from chatsync.schemas import MessageDirection
from chatsync.services import InMemoryPreferenceStore, PrivacyPolicy
from chatsync.services.privacy import BLOCKED_CONTACTS_KEY, BLOCKED_SINCE_KEY, MUTED_CONTACTS_KEY
from tests.fakes import FailingWritesStore, FakeClock, make_message


class TestBlocking:
    """Tests for block records and the visibility cutover."""

    @pytest.mark.asyncio
    async def test_block_records_contact_and_timestamp(self, privacy, store, clock):
        clock.now = 1000.7

        assert await privacy.block("bob") is True

        assert privacy.is_blocked("bob")
        assert privacy.blocked_since("bob") == 1000
        assert store.get_string_list(BLOCKED_CONTACTS_KEY) == ["bob"]
        assert json.loads(store.get_string(BLOCKED_SINCE_KEY)) == {"bob": 1000}

    @pytest.mark.asyncio
    async def test_blocking_twice_keeps_first_timestamp(self, privacy, clock):
        await privacy.block("bob")
        clock.now = 5000

        assert await privacy.block("bob") is False
        assert privacy.blocked_since("bob") == 1000

    @pytest.mark.asyncio
    async def test_unblock_removes_both_records(self, privacy, store):
        await privacy.block("bob")

        assert await privacy.unblock("bob") is True

        assert not privacy.is_blocked("bob")
        assert privacy.blocked_since("bob") is None
        assert store.get_string_list(BLOCKED_CONTACTS_KEY) == []
        assert json.loads(store.get_string(BLOCKED_SINCE_KEY)) == {}

    @pytest.mark.asyncio
    async def test_unblock_unknown_contact_is_noop(self, privacy):
        assert await privacy.unblock("nobody") is False

    @pytest.mark.asyncio
    async def test_cutover_hides_only_later_received_messages(self, privacy, clock):
        clock.now = 1000
        await privacy.block("bob")
        before = make_message("before", 999)
        at = make_message("at", 1000)
        after = make_message("after", 1001)
        sent_after = make_message("sent", 1500, direction=MessageDirection.SENT)

        visible = privacy.visible("bob", [after, sent_after, at, before])

        assert [m.id for m in visible] == ["sent", "at", "before"]

    def test_unblocked_contact_sees_everything(self, privacy):
        messages = [make_message("a", 5000), make_message("b", 1)]
        assert privacy.visible("bob", messages) == messages


class TestLoading:
    """Tests for reading persisted privacy records."""

    @pytest.mark.asyncio
    async def test_load_restores_consistent_records(self):
        store = InMemoryPreferenceStore(
            {
                BLOCKED_CONTACTS_KEY: ["bob"],
                BLOCKED_SINCE_KEY: json.dumps({"bob": 1000}),
                MUTED_CONTACTS_KEY: ["carol"],
            }
        )
        await store.load()
        privacy = PrivacyPolicy(store)

        privacy.load()

        assert privacy.is_blocked("bob")
        assert privacy.blocked_since("bob") == 1000
        assert privacy.is_muted("carol")

    @pytest.mark.asyncio
    async def test_load_drops_half_written_block_records(self):
        store = InMemoryPreferenceStore(
            {
                BLOCKED_CONTACTS_KEY: ["bob", "dave"],
                BLOCKED_SINCE_KEY: json.dumps({"bob": 1000, "erin": 2000}),
            }
        )
        await store.load()
        privacy = PrivacyPolicy(store)

        privacy.load()

        assert privacy.blocked_contacts == ["bob"]
        assert not privacy.is_blocked("dave")
        assert not privacy.is_blocked("erin")

    @pytest.mark.asyncio
    async def test_load_tolerates_corrupt_timestamps(self):
        store = InMemoryPreferenceStore(
            {BLOCKED_CONTACTS_KEY: ["bob"], BLOCKED_SINCE_KEY: "{not json"}
        )
        await store.load()
        privacy = PrivacyPolicy(store)

        privacy.load()

        assert privacy.blocked_contacts == []


class TestMuting:
    """Tests for mute records."""

    @pytest.mark.asyncio
    async def test_mute_and_unmute(self, privacy, store):
        assert await privacy.mute("carol") is True
        assert privacy.is_muted("carol")
        assert store.get_string_list(MUTED_CONTACTS_KEY) == ["carol"]

        assert await privacy.unmute("carol") is True
        assert not privacy.is_muted("carol")
        assert store.get_string_list(MUTED_CONTACTS_KEY) == []

    @pytest.mark.asyncio
    async def test_mute_is_independent_of_block(self, privacy):
        await privacy.mute("carol")

        assert not privacy.is_blocked("carol")
        assert privacy.visible("carol", [make_message("m", 99999)])


class TestWriteFailures:
    """Tests for storage failures while changing block and mute records."""

    @pytest.fixture
    def failing_privacy(self) -> tuple[FailingWritesStore, PrivacyPolicy]:
        store = FailingWritesStore()
        return store, PrivacyPolicy(store, clock=FakeClock())

    @pytest.mark.asyncio
    async def test_failed_block_leaves_contact_unblocked(self, failing_privacy):
        store, privacy = failing_privacy
        store.fail_writes = True

        with pytest.raises(OSError):
            await privacy.block("alice")

        assert not privacy.is_blocked("alice")
        assert privacy.blocked_contacts == []

    @pytest.mark.asyncio
    async def test_failed_unblock_keeps_block(self, failing_privacy):
        store, privacy = failing_privacy
        await privacy.block("alice")
        store.fail_writes = True

        with pytest.raises(OSError):
            await privacy.unblock("alice")

        assert privacy.is_blocked("alice")
        assert privacy.blocked_since("alice") == 1000

    @pytest.mark.asyncio
    async def test_failed_mute_and_unmute_keep_previous_state(self, failing_privacy):
        store, privacy = failing_privacy
        await privacy.mute("bob")
        store.fail_writes = True

        with pytest.raises(OSError):
            await privacy.mute("alice")
        with pytest.raises(OSError):
            await privacy.unmute("bob")

        assert privacy.muted_contacts == ["bob"]
