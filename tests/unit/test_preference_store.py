"""Unit tests for preference stores."""

import pytest

from chatsync.services import InMemoryPreferenceStore, SqlPreferenceStore
from tests.fakes import BrokenStore


class TestInMemoryPreferenceStore:
    """Tests for the in-memory store."""

    @pytest.mark.asyncio
    async def test_defaults_when_empty(self):
        store = InMemoryPreferenceStore()
        await store.load()

        assert store.get_bool("notifications_enabled", True) is True
        assert store.get_string("blocked_since") is None
        assert store.get_string_list("muted_contacts") == []

    @pytest.mark.asyncio
    async def test_values_round_trip_through_load(self):
        store = InMemoryPreferenceStore()
        await store.set_bool("sound_enabled", False)
        await store.set_string_list("muted_contacts", ["a", "b"])

        reloaded = InMemoryPreferenceStore(store._backing)
        await reloaded.load()

        assert reloaded.get_bool("sound_enabled", True) is False
        assert reloaded.get_string_list("muted_contacts") == ["a", "b"]

    @pytest.mark.asyncio
    async def test_wrongly_typed_value_falls_back_to_default(self):
        store = InMemoryPreferenceStore({"sound_enabled": "yes", "muted_contacts": [1, 2]})
        await store.load()

        assert store.get_bool("sound_enabled", True) is True
        assert store.get_string_list("muted_contacts") == []

    @pytest.mark.asyncio
    async def test_returned_lists_are_copies(self):
        store = InMemoryPreferenceStore({"muted_contacts": ["a"]})
        await store.load()

        store.get_string_list("muted_contacts").append("b")

        assert store.get_string_list("muted_contacts") == ["a"]


class TestBrokenStore:
    """Tests for storage failures."""

    @pytest.mark.asyncio
    async def test_load_failure_yields_defaults(self):
        store = BrokenStore()
        await store.load()

        assert store.get_bool("notifications_enabled", True) is True

    @pytest.mark.asyncio
    async def test_write_failure_propagates_and_keeps_old_value(self):
        store = BrokenStore()
        await store.load()

        with pytest.raises(OSError):
            await store.set_bool("sound_enabled", False)

        assert store.get_bool("sound_enabled", True) is True


class TestSqlPreferenceStore:
    """Tests for the SQLAlchemy-backed store."""

    @pytest.mark.asyncio
    async def test_values_persist_across_instances(self, sql_store, async_engine):
        await sql_store.load()
        await sql_store.set_string_list("blocked_contacts", ["abc.onion"])
        await sql_store.set_string("blocked_since", '{"abc.onion": 1000}')
        await sql_store.set_bool("notifications_enabled", False)

        reloaded = SqlPreferenceStore(sql_store.session_maker)
        await reloaded.load()

        assert reloaded.get_string_list("blocked_contacts") == ["abc.onion"]
        assert reloaded.get_string("blocked_since") == '{"abc.onion": 1000}'
        assert reloaded.get_bool("notifications_enabled", True) is False

    @pytest.mark.asyncio
    async def test_overwriting_a_key_updates_the_row(self, sql_store):
        await sql_store.set_bool("sound_enabled", True)
        await sql_store.set_bool("sound_enabled", False)

        reloaded = SqlPreferenceStore(sql_store.session_maker)
        await reloaded.load()

        assert reloaded.get_bool("sound_enabled", True) is False
