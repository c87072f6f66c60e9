"""Unit tests for SessionBootstrap."""

import pytest

from gradepath_telemetry.adapters.storage.fake import FakeKeyValueStore
from gradepath_telemetry.core.session import (
    SESSION_ID_KEY,
    USER_ID_KEY,
    SessionBootstrap,
    SessionIdentity,
    new_id,
)


def _ids(*values):
    it = iter(values)
    return lambda: next(it)


class TestSessionBootstrap:
    @pytest.mark.asyncio
    async def test_first_run_generates_and_persists_both_ids(self):
        store = FakeKeyValueStore()

        identity = await SessionBootstrap(store, _ids("user-a", "session-a")).bootstrap()

        assert identity == SessionIdentity(user_id="user-a", session_id="session-a")
        assert store.data == {USER_ID_KEY: "user-a", SESSION_ID_KEY: "session-a"}

    @pytest.mark.asyncio
    async def test_existing_user_id_is_reused(self):
        store = FakeKeyValueStore({USER_ID_KEY: "user-a"})

        identity = await SessionBootstrap(store, _ids("session-b")).bootstrap()

        assert identity.user_id == "user-a"
        assert identity.session_id == "session-b"
        assert store.writes_for(USER_ID_KEY) == []

    @pytest.mark.asyncio
    async def test_each_run_gets_a_new_session(self):
        store = FakeKeyValueStore()
        factory = _ids("user-a", "session-1", "session-2")

        first = await SessionBootstrap(store, factory).bootstrap()
        second = await SessionBootstrap(store, factory).bootstrap()

        assert first.user_id == second.user_id == "user-a"
        assert first.session_id != second.session_id
        assert store.writes_for(SESSION_ID_KEY) == ["session-1", "session-2"]

    @pytest.mark.asyncio
    async def test_stored_session_id_is_never_reused(self):
        store = FakeKeyValueStore({USER_ID_KEY: "user-a", SESSION_ID_KEY: "stale"})

        identity = await SessionBootstrap(store, _ids("fresh")).bootstrap()

        assert identity.session_id == "fresh"
        assert SESSION_ID_KEY not in store.reads

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stored", ["", "   "])
    async def test_blank_user_id_is_replaced(self, stored):
        store = FakeKeyValueStore({USER_ID_KEY: stored})

        identity = await SessionBootstrap(store, _ids("user-new", "session")).bootstrap()

        assert identity.user_id == "user-new"
        assert store.data[USER_ID_KEY] == "user-new"

    @pytest.mark.asyncio
    async def test_unreadable_storage_generates_id(self):
        store = FakeKeyValueStore({USER_ID_KEY: "user-a"})
        store.fail_reads = True

        identity = await SessionBootstrap(store, _ids("user-b", "session")).bootstrap()

        assert identity.user_id == "user-b"

    @pytest.mark.asyncio
    async def test_unwritable_storage_keeps_ids_in_memory(self):
        store = FakeKeyValueStore()
        store.fail_writes = True

        identity = await SessionBootstrap(store, _ids("user-a", "session-a")).bootstrap()

        assert identity == SessionIdentity(user_id="user-a", session_id="session-a")
        assert store.data == {}


class TestNewId:
    def test_ids_are_unique_uuid_strings(self):
        ids = {new_id() for _ in range(50)}

        assert len(ids) == 50
        assert all(len(value) == 36 and value.count("-") == 4 for value in ids)


class _CrashingStore:
    """Store raising errors outside the StorageException contract."""

    async def get(self, key):
        raise RuntimeError("backend crashed")

    async def set(self, key, value):
        raise RuntimeError("backend crashed")

    async def remove(self, key):
        raise RuntimeError("backend crashed")


class TestSessionBootstrapUnexpectedErrors:
    @pytest.mark.asyncio
    async def test_any_store_error_degrades_to_memory(self):
        identity = await SessionBootstrap(_CrashingStore(), _ids("user-a", "session-a")).bootstrap()

        assert identity == SessionIdentity(user_id="user-a", session_id="session-a")
