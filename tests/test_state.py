"""
Tests for conversation state.

Tests ConversationStore pending clarifications, message buffer,
TTL expiry and LRU eviction.
"""

import pytest
from datetime import datetime, timedelta, timezone

from commandless.runtime.slots import Slot
from commandless.runtime.state import ConversationStore, MessageRecord


class FakeClock:
    """Manually advanced clock"""

    def __init__(self):
        self.now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return ConversationStore(ttl_seconds=60, max_entries=3, buffer_size=3, clock=clock)


def record(message_id, content="hi", author="7"):
    return MessageRecord(message_id=message_id, content=content, author=author)


class TestPending:
    """Pending clarification lifecycle"""

    def test_set_and_get(self, store):
        store.set_pending("7", "c", "warn", {Slot.REASON: "spam"}, "which user?", "warn for spam", 0.4)
        state = store.get("7", "c")
        assert state.awaiting_clarification
        assert state.pending_command.command_name == "warn"
        assert state.pending_command.params == {Slot.REASON: "spam"}
        assert state.pending_command.confidence == 0.4
        assert state.clarification_question == "which user?"
        assert state.original_message == "warn for spam"

    def test_params_are_copied(self, store):
        params = {Slot.REASON: "spam"}
        store.set_pending("7", "c", "warn", params, "q", "m")
        params[Slot.USER] = "1"
        assert Slot.USER not in store.get("7", "c").pending_command.params

    def test_resolve_clears_pending_but_keeps_messages(self, store):
        store.record_message("7", "c", record("m1"))
        store.set_pending("7", "c", "warn", {}, "q", "m")

        pending = store.resolve("7", "c")

        assert pending.command_name == "warn"
        state = store.get("7", "c")
        assert not state.awaiting_clarification
        assert state.clarification_question is None
        assert [m.message_id for m in state.messages] == ["m1"]
        assert store.resolve("7", "c") is None

    def test_conversations_are_keyed_by_user_and_channel(self, store):
        store.set_pending("7", "c", "warn", {}, "q", "m")
        assert store.get("8", "c") is None
        assert store.get("7", "other") is None

    def test_delete(self, store):
        store.set_pending("7", "c", "warn", {}, "q", "m")
        store.delete("7", "c")
        store.delete("7", "c")
        assert store.get("7", "c") is None
        assert len(store) == 0


class TestExpiry:
    """TTL expiry"""

    def test_state_expires_lazily(self, store, clock):
        store.set_pending("7", "c", "warn", {}, "q", "m")
        clock.advance(61)
        assert len(store) == 1
        assert store.get("7", "c") is None
        assert len(store) == 0

    def test_state_at_ttl_is_live(self, store, clock):
        store.set_pending("7", "c", "warn", {}, "q", "m")
        clock.advance(60)
        assert store.get("7", "c") is not None

    def test_activity_refreshes_ttl(self, store, clock):
        store.set_pending("7", "c", "warn", {}, "q", "m")
        clock.advance(50)
        store.record_message("7", "c", record("m1"))
        clock.advance(50)
        assert store.get("7", "c").awaiting_clarification

    def test_evict_expired(self, store, clock):
        store.record_message("1", "c", record("a"))
        clock.advance(40)
        store.record_message("2", "c", record("b"))
        clock.advance(30)
        assert store.evict_expired() == 1
        assert store.get("1", "c") is None
        assert store.get("2", "c") is not None


class TestCapacity:
    """LRU eviction"""

    def test_oldest_entry_is_evicted(self, store):
        for user in ("1", "2", "3", "4"):
            store.record_message(user, "c", record(user))
        assert len(store) == 3
        assert store.get("1", "c") is None

    def test_access_refreshes_recency(self, store):
        for user in ("1", "2", "3"):
            store.record_message(user, "c", record(user))
        store.get("1", "c")
        store.record_message("4", "c", record("4"))
        assert store.get("1", "c") is not None
        assert store.get("2", "c") is None

    def test_unbounded(self, clock):
        store = ConversationStore(max_entries=0, clock=clock)
        for user in range(50):
            store.record_message(str(user), "c", record(str(user)))
        assert len(store) == 50


class TestMessages:
    """Recent message buffer"""

    def test_buffer_keeps_latest(self, store):
        for i in range(5):
            store.record_message("7", "c", record(f"m{i}"))
        assert [m.message_id for m in store.recent_messages("7", "c")] == ["m2", "m3", "m4"]

    def test_recent_messages_limit(self, store):
        for i in range(3):
            store.record_message("7", "c", record(f"m{i}"))
        assert [m.message_id for m in store.recent_messages("7", "c", limit=2)] == ["m1", "m2"]
        assert store.recent_messages("7", "c", limit=0) == []
        assert store.recent_messages("8", "c") == []

    def test_find_message(self, store):
        store.record_message("7", "c", MessageRecord("m1", "Which user?", "bot", is_bot=True))
        store.record_message("7", "c", record("m2"))
        found = store.find_message("7", "c", "m1")
        assert found.content == "Which user?"
        assert found.is_bot
        assert store.find_message("7", "c", "missing") is None
