"""Unit tests for InMemoryHistoryStore.

Tests cover ordering, the per-session cap, idempotent clears, copies on
read, session listing, and LRU eviction of whole sessions.
"""

import pytest
from entities.history import InMemoryHistoryStore
from models import ChatMessage


def _msg(content: str, role: str = "user") -> ChatMessage:
    return ChatMessage(role=role, content=content)


# ── Append / get ─────────────────────────────────────────────────────────


class TestAppendAndGet:
    """Messages are returned in arrival order."""

    async def test_order_preserved(self, history_store: InMemoryHistoryStore) -> None:
        await history_store.append("s1", _msg("a"))
        await history_store.append("s1", _msg("b", "assistant"))

        messages = await history_store.get("s1")
        assert [m.content for m in messages] == ["a", "b"]

    async def test_unknown_session_is_empty(self, history_store: InMemoryHistoryStore) -> None:
        assert await history_store.get("missing") == []

    async def test_get_returns_copy(self, history_store: InMemoryHistoryStore) -> None:
        await history_store.append("s1", _msg("a"))
        messages = await history_store.get("s1")
        messages.clear()

        assert len(await history_store.get("s1")) == 1

    async def test_sessions_are_isolated(self, history_store: InMemoryHistoryStore) -> None:
        await history_store.append("s1", _msg("a"))
        await history_store.append("s2", _msg("b"))

        assert [m.content for m in await history_store.get("s1")] == ["a"]
        assert [m.content for m in await history_store.get("s2")] == ["b"]


# ── Cap ──────────────────────────────────────────────────────────────────


class TestCap:
    """Oldest messages are dropped beyond the cap."""

    async def test_default_cap_is_twenty(self, history_store: InMemoryHistoryStore) -> None:
        for i in range(25):
            await history_store.append("s1", _msg(str(i)))

        messages = await history_store.get("s1")
        assert len(messages) == 20
        assert messages[0].content == "5"
        assert messages[-1].content == "24"

    async def test_custom_cap(self) -> None:
        store = InMemoryHistoryStore(max_messages=2)
        for i in range(3):
            await store.append("s1", _msg(str(i)))

        assert [m.content for m in await store.get("s1")] == ["1", "2"]

    def test_invalid_cap_rejected(self) -> None:
        with pytest.raises(ValueError, match="max_messages"):
            InMemoryHistoryStore(max_messages=0)


# ── Clear / sessions ─────────────────────────────────────────────────────


class TestClear:
    """Clearing is idempotent."""

    async def test_clear_existing(self, history_store: InMemoryHistoryStore) -> None:
        await history_store.append("s1", _msg("a"))
        await history_store.clear("s1")

        assert await history_store.get("s1") == []

    async def test_clear_unknown_succeeds(self, history_store: InMemoryHistoryStore) -> None:
        await history_store.clear("never-seen")
        assert await history_store.list_sessions() == {}

    async def test_list_sessions_counts(self, history_store: InMemoryHistoryStore) -> None:
        await history_store.append("s1", _msg("a"))
        await history_store.append("s1", _msg("b"))
        await history_store.append("s2", _msg("c"))

        assert await history_store.list_sessions() == {"s1": 2, "s2": 1}

    async def test_clear_all(self, history_store: InMemoryHistoryStore) -> None:
        await history_store.append("s1", _msg("a"))
        await history_store.append("s2", _msg("b"))
        await history_store.clear_all()

        assert await history_store.list_sessions() == {}


class TestEviction:
    """Least-recently-used sessions are evicted beyond the session cap."""

    async def test_lru_session_evicted(self) -> None:
        store = InMemoryHistoryStore(max_sessions=2)
        await store.append("s1", _msg("a"))
        await store.append("s2", _msg("b"))
        await store.append("s1", _msg("c"))
        await store.append("s3", _msg("d"))

        sessions = await store.list_sessions()
        assert set(sessions) == {"s1", "s3"}
