"""
In-memory session history.

Each session (identified by an opaque string) holds an ordered list of
chat messages capped at ``max_messages``; the oldest messages are dropped
first. Sessions are created implicitly on first append.

Note: This is a per-process store. For multi-instance deployments a
shared backend must keep appends atomic per session and reads
prefix-consistent.
"""

import logging
from collections import OrderedDict
from threading import Lock

from models import ChatMessage

logger = logging.getLogger(__name__)

DEFAULT_MAX_MESSAGES = 20
DEFAULT_MAX_SESSIONS = 1000


class InMemoryHistoryStore:
    """``HistoryStore`` backed by an ``OrderedDict`` of message lists.

    All mutations happen under a lock, so appends to the same session are
    never lost and readers always receive a copy of a prefix of the append
    order. Least-recently-used sessions are evicted beyond ``max_sessions``.

    Args:
        max_messages: Messages kept per session.
        max_sessions: Sessions kept before LRU eviction.
    """

    def __init__(
        self,
        max_messages: int = DEFAULT_MAX_MESSAGES,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
    ) -> None:
        if max_messages < 1:
            raise ValueError("max_messages must be at least 1")
        self._max_messages = max_messages
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, list[ChatMessage]] = OrderedDict()
        self._lock = Lock()

    @property
    def max_messages(self) -> int:
        """Per-session message cap."""
        return self._max_messages

    async def append(self, session_id: str, message: ChatMessage) -> None:
        """Append a message, trimming the oldest beyond the cap."""
        with self._lock:
            messages = self._sessions.setdefault(session_id, [])
            messages.append(message)
            overflow = len(messages) - self._max_messages
            if overflow > 0:
                del messages[:overflow]
            self._sessions.move_to_end(session_id)

            while len(self._sessions) > self._max_sessions:
                evicted_id, _ = self._sessions.popitem(last=False)
                logger.info("Evicted LRU session: session_id=%s", evicted_id)

    async def get(self, session_id: str) -> list[ChatMessage]:
        """Return a copy of the session's messages (empty when unknown)."""
        with self._lock:
            return list(self._sessions.get(session_id, ()))

    async def clear(self, session_id: str) -> None:
        """Remove a session. Unknown sessions are ignored."""
        with self._lock:
            if self._sessions.pop(session_id, None) is not None:
                logger.info("Cleared history for session_id=%s", session_id)

    async def list_sessions(self) -> dict[str, int]:
        """Return session ids (oldest activity first) with message counts."""
        with self._lock:
            return {sid: len(messages) for sid, messages in self._sessions.items()}

    async def clear_all(self) -> None:
        """Remove every session."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
        logger.info("Cleared %d sessions", count)
