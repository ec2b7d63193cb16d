"""History package: per-session message storage."""

from .store import InMemoryHistoryStore

__all__ = ["InMemoryHistoryStore"]
