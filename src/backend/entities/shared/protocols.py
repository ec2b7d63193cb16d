"""Protocol interfaces for I/O boundaries.

These protocols enable dependency injection for testability.
Production implementations wrap the Postgres and LLM clients; test fakes
return canned data with zero network or filesystem access.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from models import ChatMessage, TableInfo


@runtime_checkable
class SchemaAccessor(Protocol):
    """Reads table/column metadata and sample rows from the database."""

    async def list_tables(self) -> list[TableInfo]:
        """Return every table exposed to the assistant, with columns.

        Returns:
            Schema snapshot, ordered by table name.
        """
        ...

    async def sample_rows(self, table: str, n: int) -> list[dict[str, Any]]:
        """Return up to ``n`` rows from ``table``.

        Args:
            table: Table name as reported by ``list_tables``.
            n: Maximum number of rows.

        Returns:
            Rows as JSON-safe dicts.
        """
        ...


@runtime_checkable
class SqlExecutor(Protocol):
    """Executes read-only SQL against the database.

    Returns a dict with keys: ``success``, ``columns``, ``rows``,
    ``row_count``, ``error``.
    """

    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
    ) -> dict[str, Any]:
        """Execute a SQL query.

        Args:
            query: SQL statement, optionally with ``?`` placeholders.
            params: Bind-parameter values (or ``None``).

        Returns:
            Execution result dict with rows, columns, and status.
        """
        ...


@runtime_checkable
class ModelProvider(Protocol):
    """A single configured LLM provider."""

    name: str

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one prompt pair and return the raw reply text."""
        ...

    async def narrate(self, prompt: str) -> str:
        """Send a short single-turn prompt to the smaller narration model."""
        ...


@runtime_checkable
class HistoryStore(Protocol):
    """Maps a session identifier to its ordered, capped message list."""

    async def append(self, session_id: str, message: ChatMessage) -> None:
        """Append a message, creating the session on first use."""
        ...

    async def get(self, session_id: str) -> list[ChatMessage]:
        """Return the session's messages in arrival order (empty if unknown)."""
        ...

    async def clear(self, session_id: str) -> None:
        """Delete a session. Succeeds when the session does not exist."""
        ...

    async def list_sessions(self) -> dict[str, int]:
        """Return session ids mapped to their message counts."""
        ...

    async def clear_all(self) -> None:
        """Delete every session."""
        ...
