"""Pipeline client container and Protocol adapters for dependency injection.

``PipelineClients`` bundles every I/O dependency the chat pipeline
needs. Production code constructs it via ``create_pipeline_clients()``
from real Postgres and LLM clients; tests construct it from in-memory
fakes.

Protocol adapters (``CatalogAdapter``, ``SqlExecutorAdapter``) wrap
``PostgresClient`` so they satisfy the corresponding ``Protocol``
interfaces.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from config.settings import Settings
from entities.confidence_gate.gate import CONVERSATIONAL_THRESHOLD, EXECUTE_THRESHOLD
from entities.history import InMemoryHistoryStore
from entities.model_invoker import ModelInvoker, resolve_provider
from entities.responder import Responder
from entities.shared.protocols import HistoryStore, ModelProvider, SchemaAccessor, SqlExecutor
from entities.shared.sql_client import PostgresClient
from models import TableInfo

logger = logging.getLogger(__name__)

MAX_SAMPLE_ROWS = 100


# ---------------------------------------------------------------------------
# Protocol adapters
# ---------------------------------------------------------------------------


class CatalogAdapter:
    """``SchemaAccessor`` backed by ``PostgresClient``.

    Each call opens and closes a fresh connection; nothing is cached
    across requests.

    Args:
        settings: Application settings carrying the connection details.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def list_tables(self) -> list[TableInfo]:
        """Read the schema snapshot from the catalog."""
        async with PostgresClient(self._settings) as client:
            return await client.fetch_tables()

    async def sample_rows(self, table: str, n: int) -> list[dict[str, Any]]:
        """Return up to ``n`` rows (capped at ``MAX_SAMPLE_ROWS``) from a known table.

        Raises:
            LookupError: If ``table`` is not in the catalog.
        """
        limit = max(1, min(n, MAX_SAMPLE_ROWS))
        async with PostgresClient(self._settings) as client:
            known = {t.name for t in await client.fetch_tables()}
            if table not in known:
                raise LookupError(f"Table '{table}' not found")
            return await client.fetch_sample_rows(table, limit)


class SqlExecutorAdapter:
    """``SqlExecutor`` backed by ``PostgresClient``.

    Each ``execute()`` call opens and closes a fresh database connection.

    Args:
        settings: Application settings carrying the connection details.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
    ) -> dict[str, Any]:
        """Execute a read-only SQL query.

        Args:
            query: SQL SELECT statement, optionally with ``?`` placeholders.
            params: Bind-parameter values (or ``None``).

        Returns:
            Result dict with ``success``, ``columns``, ``rows``,
            ``row_count``, and ``error`` keys.
        """
        try:
            async with PostgresClient(self._settings, read_only=True) as client:
                return await client.execute_query(query, params)
        except Exception as exc:
            logger.exception("SQL execution error")
            return {
                "success": False,
                "error": str(exc),
                "columns": [],
                "rows": [],
                "row_count": 0,
            }


# ---------------------------------------------------------------------------
# PipelineClients dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PipelineClients:
    """Immutable bundle of all I/O dependencies for the chat pipeline.

    All I/O fields use Protocol types, enabling full dependency injection.
    Production code passes real clients; tests pass fakes.

    Args:
        schema_accessor: Reads the schema snapshot.
        sql_executor: Runs validated, read-only SQL.
        model: Model used for SQL generation (one provider, one attempt).
        responder: Builds the reply text for executed and conversational turns.
        history: Per-session message store.
        conversational_threshold: Gate threshold for SQL-less answers.
        execute_threshold: Gate threshold for running SQL.
        default_query_limit: LIMIT appended to queries that lack one.
    """

    schema_accessor: SchemaAccessor
    sql_executor: SqlExecutor
    model: ModelProvider
    responder: Responder
    history: HistoryStore
    conversational_threshold: float = CONVERSATIONAL_THRESHOLD
    execute_threshold: float = EXECUTE_THRESHOLD
    default_query_limit: int = 100


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_pipeline_clients(
    settings: Settings,
    history: HistoryStore | None = None,
) -> PipelineClients:
    """Build a ``PipelineClients`` from application ``Settings``.

    Resolves the LLM provider once (raising ``ProviderConfigurationError``
    when no credentials are configured), wraps it in a ``ModelInvoker``
    with the configured timeout, and wraps ``PostgresClient`` in Protocol
    adapters.

    Args:
        settings: Centralised application configuration.
        history: History store to use. Defaults to a fresh in-memory store.

    Returns:
        Fully-initialised ``PipelineClients`` ready for ``process_message()``.
    """
    provider = resolve_provider(settings)
    model = ModelInvoker(provider, timeout_seconds=settings.model_timeout_seconds)

    return PipelineClients(
        schema_accessor=CatalogAdapter(settings),
        sql_executor=SqlExecutorAdapter(settings),
        model=model,
        responder=Responder(model, enable_narration=settings.enable_result_narration),
        history=history
        or InMemoryHistoryStore(
            max_messages=settings.max_history_messages,
            max_sessions=settings.max_session_cache_size,
        ),
        conversational_threshold=settings.conversational_confidence_threshold,
        execute_threshold=settings.execute_confidence_threshold,
        default_query_limit=settings.default_query_limit,
    )
