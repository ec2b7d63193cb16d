"""Shared test fixtures for the SQL chat assistant."""

import sys
from pathlib import Path
from typing import Any

import pytest

# Ensure src/backend/ is on the path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src" / "backend"))

from config.settings import Settings
from entities.history import InMemoryHistoryStore
from entities.responder import Responder
from entities.workflow.clients import PipelineClients
from models import ColumnInfo, TableInfo

# ---------------------------------------------------------------------------
# Protocol fakes
# ---------------------------------------------------------------------------


class FakeSchemaAccessor:
    """In-memory fake satisfying the ``SchemaAccessor`` protocol.

    Returns canned tables and sample rows, or raises ``error`` when set.
    """

    def __init__(
        self,
        tables: list[TableInfo] | None = None,
        samples: dict[str, list[dict[str, Any]]] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.tables: list[TableInfo] = tables if tables is not None else []
        self.samples: dict[str, list[dict[str, Any]]] = samples or {}
        self.error: Exception | None = error
        self.list_calls = 0

    async def list_tables(self) -> list[TableInfo]:
        """Return the canned schema snapshot."""
        self.list_calls += 1
        if self.error:
            raise self.error
        return list(self.tables)

    async def sample_rows(self, table: str, n: int) -> list[dict[str, Any]]:
        """Return up to ``n`` canned rows, mimicking ``CatalogAdapter``."""
        if self.error:
            raise self.error
        if table not in {t.name for t in self.tables}:
            raise LookupError(f"Table '{table}' not found")
        return self.samples.get(table, [])[:n]


class FakeSqlExecutor:
    """In-memory fake satisfying the ``SqlExecutor`` protocol.

    Returns canned rows/columns or an error, and records every call.
    """

    def __init__(
        self,
        rows: list[dict[str, Any]] | None = None,
        columns: list[str] | None = None,
        error: str | None = None,
    ) -> None:
        self.rows: list[dict[str, Any]] = rows or []
        self.columns: list[str] = columns or []
        self.error: str | None = error
        self.calls: list[tuple[str, list[Any] | None]] = []

    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
    ) -> dict[str, Any]:
        """Return a success/failure dict mimicking ``execute_query`` output."""
        self.calls.append((query, params))

        if self.error:
            return {
                "success": False,
                "error": self.error,
                "columns": [],
                "rows": [],
                "row_count": 0,
            }

        return {
            "success": True,
            "columns": self.columns,
            "rows": self.rows,
            "row_count": len(self.rows),
            "error": None,
        }


class FakeModelProvider:
    """Scripted fake satisfying the ``ModelProvider`` protocol.

    ``replies`` are returned in order by ``complete``. ``narrate`` returns
    ``narrations`` in order, then ``narration`` once they run out. Setting
    ``error`` makes every call raise it.
    """

    def __init__(
        self,
        replies: list[str] | None = None,
        narration: str = "",
        narrations: list[str] | None = None,
        error: Exception | None = None,
        name: str = "fake",
    ) -> None:
        self.name = name
        self.replies: list[str] = list(replies or [])
        self.narration = narration
        self.narrations: list[str] = list(narrations or [])
        self.error: Exception | None = error
        self.complete_calls: list[tuple[str, str]] = []
        self.narrate_calls: list[str] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Record the prompt pair and return the next scripted reply."""
        self.complete_calls.append((system_prompt, user_prompt))
        if self.error:
            raise self.error
        return self.replies.pop(0) if self.replies else ""

    async def narrate(self, prompt: str) -> str:
        """Record the prompt and return the next canned narration."""
        self.narrate_calls.append(prompt)
        if self.error:
            raise self.error
        return self.narrations.pop(0) if self.narrations else self.narration


# ---------------------------------------------------------------------------
# Shared data
# ---------------------------------------------------------------------------

USERS_TABLE = TableInfo(
    name="users",
    columns=[
        ColumnInfo(name="id", type="integer", nullable=False, is_primary_key=True),
        ColumnInfo(name="name", type="text"),
        ColumnInfo(name="email", type="text"),
    ],
    primary_key=["id"],
)

ORDERS_TABLE = TableInfo(
    name="orders",
    columns=[
        ColumnInfo(name="id", type="integer", nullable=False, is_primary_key=True),
        ColumnInfo(name="user_id", type="integer", nullable=False),
        ColumnInfo(name="total", type="numeric"),
        ColumnInfo(name="created_at", type="timestamp"),
    ],
    primary_key=["id"],
)


def make_clients(
    *,
    tables: list[TableInfo] | None = None,
    model: FakeModelProvider | None = None,
    executor: FakeSqlExecutor | None = None,
    schema_accessor: FakeSchemaAccessor | None = None,
    history: InMemoryHistoryStore | None = None,
    enable_narration: bool = True,
) -> PipelineClients:
    """Build ``PipelineClients`` from fakes with sensible defaults."""
    model = model or FakeModelProvider()
    return PipelineClients(
        schema_accessor=schema_accessor
        or FakeSchemaAccessor(tables if tables is not None else [USERS_TABLE, ORDERS_TABLE]),
        sql_executor=executor or FakeSqlExecutor(),
        model=model,
        responder=Responder(model, enable_narration=enable_narration),
        history=history or InMemoryHistoryStore(),
    )


# ---------------------------------------------------------------------------
# Pytest fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def test_settings() -> Settings:
    """Return a ``Settings`` instance populated with safe test defaults."""
    return Settings(
        _env_file=None,
        llm_provider=None,
        openai_api_key=None,
        anthropic_api_key=None,
        azure_ai_project_endpoint="",
        database_server="test-db.local",
        database_user="assistant",
        database_password="secret",  # noqa: S106
    )


@pytest.fixture
def fake_sql_executor() -> FakeSqlExecutor:
    """Return an empty ``FakeSqlExecutor`` instance."""
    return FakeSqlExecutor()


@pytest.fixture
def fake_schema_accessor() -> FakeSchemaAccessor:
    """Return a ``FakeSchemaAccessor`` with the users and orders tables."""
    return FakeSchemaAccessor([USERS_TABLE, ORDERS_TABLE])


@pytest.fixture
def history_store() -> InMemoryHistoryStore:
    """Return a fresh ``InMemoryHistoryStore``."""
    return InMemoryHistoryStore()
