"""
Chat API models.

Request/response bodies for the chat endpoints and the message type kept
in session history. Fields are snake_case in Python and camelCase on the
wire.
"""

import uuid
from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

MAX_MESSAGE_LENGTH = 500


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatMessage(_CamelModel):
    """One turn in a conversation. Never mutated after creation."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    query_generated: str | None = Field(default=None, description="SQL produced for this turn")
    results_count: int | None = Field(default=None, description="Rows returned by the query")
    confidence: float | None = Field(default=None, description="Confidence of the parsed intent")
    table_used: str | None = Field(default=None, description="Table the turn queried or suggested")


class ChatContext(_CamelModel):
    """Optional hints supplied by the client alongside a message."""

    current_table: str | None = None
    available_tables: list[str] | None = None
    previous_queries: list[str] | None = None


class ChatRequest(_CamelModel):
    """Body of ``POST /api/chat/message``."""

    message: str = Field(min_length=1, max_length=MAX_MESSAGE_LENGTH)
    session_id: str | None = None
    context: ChatContext | None = None


class QueryResult(_CamelModel):
    """Rows returned by an executed query, shaped for the paginated UI table."""

    data: list[dict[str, Any]] = Field(default_factory=list)
    count: int = 0
    page: int = 1
    page_size: int = 50
    total_pages: int = 0
    columns: list[str] = Field(default_factory=list)

    @classmethod
    def from_rows(
        cls, rows: list[dict[str, Any]], columns: list[str], page_size: int = 50
    ) -> "QueryResult":
        """Build a single-page result from executor rows."""
        count = len(rows)
        return cls(
            data=rows,
            count=count,
            page=1,
            page_size=page_size,
            total_pages=-(-count // page_size) if count else 0,
            columns=columns,
        )


class ChatResponseData(_CamelModel):
    """Payload of a successful chat turn."""

    message: ChatMessage
    query_result: QueryResult | None = None
    confidence: float
    sql_query: str | None = None
    follow_up_suggestions: list[str] = Field(default_factory=list)


class ErrorDetail(_CamelModel):
    """A single failed validation rule."""

    field: str
    message: str


class ApiResponse(_CamelModel):
    """Envelope shared by every ``/api`` endpoint."""

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    details: list[ErrorDetail] | None = None
