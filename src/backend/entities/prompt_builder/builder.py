"""Prompt builder logic.

Renders the schema snapshot, the user's message, and recent query
history into a provider-agnostic (system, user) prompt pair. Pure
functions, no I/O.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from models import ColumnInfo, TableInfo

MAX_PREVIOUS_QUERIES = 3

_RULES = (
    "Rules:\n"
    "1. Generate valid PostgreSQL SQL queries only\n"
    "2. Generate read-only SELECT queries; never modify data or schema\n"
    "3. Always use proper table and column names from the schema\n"
    "4. For date comparisons, use PostgreSQL date functions\n"
    "5. Use ILIKE for case-insensitive text searches\n"
    "6. Always include appropriate WHERE clauses for filtering\n"
    "7. Use LIMIT for queries that might return too many results\n"
    "8. If the message is not a data question, leave \"sql\" empty and answer "
    "in \"explanation\"\n"
    "9. Set \"confidence\" between 0.0 and 1.0 to reflect how sure you are that "
    "the query answers the question"
)

_OUTPUT_FORMAT = (
    "Respond in JSON format with: "
    '{"sql": "query", "explanation": "what the query does", '
    '"confidence": 0.9, "suggestedTable": "main_table"}'
)

_EXAMPLES = (
    "Examples:\n"
    '- "Show me all users" → SELECT * FROM users LIMIT 100\n'
    '- "How many orders were placed today?" → '
    "SELECT COUNT(*) FROM orders WHERE created_at >= CURRENT_DATE\n"
    '- "Find products with price over 100" → SELECT * FROM products WHERE price > 100'
)


@dataclass(frozen=True)
class PromptPair:
    """System and user prompts for a single model call."""

    system: str
    user: str


def _describe_column(column: ColumnInfo) -> str:
    traits = [column.type, "nullable" if column.nullable else "not null"]
    if column.is_primary_key:
        traits.append("primary key")
    return f"{column.name} ({', '.join(traits)})"


def describe_schema(tables: list[TableInfo]) -> str:
    """Render every table and column of the snapshot, without truncation.

    Args:
        tables: Schema snapshot.

    Returns:
        One block per table separated by blank lines, or a placeholder
        line when the snapshot is empty.
    """
    if not tables:
        return "(no tables available)"

    blocks: list[str] = []
    for table in tables:
        columns = ", ".join(_describe_column(c) for c in table.columns) or "(no columns)"
        blocks.append(f"Table: {table.name}\nColumns: {columns}")
    return "\n\n".join(blocks)


def build_system_prompt(tables: list[TableInfo]) -> str:
    """Build the system prompt: schema, fixed rules, and output format."""
    return (
        "You are a SQL query generator for PostgreSQL. Your task is to convert "
        "natural language questions into SQL queries based on the provided "
        "database schema.\n"
        "\n"
        "Database Schema:\n"
        f"{describe_schema(tables)}\n"
        "\n"
        f"{_RULES}\n"
        f"{_OUTPUT_FORMAT}\n"
        "\n"
        f"{_EXAMPLES}"
    )


def build_user_prompt(
    message: str,
    previous_queries: list[str] | None = None,
    current_table: str | None = None,
) -> str:
    """Build the user prompt: the verbatim message plus contextual hints.

    Only the last ``MAX_PREVIOUS_QUERIES`` previous queries are included.
    """
    lines = [f'Natural Language Query: "{message}"']

    if current_table:
        lines.append(f"Current Table Context: {current_table}")

    recent = [q for q in (previous_queries or []) if q][-MAX_PREVIOUS_QUERIES:]
    if recent:
        lines.append(f"Previous Queries: {', '.join(recent)}")

    lines.append("")
    lines.append("Generate the SQL query and respond in the specified JSON format.")
    return "\n".join(lines)


def build_prompts(
    message: str,
    tables: list[TableInfo],
    previous_queries: list[str] | None = None,
    current_table: str | None = None,
) -> PromptPair:
    """Render the prompt pair for one chat turn.

    Args:
        message: The user's message, included verbatim.
        tables: Full schema snapshot; never truncated.
        previous_queries: Queries generated earlier in this session, oldest first.
        current_table: Optional table the user is currently looking at.

    Returns:
        A ``PromptPair`` ready for the model invoker.
    """
    return PromptPair(
        system=build_system_prompt(tables),
        user=build_user_prompt(message, previous_queries, current_table),
    )


def build_narration_prompt(message: str, sql: str, rows: list[dict], row_count: int) -> str:
    """Build the single-turn prompt used to narrate executed query results.

    Only the first 20 rows are shown to keep the narration call small.
    """
    preview = json.dumps(rows[:20], indent=2, default=str)
    return (
        f'User asked: "{message}"\n'
        f"Query executed: {sql}\n"
        f"Total rows: {row_count}\n"
        f"Results: {preview}\n"
        "\n"
        "Generate a conversational response that:\n"
        "1. Answers the user's question based on the data\n"
        "2. Highlights key insights or patterns\n"
        "3. Suggests follow-up questions if appropriate\n"
        "4. Keeps the tone friendly and professional\n"
        "5. Limit response to 2-3 sentences\n"
        "\n"
        "Response:"
    )


def build_follow_up_prompt(
    message: str,
    sql: str,
    columns: list[str],
    row_count: int,
    tables: list[str] | None = None,
) -> str:
    """Build the prompt asking for two follow-up questions to an answered query."""
    lines = [
        f'The user asked: "{message}"',
        f"Query executed: {sql}",
        f"Result columns: {', '.join(columns) or '(none)'}",
        f"Rows returned: {row_count}",
    ]
    if tables:
        lines.append(f"Available tables: {', '.join(tables)}")
    lines.extend(
        [
            "",
            "Suggest exactly 2 natural follow-up questions the user might ask next.",
            "Each question must be answerable from the available tables.",
            "Write one question per line, at most 15 words each, with no numbering.",
        ]
    )
    return "\n".join(lines)
