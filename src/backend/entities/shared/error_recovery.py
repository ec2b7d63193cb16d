"""Error recovery helpers for query validation failures.

Pure functions that classify validation violations, build user-friendly
error messages, and select recovery suggestions that reference the
tables actually available.
"""

from models import TableInfo

# ── Error classification patterns ────────────────────────────────────────

_DISALLOWED_TABLE_PATTERNS = {"not in the allowlist", "table not allowed"}
_WRITE_PATTERNS = {"dangerous keyword", "must be select", "multiple statements"}
_SYNTAX_PATTERNS = {"unbalanced", "query is empty", "syntax error"}

_GENERIC_SUGGESTIONS = [
    "Show all records from the [name] table",
    "How many records are in the [name] table?",
    "Show the last 10 records from the [name] table",
]

MAX_SUGGESTIONS = 3


def classify_violations(violations: list[str]) -> str:
    """Classify validation violations into a category.

    Args:
        violations: List of violation description strings.

    Returns:
        One of 'disallowed_tables', 'write_attempt', 'syntax', or 'generic'.
    """
    combined = " ".join(violations).lower()
    for pattern in _DISALLOWED_TABLE_PATTERNS:
        if pattern in combined:
            return "disallowed_tables"
    for pattern in _WRITE_PATTERNS:
        if pattern in combined:
            return "write_attempt"
    for pattern in _SYNTAX_PATTERNS:
        if pattern in combined:
            return "syntax"
    return "generic"


def build_suggestions(tables: list[TableInfo], preferred: str | None = None) -> list[str]:
    """Pick up to three example questions grounded in real table names.

    Args:
        tables: Schema snapshot.
        preferred: Table to mention first (e.g. the model's suggested table).

    Returns:
        Example questions; generic placeholders when no tables exist.
    """
    names = [t.name for t in tables]
    if preferred and preferred in names:
        names.remove(preferred)
        names.insert(0, preferred)
    if not names:
        return _GENERIC_SUGGESTIONS[:MAX_SUGGESTIONS]

    first = names[0]
    suggestions = [
        f"Show all records from the {first} table",
        f"How many records are in the {first} table?",
    ]
    if len(names) > 1:
        suggestions.append(f"Show the last 10 records from the {names[1]} table")
    else:
        suggestions.append(f"Which columns does the {first} table have?")
    return suggestions[:MAX_SUGGESTIONS]


def build_error_recovery(
    violations: list[str],
    tables: list[TableInfo],
    preferred_table: str | None = None,
) -> str:
    """Build a user-friendly reply for a query that failed validation.

    Args:
        violations: List of query validation violation strings.
        tables: Schema snapshot used for the suggestions.
        preferred_table: Table to mention first in the suggestions.

    Returns:
        Markdown reply with the explanation and 2-3 suggested questions.
    """
    category = classify_violations(violations)

    if category == "disallowed_tables":
        message = (
            "Your request references data that isn't available in the current database. "
            "Try asking about one of the listed tables instead."
        )
    elif category == "write_attempt":
        message = (
            "I can only run read-only queries, so I can't modify, create, or delete data. "
            "Try asking a question that reads data instead."
        )
    elif category == "syntax":
        message = (
            "I had trouble constructing a valid query for your request. "
            "Could you rephrase your question or be more specific about what data you need?"
        )
    else:
        message = (
            "I was unable to generate a valid query for your request. "
            "Please try rephrasing your question or be more specific about what data you need."
        )

    suggestions = build_suggestions(tables, preferred_table)
    bullet_list = "\n".join(f'- "{s}"' for s in suggestions)
    return f"{message}\n\nSome suggestions:\n{bullet_list}"
