"""Follow-up question suggestions for executed queries.

The model is asked for two short follow-up questions. Its reply is
reduced to plain question lines; when that yields nothing, canned
suggestions keyed on the wording of the user's question are used.
"""

from __future__ import annotations

import re

MAX_FOLLOW_UPS = 2
MAX_FOLLOW_UP_LENGTH = 100

_BULLET = re.compile(r"^\s*(?:[-*•]|\d+[.)])\s*")


def parse_follow_ups(text: str) -> list[str]:
    """Extract up to two follow-up questions from a model reply.

    Headings, overlong lines and blank lines are dropped. Bullet and
    numbering prefixes are stripped from the rest.
    """
    suggestions: list[str] = []
    for line in (text or "").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        line = _BULLET.sub("", line).strip().strip('"').strip()
        if not line or len(line) >= MAX_FOLLOW_UP_LENGTH:
            continue
        suggestions.append(line)
        if len(suggestions) == MAX_FOLLOW_UPS:
            break
    return suggestions


def _mentions(message: str, *words: str) -> bool:
    return any(re.search(rf"\b{word}\b", message) for word in words)


def fallback_follow_ups(message: str, table: str | None = None, row_count: int = 0) -> list[str]:
    """Canned follow-ups chosen from keywords in the user's question."""
    lowered = message.lower()
    target = table or "this table"

    if _mentions(lowered, "count", "total", "how many"):
        return [
            f"Can you break the {target} count down by category?",
            "How has this number changed over time?",
        ]
    if _mentions(lowered, "list", "show"):
        return [
            "Can you sort these results differently?",
            "Can you filter these results further?",
        ]
    if _mentions(lowered, "filter", "search", "where", "find"):
        return [
            "Can you show the opposite of this filter?",
            "How many records match these criteria?",
        ]
    if _mentions(lowered, "average", "avg", "sum", "max", "min"):
        return [
            "Can you show the distribution of these values?",
            "Can you compare this across different groups?",
        ]
    if row_count > 10:
        return [
            "Can you show only the top 5 results?",
            "Can you summarise these results by group?",
        ]
    return [
        f"What other data is available in {target}?",
        "Can you show the trend over time?",
    ]
