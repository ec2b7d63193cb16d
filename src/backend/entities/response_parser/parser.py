"""Response parser logic.

Two-stage best-effort decoder for model replies:

1. the first brace-delimited JSON object that parses to a dict;
2. otherwise a ``SELECT ... ;`` substring.

Anything else degrades to an empty, zero-confidence intent. The parser
never raises for malformed text; the confidence gate absorbs the
uncertainty.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from models import QueryIntent

logger = logging.getLogger(__name__)

DEFAULT_EXPLANATION = "Query generated successfully"
DEFAULT_JSON_CONFIDENCE = 0.8
REGEX_EXPLANATION = "Query extracted from AI response"
REGEX_CONFIDENCE = 0.6
FAILED_EXPLANATION = "Failed to parse AI response"

_SELECT_PATTERN = re.compile(r"\bSELECT\b[\s\S]*?(?:;|$)", re.IGNORECASE)
_CODE_FENCE_PATTERN = re.compile(r"```[A-Za-z]*")


def normalize_confidence(raw: Any, default: float) -> float:  # noqa: ANN401
    """Convert a reported confidence to the canonical ``[0, 1]`` scale.

    Values in ``(1, 100]`` are read as percentages. Strings such as
    ``"0.7"`` or ``"85%"`` are accepted. Missing or non-numeric values
    yield ``default``; everything else is clamped.
    """
    if raw is None or isinstance(raw, bool):
        return default

    percent = False
    if isinstance(raw, str):
        text = raw.strip()
        if text.endswith("%"):
            percent = True
            text = text[:-1].strip()
        raw = text

    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if math.isnan(value) or math.isinf(value):
        return default

    if percent or 1.0 < value <= 100.0:
        value /= 100.0
    return max(0.0, min(1.0, value))


def _balanced_object_at(text: str, start: int) -> str | None:
    """Return the brace-balanced substring starting at ``text[start] == '{'``.

    Braces inside JSON string literals are ignored.
    """
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return None


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Find the first brace-delimited JSON object in ``text`` that parses to a dict."""
    start = text.find("{")
    while start != -1:
        candidate = _balanced_object_at(text, start)
        if candidate is not None:
            try:
                parsed = json.loads(candidate)
            except json.JSONDecodeError:
                parsed = None
            if isinstance(parsed, dict):
                return parsed
        start = text.find("{", start + 1)
    return None


def _as_text(value: Any) -> str:  # noqa: ANN401
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _intent_from_json(parsed: dict[str, Any]) -> QueryIntent:
    suggested = parsed.get("suggestedTable", parsed.get("suggested_table"))
    return QueryIntent(
        sql_query=_as_text(parsed.get("sql")).strip(),
        explanation=_as_text(parsed.get("explanation")).strip() or DEFAULT_EXPLANATION,
        confidence=normalize_confidence(parsed.get("confidence"), DEFAULT_JSON_CONFIDENCE),
        suggested_table=_as_text(suggested).strip() or None,
        source="json",
    )


def parse_model_response(response_text: str | None) -> QueryIntent:
    """Decode a raw model reply into a ``QueryIntent``.

    Args:
        response_text: The raw text returned by the model.

    Returns:
        The parsed intent. Never raises; the worst case is an empty-SQL
        intent with confidence 0.0.
    """
    text = (response_text or "").strip()

    parsed = extract_json_object(text)
    if parsed is not None:
        intent = _intent_from_json(parsed)
        logger.info(
            "Parsed JSON reply: has_sql=%s confidence=%.2f", intent.has_sql, intent.confidence
        )
        return intent

    sql_match = _SELECT_PATTERN.search(_CODE_FENCE_PATTERN.sub("", text))
    if sql_match:
        logger.info("No JSON in reply; extracted SELECT statement by pattern")
        return QueryIntent(
            sql_query=sql_match.group(0).strip(),
            explanation=REGEX_EXPLANATION,
            confidence=REGEX_CONFIDENCE,
            source="regex",
        )

    logger.warning("Failed to parse model reply: %s", text[:200])
    return QueryIntent(
        sql_query="",
        explanation=FAILED_EXPLANATION,
        confidence=0.0,
        source="none",
    )
