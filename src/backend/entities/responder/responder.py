"""Conversational responder.

Turns a parsed intent, and the rows of an executed query when there are
any, into the short reply shown in the chat thread.
"""

from __future__ import annotations

import logging
from typing import Any

from entities.prompt_builder import build_follow_up_prompt, build_narration_prompt
from entities.shared.protocols import ModelProvider
from models import QueryIntent

from .follow_ups import fallback_follow_ups, parse_follow_ups

logger = logging.getLogger(__name__)


def fallback_summary(count: int) -> str:
    """Deterministic reply used when narration is off or fails."""
    return f"Found {count} results for your query."


class Responder:
    """Builds assistant replies.

    Args:
        narrator: Model used for the narration call, or ``None`` to skip it.
        enable_narration: Issue a second model call to describe results.
    """

    def __init__(self, narrator: ModelProvider | None = None, enable_narration: bool = True) -> None:
        self._narrator = narrator
        self._enable_narration = enable_narration and narrator is not None

    async def respond(
        self,
        intent: QueryIntent,
        user_message: str = "",
        execution: dict[str, Any] | None = None,
    ) -> str:
        """Return the reply text for a turn. Never raises.

        Without execution results the model's explanation is used as is.
        With results, a narration call summarises them; any failure or an
        empty narration falls back to ``fallback_summary``.
        """
        if execution is None:
            return intent.explanation

        count = int(execution.get("row_count", 0))
        if not self._enable_narration:
            return intent.explanation or fallback_summary(count)

        try:
            prompt = build_narration_prompt(
                user_message,
                intent.sql_query,
                execution.get("rows", []),
                count,
            )
            narration = (await self._narrator.narrate(prompt)).strip()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Narration failed, using fallback: %s", exc)
            return fallback_summary(count)

        return narration or fallback_summary(count)

    async def follow_ups(
        self,
        intent: QueryIntent,
        user_message: str,
        execution: dict[str, Any],
        tables: list[str] | None = None,
        table: str | None = None,
    ) -> list[str]:
        """Suggest up to two follow-up questions for an executed query. Never raises.

        The narration model is asked first; when narration is off, the call
        fails, or the reply holds no usable line, keyword-based suggestions
        are returned instead. ``table`` names the queried table in those.
        """
        count = int(execution.get("row_count", 0))
        table = table or intent.suggested_table
        if not self._enable_narration:
            return fallback_follow_ups(user_message, table, count)

        try:
            prompt = build_follow_up_prompt(
                user_message,
                intent.sql_query,
                list(execution.get("columns", [])),
                count,
                tables,
            )
            suggestions = parse_follow_ups(await self._narrator.narrate(prompt))
        except Exception as exc:  # noqa: BLE001
            logger.warning("Follow-up suggestion failed, using fallback: %s", exc)
            return fallback_follow_ups(user_message, table, count)

        return suggestions or fallback_follow_ups(user_message, table, count)
