"""Confidence gate.

Decides, from the parsed intent alone, whether a turn is answered
conversationally, executed, or bounced back for clarification.

* no SQL and ``confidence >= conversational_threshold`` → CONVERSATIONAL
* no SQL, or ``confidence < execute_threshold``        → CLARIFY
* otherwise                                            → EXECUTE

Both thresholds are inclusive on the accepting side.
"""

from __future__ import annotations

import logging

from models import GateDecision, QueryIntent

logger = logging.getLogger(__name__)

CONVERSATIONAL_THRESHOLD = 0.9
EXECUTE_THRESHOLD = 0.3

CLARIFICATION_MESSAGE = (
    "Sorry, I couldn't understand your question. Could you rephrase it or be more "
    "specific about which data you'd like to see?\n"
    "\n"
    "Some suggestions:\n"
    '- "Show all records from the [name] table"\n'
    '- "How many records are in the [name] table?"\n'
    '- "Filter data where [column] equals [value]"'
)

APOLOGY_MESSAGE = (
    "An error occurred while processing your query. Please try rephrasing the "
    "question or check that the table and column names are correct."
)


def decide(
    intent: QueryIntent,
    conversational_threshold: float = CONVERSATIONAL_THRESHOLD,
    execute_threshold: float = EXECUTE_THRESHOLD,
) -> GateDecision:
    """Route a parsed intent.

    Args:
        intent: The parsed model reply (confidence already in ``[0, 1]``).
        conversational_threshold: Minimum confidence for a SQL-less answer.
        execute_threshold: Minimum confidence to run generated SQL.

    Returns:
        The gate decision.
    """
    if not intent.has_sql and intent.confidence >= conversational_threshold:
        decision = GateDecision.CONVERSATIONAL
    elif not intent.has_sql or intent.confidence < execute_threshold:
        decision = GateDecision.CLARIFY
    else:
        decision = GateDecision.EXECUTE

    logger.info(
        "Gate: has_sql=%s confidence=%.2f -> %s",
        intent.has_sql,
        intent.confidence,
        decision.value,
    )
    return decision
