"""NL2SQL pipeline: single-function entry point for a chat turn.

``process_message()`` composes the pipeline components:

    quick response? → schema → prompts → model → parser → confidence gate
        → [execute + narrate | conversational | clarification | apology]
        → history

All routing is expressed as if/else logic over a ``GateDecision``. All
I/O goes through ``PipelineClients``; no global state is read or written.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from entities.confidence_gate import APOLOGY_MESSAGE, CLARIFICATION_MESSAGE, decide
from entities.prompt_builder import build_prompts
from entities.query_validator import ensure_limit, validate_query
from entities.response_parser import parse_model_response
from entities.responder import try_quick_response
from entities.shared.error_recovery import build_error_recovery
from entities.shared.errors import ModelInvocationError
from entities.workflow.clients import PipelineClients
from models import (
    ChatMessage,
    ChatRequest,
    ChatResponseData,
    GateDecision,
    QueryIntent,
    QueryResult,
    TableInfo,
)

logger = logging.getLogger(__name__)

DEFAULT_SESSION_ID = "default"
PREVIOUS_QUERY_COUNT = 3


@dataclass(frozen=True)
class ChatTurn:
    """Outcome of one processed user message.

    ``decision`` is ``None`` when the model call itself failed and the
    gate was never consulted.
    """

    session_id: str
    message: ChatMessage
    intent: QueryIntent
    decision: GateDecision | None
    confidence: float
    query_result: QueryResult | None = None
    sql_query: str | None = None
    follow_up_suggestions: list[str] = field(default_factory=list)

    def to_response_data(self) -> ChatResponseData:
        """Shape the turn for the ``POST /api/chat/message`` response."""
        return ChatResponseData(
            message=self.message,
            query_result=self.query_result,
            confidence=self.confidence,
            sql_query=self.sql_query,
            follow_up_suggestions=self.follow_up_suggestions,
        )


def _previous_queries(history: list[ChatMessage], request: ChatRequest) -> list[str]:
    """Collect the most recent generated queries, client-supplied ones first."""
    queries: list[str] = []
    if request.context and request.context.previous_queries:
        queries.extend(q for q in request.context.previous_queries if q)
    queries.extend(m.query_generated for m in history if m.query_generated)
    return queries[-PREVIOUS_QUERY_COUNT:]


def _remembered_table(history: list[ChatMessage]) -> str | None:
    """Table of the most recent assistant turn that used or suggested one."""
    for message in reversed(history):
        if message.role == "assistant" and message.table_used:
            return message.table_used
    return None


def _known_table(name: str | None, tables: list[TableInfo]) -> str | None:
    """Return the snapshot's spelling of ``name``, or ``None`` if it is not in the snapshot."""
    if not name:
        return None
    bare = name.split(".")[-1].lower()
    return next((t.name for t in tables if t.name.lower() == bare), None)


async def _record(
    clients: PipelineClients,
    session_id: str,
    intent: QueryIntent,
    decision: GateDecision | None,
    content: str,
    confidence: float,
    *,
    sql_query: str | None = None,
    query_result: QueryResult | None = None,
    table_used: str | None = None,
    follow_up_suggestions: list[str] | None = None,
) -> ChatTurn:
    """Append the assistant message to history and build the turn."""
    assistant_message = ChatMessage(
        role="assistant",
        content=content,
        query_generated=sql_query or None,
        results_count=query_result.count if query_result else None,
        confidence=confidence,
        table_used=table_used,
    )
    await clients.history.append(session_id, assistant_message)

    return ChatTurn(
        session_id=session_id,
        message=assistant_message,
        intent=intent,
        decision=decision,
        confidence=confidence,
        query_result=query_result,
        sql_query=sql_query or None,
        follow_up_suggestions=follow_up_suggestions or [],
    )


async def _generate_intent(
    request: ChatRequest,
    tables: list[TableInfo],
    previous_queries: list[str],
    current_table: str | None,
    clients: PipelineClients,
) -> QueryIntent:
    """Build the prompts, call the model once, and parse the reply.

    Raises:
        ModelInvocationError: If the model call fails or times out.
    """
    prompts = build_prompts(request.message, tables, previous_queries, current_table)

    raw_reply = await clients.model.complete(prompts.system, prompts.user)
    return parse_model_response(raw_reply)


async def _execute_and_respond(
    request: ChatRequest,
    session_id: str,
    intent: QueryIntent,
    tables: list[TableInfo],
    clients: PipelineClients,
) -> ChatTurn:
    """Validate, execute, and narrate an accepted query.

    Validation failures and execution errors become apology replies with
    confidence 0.0; they never propagate.
    """
    suggested = _known_table(intent.suggested_table, tables)
    validation = validate_query(intent.sql_query, {t.name for t in tables})
    if not validation.is_valid:
        logger.warning("Generated SQL rejected: %s", "; ".join(validation.violations))
        content = build_error_recovery(validation.violations, tables, intent.suggested_table)
        return await _record(
            clients, session_id, intent, GateDecision.EXECUTE, content, 0.0,
            sql_query=intent.sql_query, table_used=suggested,
        )

    table_used = suggested or next(
        (name for name in (_known_table(t, tables) for t in validation.tables) if name), None
    )
    sql = ensure_limit(intent.sql_query, clients.default_query_limit)
    execution = await clients.sql_executor.execute(sql)

    if not execution.get("success"):
        logger.warning("Generated SQL failed to execute: %s", execution.get("error"))
        return await _record(
            clients, session_id, intent, GateDecision.EXECUTE, APOLOGY_MESSAGE, 0.0,
            sql_query=sql, table_used=table_used,
        )

    query_result = QueryResult.from_rows(execution.get("rows", []), execution.get("columns", []))
    content = await clients.responder.respond(intent, request.message, execution)
    follow_ups = await clients.responder.follow_ups(
        intent, request.message, execution, [t.name for t in tables], table_used
    )

    return await _record(
        clients, session_id, intent, GateDecision.EXECUTE, content, intent.confidence,
        sql_query=sql, query_result=query_result, table_used=table_used,
        follow_up_suggestions=follow_ups,
    )


async def process_message(request: ChatRequest, clients: PipelineClients) -> ChatTurn:
    """Run the full pipeline for a single user message.

    Routing overview:

    1. **Quick responses** - greetings and similar are answered without
       a model call.
    2. **Generation** - schema snapshot + prompts + one model call +
       parsing. A failed model call yields an apology with confidence 0.0.
       When the client sends no current table, the table remembered from
       the session's earlier turns is passed to the prompt instead.
    3. **Gate** - conversational answers use the explanation, rejected
       intents get the clarification template, accepted queries are
       validated, executed, narrated, and given follow-up suggestions.

    Both the user message and the assistant reply are appended to the
    session history. The schema is read before anything is appended, so
    a catalog failure leaves the history untouched.

    Args:
        request: The validated chat request.
        clients: Injectable I/O dependencies.

    Returns:
        The processed ``ChatTurn``.

    Raises:
        Exception: Schema catalog failures and other unexpected errors
            propagate to the caller.
    """
    session_id = request.session_id or DEFAULT_SESSION_ID
    history = await clients.history.get(session_id)
    previous_queries = _previous_queries(history, request)
    current_table = request.context.current_table if request.context else None
    current_table = current_table or _remembered_table(history)

    logger.info(
        "Processing chat message: session_id=%s length=%d has_context=%s current_table=%s",
        session_id,
        len(request.message),
        request.context is not None,
        current_table,
    )

    tables: list[TableInfo] = []
    intent = try_quick_response(request.message)
    if intent is None:
        tables = await clients.schema_accessor.list_tables()

    await clients.history.append(session_id, ChatMessage(role="user", content=request.message))

    if intent is None:
        try:
            intent = await _generate_intent(
                request, tables, previous_queries, current_table, clients
            )
        except ModelInvocationError as exc:
            logger.error("Model call failed for session_id=%s: %s", session_id, exc)
            failed = QueryIntent(explanation=str(exc), confidence=0.0, source="provider_error")
            return await _record(clients, session_id, failed, None, APOLOGY_MESSAGE, 0.0)

    decision = decide(intent, clients.conversational_threshold, clients.execute_threshold)

    if decision is GateDecision.CONVERSATIONAL:
        content = await clients.responder.respond(intent)
        return await _record(
            clients, session_id, intent, decision, content, intent.confidence,
            table_used=_known_table(intent.suggested_table, tables),
        )

    if decision is GateDecision.CLARIFY:
        return await _record(
            clients, session_id, intent, decision, CLARIFICATION_MESSAGE, intent.confidence,
            table_used=_known_table(intent.suggested_table, tables),
        )

    return await _execute_and_respond(request, session_id, intent, tables, clients)
