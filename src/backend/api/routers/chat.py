"""
Chat API routes.

This module provides the chat endpoints backed by ``process_message()``:
1. ``POST /message`` runs one turn through the NL2SQL pipeline
2. ``/history/{session_id}`` reads or clears a session's messages
3. ``/sessions`` lists or clears every session
4. ``/suggestions`` offers starter questions for the current schema
"""

import logging
from typing import Any

from api.dependencies import get_clients
from api.errors import internal_error
from entities.nl2sql_controller import process_message
from entities.workflow.clients import PipelineClients
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from models import ApiResponse, ChatRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["chat"])

BASE_SUGGESTIONS = [
    "Show all the data",
    "How many records are there?",
    "Show the last 10 records",
    "Filter by today's date",
    "Group by category and count",
    "Show basic statistics",
]


def _ok(data: Any = None, message: str | None = None) -> dict[str, Any]:  # noqa: ANN401
    return ApiResponse(success=True, data=data, message=message).model_dump(
        mode="json", by_alias=True, exclude_none=True
    )


@router.post("/message", response_model=None)
async def post_message(
    request: ChatRequest,
    clients: PipelineClients = Depends(get_clients),
) -> dict[str, Any] | JSONResponse:
    """Process a chat message and return the assistant's reply."""
    try:
        turn = await process_message(request, clients)
    except Exception as e:
        return internal_error("Failed to process chat message", e)

    data = turn.to_response_data().model_dump(mode="json", by_alias=True)
    return _ok(data)


@router.get("/history/{session_id}")
async def get_history(
    session_id: str,
    clients: PipelineClients = Depends(get_clients),
) -> dict[str, Any]:
    """Return a session's messages in order (empty for unknown sessions)."""
    messages = await clients.history.get(session_id)
    data = [m.model_dump(mode="json", by_alias=True) for m in messages]
    return _ok(data, "Chat history retrieved successfully")


@router.delete("/history/{session_id}")
async def delete_history(
    session_id: str,
    clients: PipelineClients = Depends(get_clients),
) -> dict[str, Any]:
    """Clear a session's history. Succeeds for unknown sessions too."""
    await clients.history.clear(session_id)
    return _ok(message="Chat history cleared successfully")


@router.get("/sessions")
async def list_sessions(clients: PipelineClients = Depends(get_clients)) -> dict[str, Any]:
    """List active sessions with their message counts."""
    sessions = await clients.history.list_sessions()
    data = [{"sessionId": sid, "messageCount": count} for sid, count in sessions.items()]
    return _ok(data, f"Found {len(data)} sessions")


@router.delete("/sessions")
async def clear_sessions(clients: PipelineClients = Depends(get_clients)) -> dict[str, Any]:
    """Clear every session."""
    await clients.history.clear_all()
    return _ok(message="All chat sessions cleared successfully")


@router.get("/suggestions", response_model=None)
async def get_suggestions(
    clients: PipelineClients = Depends(get_clients),
) -> dict[str, Any] | JSONResponse:
    """Return starter questions, two of them naming the first table."""
    try:
        tables = await clients.schema_accessor.list_tables()
    except Exception as e:
        return internal_error("Failed to get query suggestions", e)

    suggestions = list(BASE_SUGGESTIONS)
    if tables:
        first_table = tables[0].name
        suggestions.extend(
            [
                f"Show data from the {first_table} table",
                f"How many records are in the {first_table} table?",
            ]
        )
    return _ok(suggestions, "Query suggestions retrieved successfully")
