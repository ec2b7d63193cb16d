"""
Shared models for entities.

These models are used across the pipeline components and the API layer.
All models are re-exported here.
"""

from .chat import (
    MAX_MESSAGE_LENGTH,
    ApiResponse,
    ChatContext,
    ChatMessage,
    ChatRequest,
    ChatResponseData,
    ErrorDetail,
    QueryResult,
)
from .intent import GateDecision, QueryIntent
from .schema import ColumnInfo, TableInfo

__all__ = [
    # Schema (catalog snapshot)
    "ColumnInfo",
    "TableInfo",
    # Intent (parsed model output)
    "GateDecision",
    "QueryIntent",
    # Chat (API and history)
    "MAX_MESSAGE_LENGTH",
    "ApiResponse",
    "ChatContext",
    "ChatMessage",
    "ChatRequest",
    "ChatResponseData",
    "ErrorDetail",
    "QueryResult",
]
