"""
Data API routes.

Read-only views of the schema catalog used by the client's table picker.
"""

import logging
from typing import Any

from api.dependencies import get_clients
from api.errors import error_response, internal_error
from entities.workflow.clients import MAX_SAMPLE_ROWS, PipelineClients
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from models import ApiResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/data", tags=["data"])

DEFAULT_SAMPLE_ROWS = 10


@router.get("/tables", response_model=None)
async def list_tables(clients: PipelineClients = Depends(get_clients)) -> dict[str, Any] | JSONResponse:
    """List the tables visible to the assistant, with their columns."""
    try:
        tables = await clients.schema_accessor.list_tables()
    except Exception as e:
        return internal_error("Failed to retrieve tables", e)

    body = ApiResponse(
        success=True,
        data=[t.model_dump(mode="json", by_alias=True) for t in tables],
        message=f"Found {len(tables)} tables",
    )
    return body.model_dump(mode="json", by_alias=True, exclude_none=True)


@router.get("/tables/{name}/sample", response_model=None)
async def sample_table(
    name: str,
    limit: int = Query(default=DEFAULT_SAMPLE_ROWS, ge=1, le=MAX_SAMPLE_ROWS),
    clients: PipelineClients = Depends(get_clients),
) -> dict[str, Any] | JSONResponse:
    """Return up to ``limit`` rows from a known table."""
    try:
        rows = await clients.schema_accessor.sample_rows(name, limit)
    except LookupError:
        return error_response(status.HTTP_404_NOT_FOUND, f"Table '{name}' not found")
    except ValueError as e:
        return error_response(status.HTTP_400_BAD_REQUEST, str(e))
    except Exception as e:
        return internal_error("Failed to retrieve sample rows", e)

    logger.info("Sampled %d rows from table=%s", len(rows), name)
    body = ApiResponse(success=True, data=rows, message=f"Retrieved {len(rows)} rows")
    return body.model_dump(mode="json", by_alias=True, exclude_none=True)
