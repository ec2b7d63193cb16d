"""
FastAPI dependencies for shared resources.
"""

import logging

from entities.workflow.clients import PipelineClients
from fastapi import HTTPException, Request

logger = logging.getLogger(__name__)


def get_clients(request: Request) -> PipelineClients:
    """
    Get the pipeline clients from app state.

    Raises HTTPException 503 if not initialized.
    """
    clients = getattr(request.app.state, "clients", None)
    if clients is None:
        raise HTTPException(status_code=503, detail="Pipeline clients not initialized")
    return clients
