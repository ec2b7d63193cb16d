"""
FastAPI server for the SQL chat assistant.

This module handles application setup, lifespan management, and middleware configuration.
Route handlers are organized in the routers/ package.

The pipeline clients (schema catalog, SQL executor, model provider,
responder, and history store) are created once at startup and shared by
every request through ``app.state``.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import uvicorn
from api.errors import unhandled_exception_handler, validation_exception_handler
from api.routers import chat_router, data_router
from config.settings import get_settings
from dotenv import load_dotenv
from entities.workflow.clients import create_pipeline_clients
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

settings = get_settings()

# Configure logging - use force=True to prevent duplicate handlers
logger = logging.getLogger(__name__)
logging.basicConfig(level=settings.log_level.upper(), force=True)

# Reduce noise from Azure SDK and other libraries
logging.getLogger("azure").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("anthropic").setLevel(logging.WARNING)
# Reduce agent_framework verbosity (it logs all message content at INFO level)
logging.getLogger("agent_framework").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan handler.

    Builds the pipeline clients on startup. A missing LLM provider raises
    ``ProviderConfigurationError`` here, which aborts startup.
    """
    logger.info("SQL Chat Assistant API starting")

    clients = create_pipeline_clients(settings)
    application.state.clients = clients
    logger.info("Using LLM provider: %s", clients.model.name)

    yield

    application.state.clients = None
    logger.info("Application shutdown complete")


# Create FastAPI application
app = FastAPI(title="SQL Chat Assistant", lifespan=lifespan)

app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(chat_router)
app.include_router(data_router)


@app.get("/health")
async def health_check() -> dict[str, object]:
    """Health check endpoint."""
    clients = getattr(app.state, "clients", None)
    return {
        "status": "healthy",
        "provider": clients.model.name if clients is not None else None,
    }


if __name__ == "__main__":
    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=True)  # noqa: S104
