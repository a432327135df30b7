"""
Persona RAG Server Application Entry Point

This module defines the FastAPI application instance, registers all routers,
configures logging and global exception handling, and provides a
test-friendly application factory.
"""

from __future__ import annotations

import contextlib
import logging
from typing import AsyncIterator

from fastapi import FastAPI

from .config import settings
from .core.errors import (
    PersonaRagError,
    pipeline_exception_handler,
    unhandled_exception_handler,
)
from .api import (
    ask_routes,
    health_routes,
    team_routes,
)
from .api.dependencies import get_profile_registry, get_vector_store


logger = logging.getLogger("persona.app")


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Load profiles once at startup and flush the vector store on shutdown.
    """
    persona = get_profile_registry().reload().persona
    logger.info(
        "Starting %s API (vector store: %s)",
        persona.display_name or f"{settings.persona_name}Bot",
        get_vector_store().describe(),
    )

    if not settings.openai_api_key.get_secret_value():
        logger.warning(
            "OPENAI_API_KEY is not set. The /ask endpoint will fail until this is configured."
        )

    yield

    logger.info("Shutting down")
    await get_vector_store().flush()


# ---------------------------------------------------------------------
# Application Factory (Test-Friendly)
# ---------------------------------------------------------------------

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns
    -------
    FastAPI
        Fully configured FastAPI application.
    """
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app = FastAPI(
        title="persona-rag-server",
        version="0.1.0",
        lifespan=lifespan,
    )

    # --------------------------------------------------------------
    # Global Exception Handling
    # --------------------------------------------------------------

    app.add_exception_handler(PersonaRagError, pipeline_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------
    # Router Registration
    # --------------------------------------------------------------

    app.include_router(health_routes.router)
    app.include_router(team_routes.router)
    app.include_router(ask_routes.router)

    return app


# ---------------------------------------------------------------------
# Default Application Instance (for Uvicorn)
# ---------------------------------------------------------------------

app = create_app()
