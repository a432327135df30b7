"""
Error Taxonomy and Global Error Handling

This module defines the exception hierarchy shared by the retrieval pipeline
and the exception handlers registered on the FastAPI application.

Propagation Policy
------------------
- ConfigurationError is fatal and raised before any work starts.
- StoreUnavailable is recovered by the Retriever (empty context + warning).
- EmbeddingFailure and GenerationFailure surface as request failures.
- MalformedHistoryTurn is dropped silently by the Composer.
- MalformedProfile is recovered by falling back to the default persona.
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("persona.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class PersonaRagError(RuntimeError):
    """Base error for every failure raised by the pipeline."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ConfigurationError(PersonaRagError, ValueError):
    """Raised when chunking or retrieval parameters are invalid."""


class StoreUnavailable(PersonaRagError):
    """Raised when the vector store cannot be reached or queried."""

    status_code = 503


class EmbeddingFailure(PersonaRagError):
    """Raised when embedding generation fails."""


class GenerationFailure(PersonaRagError):
    """Raised when the chat completion call fails."""


class MalformedHistoryTurn(PersonaRagError, ValueError):
    """Raised when a history turn has an unknown role or non-text content."""

    status_code = 400


class MalformedProfile(PersonaRagError, ValueError):
    """Raised when a persona or team profile source is missing or invalid."""


class InvalidRequest(PersonaRagError, ValueError):
    """Raised when an incoming request payload is unusable."""

    status_code = 400


class NotFound(PersonaRagError, LookupError):
    """Raised when a requested resource does not exist."""

    status_code = 404


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def pipeline_exception_handler(
    request: Request,
    exc: PersonaRagError,
) -> JSONResponse:
    """
    Render a pipeline failure with the status derived from the error.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : PersonaRagError
        The pipeline error.

    Returns
    -------
    JSONResponse
        ``{"error": <message>}`` with ``exc.status_code``.
    """
    logger.error(
        "Request failed: %s %s (%s: %s)",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
    )

    payload: Dict[str, Any] = {"error": str(exc) or "Internal Server Error"}

    return JSONResponse(
        status_code=exc.status_code,
        content=payload,
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Logs the full stack trace and returns a generic 500 with no internal
    details.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {"error": "Internal Server Error"}

    return JSONResponse(
        status_code=500,
        content=payload,
    )
