"""
Global Error Handling

This module defines the exception hierarchy shared by the ingestion pipeline
and the search API, plus the application-wide FastAPI safety net.

Design Goals
------------
- Never leak internal exception details (or API keys) to clients
- Always return deterministic, machine-readable error responses
- Log full stack traces internally for debugging
- Keep backend failures distinguishable from input failures
"""

from __future__ import annotations

import logging
from typing import Dict, Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("spell.errors")


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class SearchBackendError(RuntimeError):
    """
    Raised when the search backend rejects a request or cannot be reached.

    ``status`` is the HTTP status returned by the backend, or ``None`` when
    the request never produced a response (connection refused, DNS, ...).
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class CollectionNotFoundError(SearchBackendError):
    """Raised when the target collection does not exist (HTTP 404)."""


class BatchImportError(SearchBackendError):
    """Raised when a document batch is not fully accepted by the backend."""


class SourceAccessError(RuntimeError):
    """Raised when source spell files cannot be listed, read or parsed."""


# ---------------------------------------------------------------------
# Public Exception Handlers
# ---------------------------------------------------------------------

async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """
    Catch-all handler for uncaught exceptions.

    Registered with FastAPI as the final safety net for anything the routes
    do not translate themselves.

    Parameters
    ----------
    request : Request
        The incoming HTTP request that triggered the exception.

    exc : Exception
        The uncaught exception instance.

    Returns
    -------
    JSONResponse
        A JSON 500 response with a minimal error payload.
    """
    logger.exception(
        "Unhandled exception during request: %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )

    payload: Dict[str, Any] = {
        "error": "internal_server_error",
        "details": "Internal server error",
    }

    return JSONResponse(
        status_code=500,
        content=payload,
    )
