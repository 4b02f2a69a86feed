"""
Search Routes

This module exposes the public spell search endpoint. Requests carry a
free-text term plus optional level / school / class facets; the route
validates them, forwards one search to Typesense and relays the result.

Response Contract
-----------------
- 200 ``{"hits": [...]}`` relayed unchanged from the backend, cached for
  one hour.
- 200 ``{"hits": []}`` without a backend call when the term is shorter
  than two characters and no facet is set, or when a facet value fails
  validation.
- 500 ``{"error", "details"}`` when the backend fails. ``details`` says
  whether an API key was configured, never what it is.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..config import Settings
from ..core.errors import SearchBackendError
from ..search.client import TypesenseClient
from ..search.query import QueryRequest, run_search
from .dependencies import get_search_client, get_settings

logger = logging.getLogger("spell.search")

router = APIRouter(prefix="/api", tags=["search"])

CACHE_CONTROL = "public, max-age=3600"


@router.get(
    "/search",
    summary="Search spells by name with optional facet filters",
    status_code=status.HTTP_200_OK,
)
async def search(
    client: Annotated[TypesenseClient, Depends(get_search_client)],
    cfg: Annotated[Settings, Depends(get_settings)],
    q: Annotated[Optional[str], Query()] = None,
    level: Annotated[Optional[str], Query()] = None,
    school: Annotated[Optional[str], Query()] = None,
    class_name: Annotated[Optional[str], Query(alias="class")] = None,
) -> JSONResponse:
    """
    Search the spell collection.

    Parameters
    ----------
    q : Optional[str]
        Free-text term matched against spell names (prefix and infix).
    level : Optional[str]
        Exact spell level, 0-9.
    school : Optional[str]
        Exact, fully expanded school name.
    class_name : Optional[str]
        Exact class name (query parameter ``class``).

    Returns
    -------
    JSONResponse
        The relayed backend payload, an empty hit list, or a 500 error body.
    """
    try:
        req = QueryRequest(
            term=q,
            level=level,
            school=school,
            class_name=class_name,
        )
    except ValidationError as exc:
        logger.warning(
            "Rejected search facets: %s",
            "; ".join(err["msg"] for err in exc.errors()),
        )
        return JSONResponse(content={"hits": []})

    if req.is_trivial:
        return JSONResponse(content={"hits": []})

    try:
        data = await run_search(client, cfg.collection_name, req)
    except SearchBackendError as exc:
        logger.error(
            "Search failed (status=%s): %s",
            exc.status,
            exc.message,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": "Search Failed",
                "details": {
                    "status": exc.status,
                    "reason": exc.message,
                    "key_provided": bool(client.api_key_provided),
                    "host": cfg.typesense_host,
                },
            },
        )

    return JSONResponse(
        content=data,
        headers={"Cache-Control": CACHE_CONTROL},
    )
