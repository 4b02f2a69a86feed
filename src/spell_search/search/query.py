"""
Query Translation

Turns the discrete search constraints of an incoming request (free text,
level, school, class) into Typesense search parameters.

Security Notes
--------------
Facet values are interpolated into a ``filter_by`` expression, so each one
is checked against an allow-list before use:

- ``level``  : an integer 0-9
- ``school`` : one of the known, fully expanded school names
- ``class``  : letters, digits, spaces, apostrophes and hyphens, starting
  with a letter, at most 64 characters

Anything else is rejected by :class:`QueryRequest` validation.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..ingestion.normalizer import KNOWN_SCHOOLS
from .client import TypesenseClient

logger = logging.getLogger("spell.search")


# ---------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------

MIN_QUERY_LENGTH = 2
PER_PAGE = 250
MATCH_ALL = "*"

CLASS_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9' -]{0,63}$")


def _blank_to_none(v: Any) -> Any:
    if isinstance(v, str):
        v = v.strip()
        return v or None
    return v


# ---------------------------------------------------------------------
# Request Model
# ---------------------------------------------------------------------

class QueryRequest(BaseModel):
    """
    Validated search constraints for a single request.

    Empty or whitespace-only parameters are treated as absent.
    """

    term: Optional[str] = Field(default=None, description="Free-text term.")
    level: Optional[int] = Field(default=None, description="Exact spell level.")
    school: Optional[str] = Field(default=None, description="Exact school name.")
    class_name: Optional[str] = Field(default=None, description="Exact class name.")

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("term", mode="before")
    @classmethod
    def normalize_term(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("level", mode="before")
    @classmethod
    def validate_level(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        if v is None:
            return None
        if isinstance(v, bool):
            raise ValueError("level must be an integer 0-9")
        if isinstance(v, str):
            if not v.isdecimal():
                raise ValueError("level must be an integer 0-9")
            v = int(v)
        if not isinstance(v, int) or not 0 <= v <= 9:
            raise ValueError("level must be an integer 0-9")
        return v

    @field_validator("school", mode="before")
    @classmethod
    def validate_school(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        if v is not None and v not in KNOWN_SCHOOLS:
            raise ValueError(f"unknown school {v!r}")
        return v

    @field_validator("class_name", mode="before")
    @classmethod
    def validate_class_name(cls, v: Any) -> Any:
        v = _blank_to_none(v)
        if v is not None and (not isinstance(v, str) or not CLASS_NAME_PATTERN.match(v)):
            raise ValueError(f"invalid class name {v!r}")
        return v

    @property
    def has_facets(self) -> bool:
        return any(f is not None for f in (self.level, self.school, self.class_name))

    @property
    def effective_term(self) -> str:
        """The term sent to the backend; short or missing terms match all."""
        if self.term is None or len(self.term) < MIN_QUERY_LENGTH:
            return MATCH_ALL
        return self.term

    @property
    def is_trivial(self) -> bool:
        """True when the request is too thin to be worth a backend call."""
        return self.effective_term == MATCH_ALL and not self.has_facets


# ---------------------------------------------------------------------
# Filter Construction
# ---------------------------------------------------------------------

def _filter_value(value: Any) -> str:
    text = str(value)
    # Backtick-quote values with spaces; the allow-lists exclude backticks.
    return f"`{text}`" if " " in text else text


def build_filter(req: QueryRequest) -> str:
    """
    Compose the ``filter_by`` expression.

    Clauses are emitted in the fixed order level, school, class and joined
    with ``&&``. Returns an empty string when no facet is set.
    """
    clauses: List[str] = []
    if req.level is not None:
        clauses.append(f"level:={req.level}")
    if req.school is not None:
        clauses.append(f"school:={_filter_value(req.school)}")
    if req.class_name is not None:
        clauses.append(f"classes:={_filter_value(req.class_name)}")
    return " && ".join(clauses)


def build_search_params(req: QueryRequest) -> Dict[str, Any]:
    """Full Typesense search parameters for a validated request."""
    params: Dict[str, Any] = {
        "q": req.effective_term,
        "query_by": "name",
        "per_page": PER_PAGE,
        "prefix": "true",
        "infix": "always",
    }
    filter_by = build_filter(req)
    if filter_by:
        params["filter_by"] = filter_by
    return params


# ---------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------

async def run_search(
    client: TypesenseClient,
    collection: str,
    req: QueryRequest,
) -> Dict[str, Any]:
    """
    Execute a search and return the raw backend payload unchanged.

    Callers gate trivial requests (see :attr:`QueryRequest.is_trivial`)
    before calling.

    Raises
    ------
    SearchBackendError
        If the backend rejects the request or cannot be reached.
    """
    params = build_search_params(req)
    logger.debug("Searching '%s' with %s", collection, params)
    return await client.search(collection, params)
