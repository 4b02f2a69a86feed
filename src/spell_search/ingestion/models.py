"""
Search Document Model

This module defines the canonical, flat document shape every source spell
record is normalized into before being published to the search collection.
"""

from __future__ import annotations

from typing import List
from pydantic import BaseModel, Field, ConfigDict


class SearchDocument(BaseModel):
    """
    A single spell as stored in the search collection.

    ``id`` and ``slug`` are both derived from ``name`` and are identical;
    ``id`` is the upsert key.
    """

    id: str = Field(
        ...,
        description="Deterministic identifier derived from the spell name.",
    )

    name: str = Field(..., description="Display name of the spell.")

    slug: str = Field(..., description="URL-safe slug, currently equal to id.")

    level: int = Field(
        ...,
        ge=0,
        le=9,
        description="Spell level; also the collection's default sort key.",
    )

    school: str = Field(
        default="",
        description="Full school name, or the raw code when unmapped.",
    )

    classes: List[str] = Field(
        default_factory=list,
        description="Distinct class names that can use the spell.",
    )

    description: str = Field(
        default="",
        description="Flattened plain text of the spell's entries.",
    )

    source: str = Field(default="", description="Source book abbreviation.")

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
    )
