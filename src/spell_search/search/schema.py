"""
Spell collection schema.
"""

from __future__ import annotations

from typing import Any, Dict


def spell_collection_schema(name: str = "spells") -> Dict[str, Any]:
    """Typesense schema for the spell collection; ``level`` is the default sort."""
    return {
        "name": name,
        "fields": [
            {"name": "name", "type": "string", "infix": True},
            {"name": "slug", "type": "string"},
            {"name": "level", "type": "int32", "facet": True},
            {"name": "school", "type": "string", "facet": True},
            {"name": "classes", "type": "string[]", "facet": True},
            {"name": "description", "type": "string"},
            {"name": "source", "type": "string", "facet": True},
        ],
        "default_sorting_field": "level",
    }
