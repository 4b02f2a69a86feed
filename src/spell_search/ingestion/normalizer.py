"""
Spell Record Normalization

Maps one raw spell record, as found in the source books, onto the canonical
:class:`SearchDocument` shape.

Normalization is total: a malformed record degrades to defaults instead of
raising, so a single bad entry can never abort an ingestion run. Records
that cannot be indexed meaningfully (no usable name or level) are filtered
out beforehand by :func:`validate_record`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .extractor import extract_text
from .models import SearchDocument
from .slugify import slugify


# ---------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------

SCHOOL_CODE_MAP: Mapping[str, str] = MappingProxyType({
    "A": "Abjuration",
    "C": "Conjuration",
    "D": "Divination",
    "E": "Evocation",
    "EN": "Enchantment",
    "I": "Illusion",
    "N": "Necromancy",
    "T": "Transmutation",
    "V": "Evocation",
})

KNOWN_SCHOOLS = frozenset(SCHOOL_CODE_MAP.values())


# ---------------------------------------------------------------------
# Field Helpers
# ---------------------------------------------------------------------

def expand_school(value: Any) -> str:
    """Expand a short school code; unknown codes pass through unchanged."""
    if value is None:
        return ""
    code = str(value)
    return SCHOOL_CODE_MAP.get(code, code)


def coerce_level(value: Any) -> Optional[int]:
    """
    Coerce a raw level to an int in 0-9.

    Returns ``None`` for anything that is not an integral value in range,
    including booleans and fractional numbers.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)

    if isinstance(value, str):
        value = value.strip()
        if not value.isdecimal():
            return None
        try:
            value = int(value)
        except ValueError:
            return None

    if not isinstance(value, int):
        return None

    return value if 0 <= value <= 9 else None


def _class_references(record: Mapping[str, Any]) -> List[Any]:
    """
    Locate the class reference list.

    Accepts ``classes`` as a list, ``classes.fromClassList`` and a top-level
    ``fromClassList``.
    """
    classes = record.get("classes")
    if isinstance(classes, list):
        return classes
    if isinstance(classes, dict) and isinstance(classes.get("fromClassList"), list):
        return classes["fromClassList"]
    from_list = record.get("fromClassList")
    if isinstance(from_list, list):
        return from_list
    return []


def extract_classes(record: Mapping[str, Any]) -> List[str]:
    """Distinct class names in first-seen order."""
    names: Dict[str, None] = {}
    for ref in _class_references(record):
        name = ref.get("name") if isinstance(ref, dict) else None
        if isinstance(name, str) and name:
            names.setdefault(name, None)
    return list(names)


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

def validate_record(record: Any) -> Optional[str]:
    """
    Check whether a raw record can be indexed.

    Returns
    -------
    Optional[str]
        ``None`` when the record is usable, otherwise a short reason.
    """
    if not isinstance(record, dict):
        return "record is not an object"

    if not slugify(record.get("name") or ""):
        return "missing or empty name"

    if coerce_level(record.get("level")) is None:
        return f"invalid level {record.get('level')!r}"

    return None


def normalize_record(record: Mapping[str, Any]) -> SearchDocument:
    """
    Normalize one raw spell record into a :class:`SearchDocument`.

    Parameters
    ----------
    record : Mapping[str, Any]
        Raw spell object from a source book file.

    Returns
    -------
    SearchDocument
        The flat document. Missing optional fields become empty values.
    """
    name = record.get("name")
    name = "" if name is None else str(name)
    doc_id = slugify(name)

    level = coerce_level(record.get("level"))
    if level is None:
        # Unreachable through the ingestion driver, which rejects these.
        level = 0

    source = record.get("source")

    return SearchDocument(
        id=doc_id,
        name=name,
        slug=doc_id,
        level=level,
        school=expand_school(record.get("school")),
        classes=extract_classes(record),
        description=extract_text(record.get("entries")),
        source="" if source is None else str(source),
    )
