"""
Ingestion Package

Flattening, identity and normalization of raw spell records, plus the
driver that republishes them to the search collection.
"""

from .extractor import extract_text, parse_entries
from .models import SearchDocument
from .normalizer import SCHOOL_CODE_MAP, normalize_record, validate_record
from .slugify import slugify

__all__ = [
    "extract_text",
    "parse_entries",
    "SearchDocument",
    "SCHOOL_CODE_MAP",
    "normalize_record",
    "validate_record",
    "slugify",
]
