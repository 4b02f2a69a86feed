"""
Source Book Loading

Discovers spell book files in the data directory and yields their raw spell
records. Every failure here is an input-access failure and is raised as
``SourceAccessError`` before anything touches the search backend.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from ..core.errors import SourceAccessError

logger = logging.getLogger("spell.ingest")


def discover_source_files(data_dir: Path, pattern: str = "spells-*.json") -> List[Path]:
    """
    List spell book files in ``data_dir``, sorted by name for a stable order.

    Raises
    ------
    SourceAccessError
        If the directory does not exist or cannot be listed.
    """
    if not data_dir.is_dir():
        raise SourceAccessError(f"Spell data directory not found: {data_dir}")
    try:
        return sorted(p for p in data_dir.glob(pattern) if p.is_file())
    except OSError as exc:
        raise SourceAccessError(f"Could not list {data_dir}: {exc}") from exc


def load_source_file(path: Path) -> List[Dict[str, Any]]:
    """
    Read one book file and return its ``spell`` list.

    A file without a ``spell`` field contributes no records.

    Raises
    ------
    SourceAccessError
        If the file cannot be read, is not valid JSON, or is not an object.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SourceAccessError(f"Could not read {path}: {exc}") from exc

    try:
        data = json.loads(content)
    except json.JSONDecodeError as exc:
        raise SourceAccessError(f"Invalid JSON in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise SourceAccessError(f"Expected a JSON object in {path}")

    spells = data.get("spell") or []
    if not isinstance(spells, list):
        raise SourceAccessError(f"'spell' field in {path} is not a list")
    return spells
