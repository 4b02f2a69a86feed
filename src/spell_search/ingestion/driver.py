"""
Ingestion Driver

Runs one full re-index: read every spell book, normalize the records, and
hand the documents to the :class:`IndexPublisher`.

All source files are read and parsed before the collection is touched, so
an unreadable or malformed file aborts the run without dropping the live
collection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

from ..config import Settings, settings as default_settings
from ..search.client import TypesenseClient
from ..search.publisher import IndexPublisher, PublishReport
from ..search.schema import spell_collection_schema
from .loader import discover_source_files, load_source_file
from .models import SearchDocument
from .normalizer import normalize_record, validate_record

logger = logging.getLogger("spell.ingest")


@dataclass
class IngestionResult:
    files: int
    records: int
    rejected: int
    report: PublishReport


def normalize_records(records: Iterable[Any], origin: str = "") -> Tuple[List[SearchDocument], int]:
    """
    Normalize raw records, dropping the ones that cannot be indexed.

    Returns
    -------
    Tuple[List[SearchDocument], int]
        The documents and the number of rejected records.
    """
    documents: List[SearchDocument] = []
    rejected = 0
    for index, record in enumerate(records):
        reason = validate_record(record)
        if reason is not None:
            rejected += 1
            logger.warning("Skipping record %d in %s: %s", index, origin or "input", reason)
            continue
        documents.append(normalize_record(record))
    return documents, rejected


async def run_ingestion(
    client: TypesenseClient,
    data_dir: Optional[Path] = None,
    collection: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> IngestionResult:
    """
    Re-index every spell found in ``data_dir``.

    Parameters
    ----------
    client : TypesenseClient
        Backend client; owned by the caller.

    data_dir : Optional[Path]
        Directory holding ``spells-*.json`` books. Defaults to settings.data_dir.

    collection : Optional[str]
        Target collection. Defaults to settings.collection_name.

    Raises
    ------
    SourceAccessError
        If the data directory or any book cannot be read. Raised before the
        collection is deleted.
    SearchBackendError
        If the backend fails during publishing.
    """
    cfg = settings or default_settings
    data_dir = Path(data_dir or cfg.data_dir)
    collection = collection or cfg.collection_name

    logger.info("Scanning directory: %s", data_dir)
    files = discover_source_files(data_dir, cfg.source_glob)
    logger.info("Found %d spell books", len(files))

    documents: List[SearchDocument] = []
    records = 0
    rejected = 0
    for path in files:
        raw = load_source_file(path)
        docs, skipped = normalize_records(raw, origin=path.name)
        documents.extend(docs)
        records += len(raw)
        rejected += skipped
        logger.info("Parsed %d spells from %s", len(docs), path.name)

    logger.info("Parsed %d total spells (%d rejected)", len(documents), rejected)

    publisher = IndexPublisher(
        client,
        spell_collection_schema(collection),
        batch_size=cfg.import_batch_size,
    )
    report = await publisher.publish(documents)

    logger.info(
        "Indexing complete: %d documents in %d batches",
        report.documents,
        report.batches,
    )
    return IngestionResult(
        files=len(files),
        records=records,
        rejected=rejected,
        report=report,
    )
