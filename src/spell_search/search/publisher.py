"""
Index Publisher

Republishes the whole spell collection: drop it, recreate it with the fixed
schema, then upsert every document in ordered, sequential batches.

A run is not transactional across batches. If a batch fails the run stops
and the batches already committed stay indexed; because ids are derived
from names and writes are upserts, re-running reproduces the same end state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Sequence

from ..core.errors import CollectionNotFoundError
from ..ingestion.models import SearchDocument
from .client import TypesenseClient

logger = logging.getLogger("spell.publisher")

DEFAULT_BATCH_SIZE = 500


@dataclass
class PublishReport:
    """Summary of a completed publish run."""
    collection: str
    documents: int
    batches: int


def iter_batches(
    documents: Sequence[SearchDocument],
    batch_size: int,
) -> Iterator[Sequence[SearchDocument]]:
    """Yield consecutive, order-preserving slices of at most ``batch_size``."""
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    for start in range(0, len(documents), batch_size):
        yield documents[start : start + batch_size]


class IndexPublisher:
    """
    Owns the lifecycle of one search collection.
    """

    def __init__(
        self,
        client: TypesenseClient,
        schema: Dict[str, Any],
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        self._client = client
        self._schema = schema
        self._batch_size = batch_size

    @property
    def collection(self) -> str:
        return self._schema["name"]

    async def recreate_collection(self) -> None:
        """
        Drop the collection if present and create it again.

        A missing collection is expected on first run; any other deletion
        failure propagates and aborts the run.
        """
        logger.info("Deleting collection '%s'", self.collection)
        try:
            await self._client.delete_collection(self.collection)
        except CollectionNotFoundError:
            logger.info("Collection '%s' did not exist", self.collection)

        logger.info("Creating collection '%s'", self.collection)
        await self._client.create_collection(self._schema)

    async def publish(self, documents: Sequence[SearchDocument]) -> PublishReport:
        """
        Replace the collection contents with ``documents``.

        Parameters
        ----------
        documents : Sequence[SearchDocument]
            Every document for this run, in upload order.

        Returns
        -------
        PublishReport
            Collection name, number of documents and number of batches sent.

        Raises
        ------
        SearchBackendError
            On any deletion (other than not-found), creation or batch failure.
        """
        await self.recreate_collection()

        total = len(documents)
        batches = 0
        uploaded = 0

        for batch in iter_batches(documents, self._batch_size):
            payload: List[Dict[str, Any]] = [doc.model_dump() for doc in batch]
            await self._client.import_documents(
                self.collection, payload, action="upsert"
            )
            batches += 1
            logger.info(
                "Uploaded spells %d to %d of %d",
                uploaded + 1,
                uploaded + len(batch),
                total,
            )
            uploaded += len(batch)

        return PublishReport(
            collection=self.collection,
            documents=uploaded,
            batches=batches,
        )
