"""
Typesense HTTP Client

A thin asynchronous client for the subset of the Typesense REST API this
project needs: collection lifecycle, JSONL document import and document
search.

Design Goals
------------
- Explicitly constructed and passed around (no module-level singleton)
- Lifetime scoped to one ingestion run or one HTTP request
- Backend failures surfaced as typed ``SearchBackendError`` subclasses
- Transport injectable so tests can substitute a fake backend
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..config import Settings, settings as default_settings
from ..core.errors import (
    BatchImportError,
    CollectionNotFoundError,
    SearchBackendError,
)

logger = logging.getLogger("spell.typesense")

API_KEY_HEADER = "X-TYPESENSE-API-KEY"


class TypesenseClient:
    """
    Asynchronous Typesense client.

    Use as an async context manager, or call :meth:`aclose` when done.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        connection_timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Parameters
        ----------
        base_url : str
            ``protocol://host:port`` of the Typesense node.

        api_key : str
            Admin or search-only key; sent in the ``X-TYPESENSE-API-KEY`` header.

        connection_timeout : float
            Connect timeout in seconds. Reads and writes are not bounded, so
            large batch imports are not cut off mid-flight.

        transport : Optional[httpx.AsyncBaseTransport]
            Optional transport override (``httpx.MockTransport`` in tests).
        """
        self.base_url = base_url.rstrip("/")
        self.api_key_provided = bool(api_key)
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            headers={API_KEY_HEADER: api_key},
            timeout=httpx.Timeout(None, connect=connection_timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "TypesenseClient":
        cfg = settings or default_settings
        return cls(
            base_url=cfg.typesense_url,
            api_key=cfg.api_key_value,
            connection_timeout=cfg.typesense_connection_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "TypesenseClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Issue a request and translate failures into ``SearchBackendError``.
        """
        try:
            resp = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(
                "Typesense request failed (%s): %s %s: %s",
                type(exc).__name__,
                method,
                path,
                str(exc),
            )
            raise SearchBackendError(
                f"Could not reach search backend: {type(exc).__name__}"
            ) from exc

        if resp.is_success:
            return resp

        message = self._error_message(resp)
        if resp.status_code == 404:
            raise CollectionNotFoundError(message, status=404)
        raise SearchBackendError(message, status=resp.status_code)

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or resp.reason_phrase
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return resp.text

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        """
        Decode a successful response body.

        Raises
        ------
        SearchBackendError
            If the body is not valid JSON (e.g. an HTML page from a proxy).
        """
        try:
            return resp.json()
        except ValueError as exc:
            logger.error(
                "Invalid JSON from search backend (status=%d): %.200s",
                resp.status_code,
                resp.text,
            )
            raise SearchBackendError(
                "Invalid JSON from search backend", status=resp.status_code
            ) from exc

    # ------------------------------------------------------------------
    # Collections
    # ------------------------------------------------------------------

    async def delete_collection(self, name: str) -> None:
        """
        Delete a collection.

        Raises
        ------
        CollectionNotFoundError
            If the collection does not exist.
        SearchBackendError
            For any other failure.
        """
        await self._request("DELETE", f"/collections/{name}")

    async def create_collection(self, schema: Dict[str, Any]) -> Dict[str, Any]:
        resp = await self._request("POST", "/collections", json=schema)
        return self._json(resp)

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def import_documents(
        self,
        name: str,
        documents: Sequence[Dict[str, Any]],
        action: str = "upsert",
    ) -> List[Dict[str, Any]]:
        """
        Import a batch of documents through the JSONL import endpoint.

        Typesense answers ``200`` even when individual documents fail, with
        one JSON result line per input line; any failed line fails the batch.

        Raises
        ------
        BatchImportError
            If any document in the batch was rejected.
        """
        body = "\n".join(json.dumps(doc) for doc in documents)
        resp = await self._request(
            "POST",
            f"/collections/{name}/documents/import",
            params={"action": action},
            content=body.encode("utf-8"),
            headers={"Content-Type": "text/plain"},
        )

        results = []
        for line in resp.text.splitlines():
            if not line.strip():
                continue
            try:
                results.append(json.loads(line))
            except ValueError as exc:
                raise BatchImportError(
                    "Invalid JSON in import response", status=resp.status_code
                ) from exc

        failures = [
            r for r in results
            if not isinstance(r, dict) or not r.get("success", False)
        ]
        if failures:
            first = failures[0]
            error = first.get("error", "unknown error") if isinstance(first, dict) else repr(first)
            raise BatchImportError(
                f"{len(failures)} of {len(documents)} documents rejected: {error}",
                status=resp.status_code,
            )
        return results

    async def search(self, name: str, params: Dict[str, Any]) -> Dict[str, Any]:
        resp = await self._request(
            "GET",
            f"/collections/{name}/documents/search",
            params=params,
        )
        return self._json(resp)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    async def health(self) -> bool:
        try:
            body = self._json(await self._request("GET", "/health"))
        except SearchBackendError:
            return False
        return isinstance(body, dict) and bool(body.get("ok", False))
