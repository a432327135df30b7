"""
ChromaDB HTTP vector store adapter.

Talks to a Chroma server (``settings.chroma_url``) through the synchronous
``chromadb.HttpClient``. Every blocking call runs in a worker thread so the
event loop only suspends while Chroma answers.
"""

from __future__ import annotations

import asyncio
import logging
from threading import RLock
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import chromadb

from .base import VectorCollection
from ..core.errors import StoreUnavailable
from ..rag.models import QueryHit

logger = logging.getLogger("persona.store.chroma")


def _parse_query_result(results: Dict[str, Any]) -> List[QueryHit]:
    """Flatten Chroma's per-query nested lists into QueryHit records."""
    if not results or not results.get("ids") or not results["ids"][0]:
        return []

    ids = results["ids"][0]
    documents = (results.get("documents") or [[]])[0] or []
    metadatas = (results.get("metadatas") or [[]])[0] or []
    distances = (results.get("distances") or [[]])[0] or []

    hits: List[QueryHit] = []
    for i, record_id in enumerate(ids):
        meta = metadatas[i] if i < len(metadatas) and metadatas[i] else {}
        hits.append(
            QueryHit(
                id=record_id,
                document=documents[i] if i < len(documents) and documents[i] else "",
                metadata={
                    key: (str(value) if value is not None else None)
                    for key, value in meta.items()
                },
                distance=float(distances[i]) if i < len(distances) else None,
            )
        )
    return hits


class ChromaCollection:
    """VectorCollection backed by a Chroma collection handle."""

    def __init__(self, collection: Any) -> None:
        self._collection = collection
        self.name: str = collection.name

    async def upsert(
        self,
        id: str,
        embedding: List[float],
        document: str,
        metadata: Dict[str, str],
    ) -> None:
        try:
            await asyncio.to_thread(
                self._collection.upsert,
                ids=[id],
                embeddings=[embedding],
                documents=[document],
                metadatas=[metadata],
            )
        except Exception as exc:
            raise StoreUnavailable(
                f"Chroma upsert failed: {type(exc).__name__}: {exc}"
            ) from exc

    async def query(self, embedding: List[float], k: int) -> List[QueryHit]:
        try:
            results = await asyncio.to_thread(
                self._collection.query,
                query_embeddings=[embedding],
                n_results=k,
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise StoreUnavailable(
                f"Chroma query failed: {type(exc).__name__}: {exc}"
            ) from exc
        return _parse_query_result(results)

    async def count(self) -> Optional[int]:
        try:
            return int(await asyncio.to_thread(self._collection.count))
        except Exception as exc:
            logger.warning("Chroma count failed for '%s': %s", self.name, exc)
            return None


class ChromaVectorStore:
    """
    Lazily connected Chroma client.

    The HTTP client is created on first use, so an unreachable server only
    fails the call that needs it.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self._client: Optional[Any] = None
        self._lock = RLock()

    def describe(self) -> str:
        return self.url

    def _get_client(self) -> Any:
        with self._lock:
            if self._client is None:
                parsed = urlparse(self.url)
                ssl = parsed.scheme == "https"
                self._client = chromadb.HttpClient(
                    host=parsed.hostname or "localhost",
                    port=parsed.port or (443 if ssl else 8000),
                    ssl=ssl,
                )
            return self._client

    def _open(self, name: str) -> Any:
        return self._get_client().get_or_create_collection(name=name)

    async def get_or_create(self, name: str) -> VectorCollection:
        try:
            collection = await asyncio.to_thread(self._open, name)
        except Exception as exc:
            with self._lock:
                self._client = None
            raise StoreUnavailable(
                f"ChromaDB is not reachable at {self.url}: {exc}"
            ) from exc
        return ChromaCollection(collection)

    async def flush(self) -> None:
        # Chroma persists on write.
        return None
