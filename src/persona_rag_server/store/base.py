"""
Vector Store Protocol

The vector store engine is an external service. The pipeline only relies on
the small protocol below, implemented by the Chroma and FAISS adapters:

    store.get_or_create(name) -> collection
    collection.upsert(id, embedding, document, metadata)
    collection.query(embedding, k) -> ranked hits, nearest first
    collection.count() -> int, or None when unknown

Adapters raise StoreUnavailable when the engine cannot be reached.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..rag.models import QueryHit


@runtime_checkable
class VectorCollection(Protocol):
    name: str

    async def upsert(
        self,
        id: str,
        embedding: List[float],
        document: str,
        metadata: Dict[str, str],
    ) -> None:
        ...

    async def query(self, embedding: List[float], k: int) -> List[QueryHit]:
        ...

    async def count(self) -> Optional[int]:
        ...


@runtime_checkable
class VectorStore(Protocol):
    async def get_or_create(self, name: str) -> VectorCollection:
        ...

    def describe(self) -> str:
        ...

    async def flush(self) -> None:
        ...
