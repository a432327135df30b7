"""
Knowledge Base Retriever

Embeds a query and fetches the nearest chunks from the collection, formatted
as a single context string for the prompt.

Retrieval is fail-soft: an unreachable store or a failed query degrades to an
empty context and a RetrievalWarning in the result. Embedding failures are
not recovered and propagate to the caller.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from .models import QueryHit
from ..core.errors import ConfigurationError, StoreUnavailable
from ..embeddings.embedder import Embedder
from ..store.base import VectorCollection, VectorStore

logger = logging.getLogger("persona.retriever")

HIT_SEPARATOR = "\n\n---\n\n"
DEFAULT_TOP_K_CAP = 2


@dataclass(frozen=True)
class RetrievalWarning:
    """A recovered retrieval failure."""
    stage: str
    message: str


@dataclass
class RetrievalResult:
    context: str = ""
    hits: List[QueryHit] = field(default_factory=list)
    warnings: List[RetrievalWarning] = field(default_factory=list)

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


# ---------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------

def resolve_top_k(count: Optional[float], cap: int = DEFAULT_TOP_K_CAP) -> int:
    """
    Number of neighbors to request.

    ``max(1, min(cap, count))`` when the collection reports a finite count,
    otherwise ``cap``.
    """
    if cap < 1:
        raise ConfigurationError(f"Top-k cap must be >= 1, got {cap}.")
    if count is None or not math.isfinite(count):
        return cap
    return max(1, min(cap, int(count)))


def format_hit(hit: QueryHit) -> str:
    labels = [
        value
        for value in (hit.metadata.get("source"), hit.metadata.get("title"))
        if value
    ]
    label = " · ".join(labels) or "unknown"
    return f"Source: {label}\n{hit.document}"


def format_context(hits: List[QueryHit]) -> str:
    return HIT_SEPARATOR.join(format_hit(hit) for hit in hits)


# ---------------------------------------------------------------------
# Retriever
# ---------------------------------------------------------------------

class Retriever:
    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        collection_name: str,
        top_k_cap: int = DEFAULT_TOP_K_CAP,
    ) -> None:
        if top_k_cap < 1:
            raise ConfigurationError(f"Top-k cap must be >= 1, got {top_k_cap}.")
        self._embedder = embedder
        self._store = store
        self._collection_name = collection_name
        self._top_k_cap = top_k_cap

    async def _open_collection(
        self,
        warnings: List[RetrievalWarning],
    ) -> Optional[VectorCollection]:
        try:
            return await self._store.get_or_create(self._collection_name)
        except StoreUnavailable as exc:
            warnings.append(RetrievalWarning("collection", str(exc)))
            return None

    async def retrieve(self, query: str) -> RetrievalResult:
        """
        Retrieve formatted context for ``query``.

        Raises
        ------
        EmbeddingFailure
            If the query cannot be embedded.
        """
        result = RetrievalResult()

        collection = await self._open_collection(result.warnings)

        # Always embedded, even when the store is down.
        query_embedding = await self._embedder.embed_one(query)

        if collection is None:
            return result

        try:
            k = resolve_top_k(await collection.count(), self._top_k_cap)
            hits = await collection.query(query_embedding, k)
        except StoreUnavailable as exc:
            result.warnings.append(RetrievalWarning("query", str(exc)))
            return result

        result.hits = hits
        result.context = format_context(hits)
        return result
