"""
FAISS Vector Store

In-process vector store for local and offline use, implementing the same
collection protocol as the Chroma adapter.

Key Properties
--------------
- Explicit ID management via IndexIDMap2 (string record ids are mapped to
  sequential int64 FAISS ids)
- Exact L2 search, nearest first
- Append-only: records are never updated or removed
- Persistence of index + metadata per collection on flush()
- Concurrency-safe (thread locking)
"""

from __future__ import annotations

import json
from pathlib import Path
from threading import RLock
from typing import Dict, List, Optional

import faiss
import numpy as np

from .base import VectorCollection
from ..core.errors import StoreUnavailable
from ..rag.models import QueryHit


# ---------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------

def _scoped_path(path: str, name: str) -> Path:
    """Derive a per-collection file path, e.g. ``index.bin -> index-kb.bin``."""
    base = Path(path)
    return base.with_name(f"{base.stem}-{name}{base.suffix}")


# ---------------------------------------------------------------------
# FAISS Collection
# ---------------------------------------------------------------------

class FaissCollection:
    """
    One named FAISS collection.

    Synchronous internally and protected by its own lock; the async methods
    never block on I/O.
    """

    def __init__(
        self,
        name: str,
        index_path: Optional[Path] = None,
        meta_path: Optional[Path] = None,
    ) -> None:
        self.name = name
        self._index_path = index_path
        self._meta_path = meta_path

        self._index: Optional[faiss.IndexIDMap2] = None
        self._records: Dict[int, Dict[str, object]] = {}
        self._ids: Dict[str, int] = {}
        self._next_id: int = 0

        self._lock = RLock()

    # ------------------------------------------------------------------
    # Internal Helpers
    # ------------------------------------------------------------------

    def _init_index(self, dim: int) -> None:
        self._index = faiss.IndexIDMap2(faiss.IndexFlatL2(dim))

    def _add(
        self,
        id: str,
        embedding: List[float],
        document: str,
        metadata: Dict[str, str],
    ) -> None:
        if not embedding:
            raise StoreUnavailable("Cannot add an empty embedding vector.")

        with self._lock:
            if id in self._ids:
                raise StoreUnavailable(f"Duplicate record id '{id}'.")

            if self._index is None:
                self._init_index(len(embedding))

            if len(embedding) != self._index.d:
                raise StoreUnavailable(
                    f"Embedding dimension {len(embedding)} does not match "
                    f"collection dimension {self._index.d}."
                )

            faiss_id = self._next_id
            self._next_id += 1

            vectors = np.asarray([embedding], dtype="float32")
            self._index.add_with_ids(vectors, np.asarray([faiss_id], dtype="int64"))

            self._records[faiss_id] = {
                "id": id,
                "document": document,
                "metadata": dict(metadata),
            }
            self._ids[id] = faiss_id

    def _search(self, embedding: List[float], k: int) -> List[QueryHit]:
        with self._lock:
            if self._index is None or not self._records:
                return []

            if len(embedding) != self._index.d:
                raise StoreUnavailable(
                    f"Query dimension {len(embedding)} does not match "
                    f"collection dimension {self._index.d}."
                )

            q = np.asarray([embedding], dtype="float32")
            distances, idxs = self._index.search(q, k)

            hits: List[QueryHit] = []
            for distance, idx in zip(distances[0], idxs[0]):
                idx = int(idx)
                if idx == -1:
                    continue

                record = self._records.get(idx)
                if record is None:
                    continue

                hits.append(
                    QueryHit(
                        id=record["id"],
                        document=record["document"],
                        metadata=record["metadata"],
                        distance=float(distance),
                    )
                )
            return hits

    # ------------------------------------------------------------------
    # Collection Protocol
    # ------------------------------------------------------------------

    async def upsert(
        self,
        id: str,
        embedding: List[float],
        document: str,
        metadata: Dict[str, str],
    ) -> None:
        self._add(id, embedding, document, metadata)

    async def query(self, embedding: List[float], k: int) -> List[QueryHit]:
        return self._search(embedding, k)

    async def count(self) -> Optional[int]:
        with self._lock:
            return self._index.ntotal if self._index is not None else 0

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self) -> None:
        """
        Persist both FAISS index and metadata to disk.
        """
        with self._lock:
            if self._index is None or self._index_path is None or self._meta_path is None:
                return

            try:
                self._index_path.parent.mkdir(parents=True, exist_ok=True)
                faiss.write_index(self._index, str(self._index_path))

                meta = {
                    "next_id": self._next_id,
                    "records": {str(k): v for k, v in self._records.items()},
                }
                self._meta_path.parent.mkdir(parents=True, exist_ok=True)
                with self._meta_path.open("w", encoding="utf-8") as f:
                    json.dump(meta, f)
            except Exception as exc:
                raise StoreUnavailable(
                    f"Failed to persist FAISS collection '{self.name}': {type(exc).__name__}"
                ) from exc

    def load(self) -> None:
        """
        Load index and metadata from disk if available.
        """
        with self._lock:
            if self._index_path is None or self._meta_path is None:
                return
            if not self._index_path.exists() or not self._meta_path.exists():
                return

            try:
                self._index = faiss.read_index(str(self._index_path))
                with self._meta_path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except Exception as exc:
                raise StoreUnavailable(
                    f"Failed to load FAISS collection '{self.name}': {type(exc).__name__}"
                ) from exc

            self._next_id = int(data.get("next_id", 0))
            self._records = {int(k): v for k, v in data.get("records", {}).items()}
            self._ids = {v["id"]: k for k, v in self._records.items()}


# ---------------------------------------------------------------------
# FAISS Store
# ---------------------------------------------------------------------

class FaissVectorStore:
    """
    Registry of named FAISS collections.

    When ``index_path``/``meta_path`` are given, each collection persists to
    its own pair of files derived from them.
    """

    def __init__(
        self,
        index_path: Optional[str] = None,
        meta_path: Optional[str] = None,
    ) -> None:
        self._index_path = index_path
        self._meta_path = meta_path
        self._collections: Dict[str, FaissCollection] = {}
        self._lock = RLock()

    def describe(self) -> str:
        return f"faiss:{self._index_path or 'memory'}"

    async def get_or_create(self, name: str) -> VectorCollection:
        with self._lock:
            if name in self._collections:
                return self._collections[name]

            collection = FaissCollection(
                name,
                index_path=_scoped_path(self._index_path, name) if self._index_path else None,
                meta_path=_scoped_path(self._meta_path, name) if self._meta_path else None,
            )
            collection.load()
            self._collections[name] = collection
            return collection

    async def flush(self) -> None:
        with self._lock:
            for collection in self._collections.values():
                collection.save()
