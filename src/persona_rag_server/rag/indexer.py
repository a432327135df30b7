"""
Knowledge Base Indexer

Turns documents into vector records: chunk, embed each chunk, assign a fresh
unique id, and upsert into the collection.

Indexing is append-only. Re-indexing the same document adds its chunks
again under new ids; nothing is deduplicated or replaced.
"""

from __future__ import annotations

import logging
import random
import string
import time
from typing import Callable, Optional

from .chunker import chunk_document, validate_window
from .models import Chunk, Document, VectorRecord
from ..embeddings.embedder import Embedder
from ..store.base import VectorStore

logger = logging.getLogger("persona.indexer")

_NONCE_ALPHABET = string.digits + string.ascii_lowercase


class ChunkIdFactory:
    """
    Builds record ids of the form ``{title}-{index}-{millis}-{nonce}``.

    The clock (seconds, like ``time.time``) and random source are injectable
    so ids are reproducible in tests. Ids never depend on chunk content.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        rng: Optional[random.Random] = None,
        nonce_length: int = 6,
    ) -> None:
        self._clock = clock
        self._rng = rng or random.SystemRandom()
        self._nonce_length = nonce_length

    def __call__(self, chunk: Chunk) -> str:
        millis = int(self._clock() * 1000)
        nonce = "".join(
            self._rng.choice(_NONCE_ALPHABET) for _ in range(self._nonce_length)
        )
        return f"{chunk.title}-{chunk.sequence_index}-{millis}-{nonce}"


class Indexer:
    """
    Indexes documents into one named collection.
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        collection_name: str,
        chunk_size: int = 2500,
        chunk_overlap: int = 200,
        id_factory: Optional[ChunkIdFactory] = None,
    ) -> None:
        validate_window(chunk_size, chunk_overlap)
        self._embedder = embedder
        self._store = store
        self._collection_name = collection_name
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._id_factory = id_factory or ChunkIdFactory()
        self.total_indexed = 0

    async def index(self, document: Document) -> int:
        """
        Index one document.

        Returns
        -------
        int
            Number of chunks written.

        Raises
        ------
        EmbeddingFailure
            If embedding any chunk fails. Chunks written before the failure
            stay in the collection.
        StoreUnavailable
            If the collection cannot be opened or written.
        """
        collection = await self._store.get_or_create(self._collection_name)

        count = 0
        for chunk in chunk_document(document, self._chunk_size, self._chunk_overlap):
            vector = await self._embedder.embed_one(chunk.text)
            record = VectorRecord(
                id=self._id_factory(chunk),
                embedding=vector,
                document=chunk.text,
                metadata=chunk.metadata,
            )
            await collection.upsert(
                record.id,
                record.embedding,
                record.document,
                record.metadata,
            )

            count += 1
            self.total_indexed += 1
            if self.total_indexed % 10 == 0:
                logger.info("Indexed %d chunks...", self.total_indexed)

        return count
