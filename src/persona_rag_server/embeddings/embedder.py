"""
Embedding Client

Turns chunk and query text into vectors through an OpenAI-compatible
``/embeddings`` endpoint. The Indexer calls it once per chunk and the
Retriever once per question; neither keeps the vectors it gets back.

Transport errors and malformed payloads both surface as EmbeddingFailure.
"""

from __future__ import annotations

from typing import Any, List, Sequence, Optional
import logging
import httpx

from ..config import settings
from ..core.errors import EmbeddingFailure

logger = logging.getLogger("persona.embedder")


class Embedder:
    """Stateless embed capability shared by indexing and retrieval."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        # Unset arguments fall back to the OPENAI_* / EMBEDDING_MODEL settings.
        self.api_key = api_key or settings.openai_api_key.get_secret_value()
        self.model = model or settings.embedding_model
        self.base_url = (base_url or settings.openai_base_url).rstrip("/")
        self.timeout = timeout or settings.http_timeout

    async def embed(
        self,
        texts: Sequence[str],
        batch_size: int = 20,
    ) -> List[List[float]]:
        """
        Embed ``texts`` in order, ``batch_size`` inputs per request.

        Raises
        ------
        EmbeddingFailure
            On any HTTP error, or when a response does not hold exactly one
            numeric vector per input.
        """
        if not texts:
            return []

        vectors: List[List[float]] = []
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            for start in range(0, len(texts), batch_size):
                batch = list(texts[start : start + batch_size])
                body = await self._request(client, batch)

                batch_vectors = self._parse_vectors(body)
                if len(batch_vectors) != len(batch):
                    raise EmbeddingFailure(
                        f"Provider returned {len(batch_vectors)} vectors "
                        f"for {len(batch)} inputs."
                    )
                vectors.extend(batch_vectors)

        return vectors

    async def embed_one(self, text: str) -> List[float]:
        (vector,) = await self.embed([text])
        return vector

    async def _request(self, client: httpx.AsyncClient, batch: List[str]) -> Any:
        try:
            response = await client.post(
                f"{self.base_url}/embeddings",
                json={"model": self.model, "input": batch},
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error(
                "Embedding call to %s failed for %d input(s): %s",
                self.model,
                len(batch),
                exc,
            )
            raise EmbeddingFailure(
                f"Embedding generation failed: {type(exc).__name__}"
            ) from exc

        return response.json()

    @staticmethod
    def _parse_vectors(body: Any) -> List[List[float]]:
        # Expected shape: {"data": [{"embedding": [float, ...]}, ...]}
        records = body.get("data") if isinstance(body, dict) else None
        if not isinstance(records, list):
            raise EmbeddingFailure("Embedding response has no 'data' list.")

        vectors: List[List[float]] = []
        for position, record in enumerate(records):
            values = record.get("embedding") if isinstance(record, dict) else None
            if not isinstance(values, list) or not all(
                isinstance(v, (int, float)) for v in values
            ):
                raise EmbeddingFailure(
                    f"Embedding record {position} is not a numeric vector."
                )
            vectors.append([float(v) for v in values])

        return vectors
