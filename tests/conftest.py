import math
from typing import List

import pytest

from persona_rag_server.store import FaissVectorStore


class LetterEmbedder:
    """
    Deterministic stand-in for the embedding API: one dimension per letter
    of interest, so texts sharing letters land close together.
    """

    LETTERS = "abcdefghijklmnopqrstuvwxyz"

    def __init__(self) -> None:
        self.calls: List[str] = []

    async def embed(self, texts, batch_size: int = 20):
        return [await self.embed_one(t) for t in texts]

    async def embed_one(self, text: str) -> List[float]:
        self.calls.append(text)
        lowered = text.lower()
        vector = [float(lowered.count(ch)) for ch in self.LETTERS]
        norm = math.sqrt(sum(v * v for v in vector)) or 1.0
        return [v / norm for v in vector]


@pytest.fixture
def letter_embedder():
    return LetterEmbedder()


@pytest.fixture
def memory_store():
    return FaissVectorStore()
