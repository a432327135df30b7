"""
Vector store adapters.

Exports the collection protocol, both adapters, and a factory selecting the
adapter configured in settings.
"""

from .base import VectorCollection, VectorStore
from .chroma import ChromaVectorStore
from .faiss_store import FaissVectorStore
from ..config import Settings


def create_vector_store(settings: Settings) -> VectorStore:
    if settings.vector_backend == "faiss":
        return FaissVectorStore(
            index_path=settings.faiss_index_path,
            meta_path=settings.faiss_meta_path,
        )
    return ChromaVectorStore(settings.chroma_url)


__all__ = [
    "VectorCollection",
    "VectorStore",
    "ChromaVectorStore",
    "FaissVectorStore",
    "create_vector_store",
]
