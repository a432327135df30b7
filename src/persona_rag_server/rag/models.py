"""
Knowledge Base Data Models

This module defines the records flowing through the ingestion and retrieval
pipeline:

- Document:     one source file, read once and never mutated
- Chunk:        one overlapping window of a Document
- VectorRecord: one chunk plus its embedding, as stored in a collection
- QueryHit:     one nearest-neighbor match returned by a collection query
"""

from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict


class Document(BaseModel):
    """
    A source document to be chunked and indexed.
    """

    text: str = Field(
        ...,
        description="Raw document text.",
    )

    title: str = Field(
        ...,
        min_length=1,
        description="Display name of the document, usually the file name.",
    )

    source: str = Field(
        ...,
        min_length=1,
        description="Origin identifier, usually the file path.",
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class Chunk(BaseModel):
    """
    A bounded-length substring of a Document.
    """

    text: str
    sequence_index: int = Field(..., ge=0)
    source: str
    title: str

    model_config = ConfigDict(extra="forbid", frozen=True)

    @property
    def metadata(self) -> Dict[str, str]:
        return {"source": self.source, "title": self.title}


class VectorRecord(BaseModel):
    """
    A single chunk stored in a collection together with its embedding.

    Records are append-only: there is no update or delete path.
    """

    id: str = Field(..., min_length=1)
    embedding: List[float] = Field(..., min_length=1)
    document: str
    metadata: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)


class QueryHit(BaseModel):
    """
    A nearest-neighbor match. Lower distance means closer.
    """

    id: str
    document: str = ""
    metadata: Dict[str, Optional[str]] = Field(default_factory=dict)
    distance: Optional[float] = None

    model_config = ConfigDict(extra="forbid", frozen=True)
