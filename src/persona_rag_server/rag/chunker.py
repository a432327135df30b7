"""
Fixed-Window Chunker

Splits raw text into overlapping fixed-length character windows. Each window
starts ``size - overlap`` characters after the previous one, so consecutive
chunks share exactly ``overlap`` characters. The final chunk may be shorter.

No sentence or paragraph awareness is attempted.
"""

from __future__ import annotations

from typing import Iterator

from .models import Chunk, Document
from ..core.errors import ConfigurationError


def validate_window(size: int, overlap: int) -> None:
    """
    Reject window parameters that would keep the offset from advancing.

    Raises
    ------
    ConfigurationError
        Unless ``size > overlap >= 0``.
    """
    if overlap < 0:
        raise ConfigurationError(f"Chunk overlap must be >= 0, got {overlap}.")
    if size <= overlap:
        raise ConfigurationError(
            f"Chunk size ({size}) must be greater than overlap ({overlap})."
        )


def chunk_text(text: str, size: int, overlap: int) -> Iterator[str]:
    """
    Yield overlapping windows of ``text``.

    Parameters are validated immediately, before the first window is
    requested.

    Parameters
    ----------
    text : str
        Text to split. Empty text yields nothing.
    size : int
        Maximum window length in characters.
    overlap : int
        Number of characters shared by consecutive windows.

    Returns
    -------
    Iterator[str]
        Single-pass iterator over the windows, in order.
    """
    validate_window(size, overlap)
    return _windows(text, size, overlap)


def _windows(text: str, size: int, overlap: int) -> Iterator[str]:
    length = len(text)
    start = 0
    while start < length:
        end = min(length, start + size)
        yield text[start:end]
        if end == length:
            return
        start = end - overlap


def chunk_document(document: Document, size: int, overlap: int) -> Iterator[Chunk]:
    """
    Yield Chunk records for a document, numbered from 0.
    """
    pieces = chunk_text(document.text, size, overlap)
    return (
        Chunk(
            text=piece,
            sequence_index=index,
            source=document.source,
            title=document.title,
        )
        for index, piece in enumerate(pieces)
    )
