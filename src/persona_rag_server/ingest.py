"""
Knowledge Base Ingestion

Walks a data directory for ``.txt`` and ``.md`` files and indexes each one.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

from .rag.indexer import Indexer
from .rag.models import Document

logger = logging.getLogger("persona.ingest")

TEXT_EXTENSIONS = {".txt", ".md"}


def find_text_files(data_dir: str) -> list[Path]:
    """
    Recursively list text files under ``data_dir``. Missing directory -> [].
    """
    root = Path(data_dir)
    if not root.is_dir():
        return []
    return sorted(
        path
        for path in root.rglob("*")
        if path.is_file() and path.suffix in TEXT_EXTENSIONS
    )


def read_document(path: Path) -> Document:
    return Document(
        text=path.read_text(encoding="utf-8", errors="replace"),
        title=path.name,
        source=str(path),
    )


def read_documents(data_dir: str) -> Iterator[Document]:
    for path in find_text_files(data_dir):
        yield read_document(path)


async def ingest_directory(data_dir: str, indexer: Indexer) -> int:
    """
    Index every document under ``data_dir``.

    Returns
    -------
    int
        Total number of chunks indexed.
    """
    logger.info("Reading from: %s", data_dir)
    files = find_text_files(data_dir)
    logger.info("Found %d source files", len(files))

    total = 0
    for path in files:
        total += await indexer.index(read_document(path))

    logger.info("Done. Total chunks: %d", total)
    return total
