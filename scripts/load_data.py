import asyncio
import logging
import os
import sys

# Ensure src is in pythonpath
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "src"))

from dotenv import load_dotenv
load_dotenv()

from persona_rag_server.config import settings
from persona_rag_server.embeddings.embedder import Embedder
from persona_rag_server.ingest import ingest_directory
from persona_rag_server.rag.indexer import Indexer
from persona_rag_server.store import create_vector_store

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "data")


async def main(data_dir: str) -> int:
    store = create_vector_store(settings)
    indexer = Indexer(
        embedder=Embedder(),
        store=store,
        collection_name=settings.chroma_collection,
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
    )
    total = await ingest_directory(data_dir, indexer)
    await store.flush()
    return total


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="[ingest] %(message)s")

    if not settings.openai_api_key.get_secret_value():
        print("[ERROR] OPENAI_API_KEY is required", file=sys.stderr)
        sys.exit(1)

    data_dir = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DATA_DIR
    try:
        asyncio.run(main(data_dir))
    except Exception as exc:
        print(f"[ingest] Failed: {exc}", file=sys.stderr)
        sys.exit(1)
