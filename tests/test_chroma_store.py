from unittest.mock import MagicMock, patch

import pytest

from persona_rag_server.core.errors import StoreUnavailable
from persona_rag_server.store.chroma import ChromaVectorStore, _parse_query_result


def test_parse_query_result_flattens_first_query():
    raw = {
        "ids": [["a", "b"]],
        "documents": [["doc a", "doc b"]],
        "metadatas": [[{"source": "a.md", "title": "a"}, None]],
        "distances": [[0.1, 0.4]],
    }
    hits = _parse_query_result(raw)

    assert [h.id for h in hits] == ["a", "b"]
    assert hits[0].metadata == {"source": "a.md", "title": "a"}
    assert hits[1].metadata == {}
    assert hits[1].distance == pytest.approx(0.4)


def test_parse_query_result_empty():
    assert _parse_query_result({"ids": [[]]}) == []
    assert _parse_query_result({}) == []


@pytest.mark.asyncio
async def test_unreachable_server_raises_store_unavailable():
    with patch("persona_rag_server.store.chroma.chromadb.HttpClient", side_effect=ConnectionError("refused")):
        store = ChromaVectorStore("http://localhost:8000")
        with pytest.raises(StoreUnavailable):
            await store.get_or_create("persona-knowledge")


@pytest.mark.asyncio
async def test_collection_round_trip_through_client():
    raw_collection = MagicMock()
    raw_collection.name = "persona-knowledge"
    raw_collection.count.return_value = 4
    raw_collection.query.return_value = {
        "ids": [["x"]],
        "documents": [["hello"]],
        "metadatas": [[{"title": "x.md"}]],
        "distances": [[0.2]],
    }
    client = MagicMock()
    client.get_or_create_collection.return_value = raw_collection

    with patch("persona_rag_server.store.chroma.chromadb.HttpClient", return_value=client) as http_client:
        store = ChromaVectorStore("https://chroma.example.com")
        collection = await store.get_or_create("persona-knowledge")

        await collection.upsert("x", [0.1, 0.2], "hello", {"title": "x.md"})
        hits = await collection.query([0.1, 0.2], 2)

    http_client.assert_called_once_with(host="chroma.example.com", port=443, ssl=True)
    client.get_or_create_collection.assert_called_once_with(name="persona-knowledge")
    raw_collection.upsert.assert_called_once_with(
        ids=["x"], embeddings=[[0.1, 0.2]], documents=["hello"], metadatas=[{"title": "x.md"}]
    )
    assert await collection.count() == 4
    assert hits[0].document == "hello"
    assert raw_collection.query.call_args.kwargs["n_results"] == 2
