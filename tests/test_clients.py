import json
from unittest.mock import patch

import httpx
import pytest

from persona_rag_server.core.errors import EmbeddingFailure, GenerationFailure
from persona_rag_server.embeddings.embedder import Embedder
from persona_rag_server.llm.client import EMPTY_ANSWER, LLMClient

_RealAsyncClient = httpx.AsyncClient


def _mock_transport(handler):
    def factory(*args, **kwargs):
        return _RealAsyncClient(*args, transport=httpx.MockTransport(handler), **kwargs)
    return factory


class TestEmbedder:
    @pytest.mark.asyncio
    async def test_embed_batches_and_preserves_order(self):
        seen = []

        def handler(request):
            body = json.loads(request.content)
            seen.append(body["input"])
            assert request.url.path == "/v1/embeddings"
            assert request.headers["Authorization"] == "Bearer sk-test"
            return httpx.Response(
                200,
                json={"data": [{"embedding": [float(len(t))]} for t in body["input"]]},
            )

        embedder = Embedder(api_key="sk-test", model="m", base_url="https://api.test/v1")
        with patch("persona_rag_server.embeddings.embedder.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            vectors = await embedder.embed(["a", "bb", "ccc"], batch_size=2)

        assert seen == [["a", "bb"], ["ccc"]]
        assert vectors == [[1.0], [2.0], [3.0]]

    @pytest.mark.asyncio
    async def test_embed_one(self):
        def handler(request):
            return httpx.Response(200, json={"data": [{"embedding": [0.5, 1]}]})

        embedder = Embedder(api_key="sk-test", base_url="https://api.test/v1")
        with patch("persona_rag_server.embeddings.embedder.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            assert await embedder.embed_one("hi") == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_http_error_becomes_embedding_failure(self):
        def handler(request):
            return httpx.Response(401, json={"error": "bad key"})

        embedder = Embedder(api_key="sk-bad", base_url="https://api.test/v1")
        with patch("persona_rag_server.embeddings.embedder.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            with pytest.raises(EmbeddingFailure):
                await embedder.embed_one("hi")

    @pytest.mark.asyncio
    async def test_malformed_payload_rejected(self):
        def handler(request):
            return httpx.Response(200, json={"data": [{"embedding": ["x"]}]})

        embedder = Embedder(api_key="sk-test", base_url="https://api.test/v1")
        with patch("persona_rag_server.embeddings.embedder.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            with pytest.raises(EmbeddingFailure):
                await embedder.embed_one("hi")

    @pytest.mark.asyncio
    async def test_vector_count_mismatch_rejected(self):
        def handler(request):
            return httpx.Response(200, json={"data": [{"embedding": [1.0]}]})

        embedder = Embedder(api_key="sk-test", base_url="https://api.test/v1")
        with patch("persona_rag_server.embeddings.embedder.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            with pytest.raises(EmbeddingFailure):
                await embedder.embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_empty_input_makes_no_request(self):
        assert await Embedder(api_key="sk-test").embed([]) == []


class TestLLMClient:
    @pytest.mark.asyncio
    async def test_generate_sends_messages_and_trims(self):
        captured = {}

        def handler(request):
            captured.update(json.loads(request.content))
            return httpx.Response(
                200,
                json={"choices": [{"message": {"role": "assistant", "content": "  coffee first ☕ \n"}}]},
            )

        client = LLMClient(api_key="sk-test", model="gpt-4o-mini", base_url="https://api.test/v1")
        messages = [{"role": "system", "content": "persona"}, {"role": "user", "content": "on-call?"}]
        with patch("persona_rag_server.llm.client.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            answer = await client.generate(messages, temperature=0.5)

        assert answer == "coffee first ☕"
        assert captured == {"model": "gpt-4o-mini", "messages": messages, "temperature": 0.5}

    @pytest.mark.asyncio
    async def test_empty_content_gets_placeholder(self):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": None}}]})

        client = LLMClient(api_key="sk-test", base_url="https://api.test/v1")
        with patch("persona_rag_server.llm.client.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            assert await client.generate([]) == EMPTY_ANSWER

    @pytest.mark.asyncio
    async def test_upstream_status_is_carried(self):
        def handler(request):
            return httpx.Response(429, json={"error": "slow down"})

        client = LLMClient(api_key="sk-test", base_url="https://api.test/v1")
        with patch("persona_rag_server.llm.client.httpx.AsyncClient", side_effect=_mock_transport(handler)):
            with pytest.raises(GenerationFailure) as excinfo:
                await client.generate([{"role": "user", "content": "hi"}])

        assert excinfo.value.status_code == 429
