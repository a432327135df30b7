from functools import lru_cache

from ..config import settings
from ..assistant import PersonaAssistant
from ..embeddings.embedder import Embedder
from ..llm.client import LLMClient
from ..profiles.loader import ProfileRegistry
from ..rag.retriever import Retriever
from ..sessions.store import ConversationHistoryStore, history_store
from ..store import VectorStore, create_vector_store


@lru_cache
def get_llm_client() -> LLMClient:
    return LLMClient()


@lru_cache
def get_embedder() -> Embedder:
    return Embedder()


@lru_cache
def get_vector_store() -> VectorStore:
    return create_vector_store(settings)


@lru_cache
def get_profile_registry() -> ProfileRegistry:
    return ProfileRegistry(
        persona_dir=settings.persona_dir,
        team_dir=settings.team_dir,
        persona_name=settings.persona_name,
    )


def get_history_store() -> ConversationHistoryStore:
    return history_store


def get_assistant() -> PersonaAssistant:
    retriever = Retriever(
        embedder=get_embedder(),
        store=get_vector_store(),
        collection_name=settings.chroma_collection,
        top_k_cap=settings.retrieval_top_k_cap,
    )
    return PersonaAssistant(
        retriever=retriever,
        llm=get_llm_client(),
        profiles=get_profile_registry(),
        history=get_history_store(),
        temperature=settings.temperature,
        history_window=settings.history_window,
    )
