from typing import Literal

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    openai_api_key: SecretStr = SecretStr("")
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    embedding_model: str = "text-embedding-3-small"
    http_timeout: float = 60.0

    # Persona / team profile sources
    persona_name: str = "Chandni"
    persona_dir: str = "data/personas"
    team_dir: str = "data/team"

    vector_backend: Literal["chroma", "faiss"] = "chroma"
    chroma_url: str = "http://localhost:8000"
    chroma_collection: str = "persona-knowledge"
    faiss_index_path: str = "data/faiss_index.bin"
    faiss_meta_path: str = "data/faiss_meta.json"

    chunk_size: int = 2500
    chunk_overlap: int = 200
    retrieval_top_k_cap: int = 2
    history_window: int = 6
    temperature: float = 0.5

    environment: str = "development"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore"
    )

settings = Settings()
