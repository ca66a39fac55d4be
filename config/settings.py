"""Application configuration management."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Trip evidence settings loaded from environment variables."""

    # Embedding
    voyage_api_key: str = ""
    voyage_api_url: str = "https://api.voyageai.com/v1/embeddings"
    embeddings_provider: str = "voyage"
    embeddings_model: str = "voyage-3.5-lite"
    embeddings_timeout: float = 30.0

    # Storage
    evidence_chroma_path: str = "./data/chroma"
    evidence_collection: str = "chunks"

    # Retrieval
    evidence_search_limit: int = 8
    evidence_num_candidates: int = 200

    @property
    def chroma_path(self) -> Path:
        return Path(self.evidence_chroma_path)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
