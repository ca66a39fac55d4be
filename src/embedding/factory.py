"""Embedding provider selection from settings."""

from config.settings import Settings
from src.embedding.provider import EmbeddingProvider
from src.errors import ConfigurationError


def get_embedding_provider(settings: Settings) -> EmbeddingProvider:
    """Create the embedding provider named by ``embeddings_provider``."""
    provider = settings.embeddings_provider.lower()

    if provider == "voyage":
        from src.embedding.voyage import VoyageEmbeddingProvider

        return VoyageEmbeddingProvider(
            api_key=settings.voyage_api_key,
            model_name=settings.embeddings_model,
            api_url=settings.voyage_api_url,
            timeout=settings.embeddings_timeout,
        )
    elif provider in ("sentence-transformers", "sentence_transformers", "local"):
        from src.embedding.sentence_transformer import SentenceTransformerEmbeddingProvider

        return SentenceTransformerEmbeddingProvider(settings.embeddings_model)
    else:
        raise ConfigurationError(
            f"Unsupported embeddings provider: {provider}. "
            "Supported: 'voyage', 'sentence-transformers'"
        )
