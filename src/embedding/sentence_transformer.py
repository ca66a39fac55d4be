"""Sentence Transformer embedding provider implementation."""

import logging
import os

from sentence_transformers import SentenceTransformer

from src.embedding.provider import EmbeddingProvider
from src.errors import ProviderError

logger = logging.getLogger(__name__)


class SentenceTransformerEmbeddingProvider(EmbeddingProvider):
    """Embedding provider wrapping local sentence-transformers models.

    Default model: all-MiniLM-L6-v2 (384 dimensions, ~80MB). Models are
    loaded on first use and cached per name.
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2"):
        self._model_name = model_name
        self._models: dict[str, SentenceTransformer] = {}

    @property
    def model_name(self) -> str:
        return self._model_name

    def _load(self, model_name: str) -> SentenceTransformer:
        if model_name in self._models:
            return self._models[model_name]

        old_verbosity = os.environ.get("TRANSFORMERS_VERBOSITY")
        os.environ["TRANSFORMERS_VERBOSITY"] = "error"
        try:
            try:
                model = SentenceTransformer(model_name, local_files_only=True)
            except OSError:
                model = SentenceTransformer(model_name)
        except OSError as e:
            raise ProviderError(f"Could not load embedding model: {e}", details={"model": model_name}) from e
        finally:
            if old_verbosity is None:
                os.environ.pop("TRANSFORMERS_VERBOSITY", None)
            else:
                os.environ["TRANSFORMERS_VERBOSITY"] = old_verbosity

        logger.info("Loaded sentence-transformers model %s", model_name)
        self._models[model_name] = model
        return model

    def _embed(self, texts: list[str], model: str, input_type: str | None) -> list[list[float]]:
        encoder = self._load(model)
        try:
            embeddings = encoder.encode(texts, show_progress_bar=False)
        except Exception as e:
            raise ProviderError(f"Embedding failed: {e}", details={"model": model}) from e
        return embeddings.tolist()
