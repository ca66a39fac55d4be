"""Abstract embedding provider interface."""

from abc import ABC, abstractmethod

from src.errors import ProviderError, ValidationError


class EmbeddingProvider(ABC):
    """Interface for text embedding generation.

    Implementations wrap a specific embedding backend (Voyage AI, a local
    sentence-transformers model). The model id is chosen per call so that
    stored chunks can record which model produced their vector; vectors from
    different models must never be compared.
    """

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Default model id used when a call passes ``model=None``."""
        ...

    @abstractmethod
    def _embed(self, texts: list[str], model: str, input_type: str | None) -> list[list[float]]:
        """Backend call. Must return one vector per text, in input order."""
        ...

    def embed_batch(
        self,
        texts: list[str],
        model: str | None = None,
        input_type: str | None = "document",
    ) -> list[list[float]]:
        """Generate embeddings for a batch of text strings in one call.

        Args:
            texts: List of text strings to embed.
            model: Model id; defaults to ``model_name``.
            input_type: ``"document"`` or ``"query"`` for backends that
                distinguish the two.

        Returns:
            One vector per input, ``vectors[i]`` belonging to ``texts[i]``.

        Raises:
            ValidationError: If texts is empty.
            ProviderError: If the backend fails or returns a different
                number of vectors than inputs. No partial result is returned.
        """
        if not texts:
            raise ValidationError("texts must not be empty")
        model = model or self.model_name
        vectors = self._embed(list(texts), model, input_type)
        if len(vectors) != len(texts):
            raise ProviderError(
                "Embedding provider returned a mismatched vector count",
                details={"model": model, "expected": len(texts), "received": len(vectors)},
            )
        if any(not v for v in vectors):
            raise ProviderError("Embedding provider returned an empty vector", details={"model": model})
        return vectors

    def embed(self, text: str, model: str | None = None) -> list[float]:
        """Embed a single string."""
        return self.embed_batch([text], model=model)[0]

    def embed_query(self, text: str, model: str | None = None) -> list[float]:
        """Embed a search query.

        Some models (e.g., Voyage) encode queries and documents differently.
        Default sends ``input_type="query"``; backends that ignore it behave
        exactly like ``embed``.
        """
        return self.embed_batch([text], model=model, input_type="query")[0]
