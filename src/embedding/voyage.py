"""Voyage AI embedding provider over the HTTP embeddings API."""

import logging

import requests

from src.embedding.provider import EmbeddingProvider
from src.errors import ConfigurationError, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.voyageai.com/v1/embeddings"
DEFAULT_MODEL = "voyage-3.5-lite"


class VoyageEmbeddingProvider(EmbeddingProvider):
    """Embedding provider calling ``POST /v1/embeddings``.

    Request body is ``{"input": [...], "model": ..., "input_type": ...}``;
    the response carries ``{"data": [{"embedding": [...], "index": i}]}``.
    Entries are placed back by ``index`` so output order always matches
    input order.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ):
        if not api_key:
            raise ConfigurationError("VOYAGE_API_KEY is required for the voyage embedding provider")
        if not api_url:
            raise ConfigurationError("VOYAGE_API_URL must not be empty")
        self._api_key = api_key
        self._model_name = model_name
        self._api_url = api_url
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def model_name(self) -> str:
        return self._model_name

    def _embed(self, texts: list[str], model: str, input_type: str | None) -> list[list[float]]:
        payload = {"input": texts, "model": model}
        if input_type:
            payload["input_type"] = input_type

        logger.info("Generating embeddings: model=%s count=%d", model, len(texts))
        try:
            resp = self._session.post(
                self._api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except requests.Timeout as e:
            raise ProviderError(
                "Embedding request timed out",
                details={"model": model, "timeout": self._timeout},
            ) from e
        except requests.RequestException as e:
            raise ProviderError(f"Embedding request failed: {e}", details={"model": model}) from e
        except ValueError as e:
            raise ProviderError("Embedding response is not valid JSON", details={"model": model}) from e

        data = body.get("data") if isinstance(body, dict) else None
        if not data:
            raise ProviderError("Voyage AI did not return embeddings", details={"model": model})

        return _order_by_index(data, model)


def _order_by_index(data: list[dict], model: str) -> list[list[float]]:
    """Place each returned embedding at its ``index`` slot.

    Entries without an ``index`` are taken positionally.
    """
    vectors: list[list[float] | None] = [None] * len(data)
    for position, item in enumerate(data):
        embedding = item.get("embedding") if isinstance(item, dict) else None
        if not embedding:
            raise ProviderError("Voyage AI returned an entry without an embedding", details={"model": model})
        index = item.get("index", position)
        if not isinstance(index, int) or not 0 <= index < len(data) or vectors[index] is not None:
            raise ProviderError(
                "Voyage AI returned an invalid embedding index",
                details={"model": model, "index": index},
            )
        vectors[index] = embedding
    return vectors
