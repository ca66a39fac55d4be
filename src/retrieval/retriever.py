"""Trip-scoped semantic retrieval over the evidence store."""

import logging

from src.embedding.provider import EmbeddingProvider
from src.errors import ValidationError
from src.models.evidence import EvidenceResult
from src.vectorstore.chroma_store import ChromaStore
from src.vectorstore.search import (
    DEFAULT_LIMIT,
    DEFAULT_NUM_CANDIDATES,
    build_vector_search_request,
)

logger = logging.getLogger(__name__)


class Retriever:
    """Embeds a query and runs a filtered similarity search for one trip.

    The query is embedded with the same model id the ingestion engine
    records on chunks. Whether stored chunks really used that model is not
    checked: pointing a retriever at a collection built with another model
    gives meaningless scores.
    """

    def __init__(
        self,
        store: ChromaStore,
        embedding_provider: EmbeddingProvider,
        model: str | None = None,
    ):
        self._store = store
        self._provider = embedding_provider
        self._model = model or embedding_provider.model_name

    def retrieve(
        self,
        trip_id: str,
        query: str,
        limit: int = DEFAULT_LIMIT,
        num_candidates: int = DEFAULT_NUM_CANDIDATES,
        source_types: list[str] | None = None,
    ) -> list[EvidenceResult]:
        """Return active evidence for ``trip_id`` ranked by similarity to ``query``.

        An empty list means no evidence, not an error.
        """
        if not trip_id or not str(trip_id).strip():
            raise ValidationError("trip_id is required")
        if not query or not query.strip():
            raise ValidationError("query must not be empty")
        if limit < 1:
            raise ValidationError("limit must be >= 1", details={"limit": limit})
        if num_candidates < limit:
            raise ValidationError(
                "num_candidates must be >= limit",
                details={"limit": limit, "num_candidates": num_candidates},
            )

        logger.info("Searching trip %s (limit=%d, num_candidates=%d)", trip_id, limit, num_candidates)
        query_vector = self._provider.embed_query(query, model=self._model)

        request = build_vector_search_request(
            trip_id=trip_id,
            query_vector=query_vector,
            limit=limit,
            num_candidates=num_candidates,
            source_types=source_types,
        )
        results = self._store.vector_search(request)
        logger.info("Trip %s: %d results", trip_id, len(results))
        return results
