"""Service root owning the evidence store and embedding provider.

``build_service`` constructs one store client and one provider and injects
them into both engines. Callers (CLI, MCP server) hold the service; nothing
in the core keeps a module-level connection.
"""

import logging

from config.settings import Settings, get_settings
from src.embedding.factory import get_embedding_provider
from src.embedding.provider import EmbeddingProvider
from src.errors import ValidationError
from src.ingestion.pipeline import IngestionEngine
from src.models.enums import Intent, SourceType
from src.models.evidence import EvidenceResult, IngestResult
from src.retrieval.retriever import Retriever
from src.vectorstore.chroma_store import ChromaStore

logger = logging.getLogger(__name__)


class EvidenceService:
    """Ingestion and retrieval of trip evidence behind one object."""

    def __init__(
        self,
        store: ChromaStore,
        embedding_provider: EmbeddingProvider,
        model: str | None = None,
        default_limit: int = 8,
        default_num_candidates: int = 200,
    ):
        self.store = store
        self.embedding_provider = embedding_provider
        self.ingestion = IngestionEngine(store, embedding_provider, model=model)
        self.retriever = Retriever(store, embedding_provider, model=self.ingestion.model)
        self.default_limit = default_limit
        self.default_num_candidates = default_num_candidates

    def ingest(self, trip_id: str, source_type: SourceType | str, records: list[dict]) -> IngestResult:
        return self.ingestion.ingest(trip_id, source_type, records)

    def retrieve(
        self,
        trip_id: str,
        query: str,
        limit: int | None = None,
        num_candidates: int | None = None,
        source_types: list[str] | None = None,
    ) -> list[EvidenceResult]:
        return self.retriever.retrieve(
            trip_id,
            query,
            limit=self.default_limit if limit is None else limit,
            num_candidates=self.default_num_candidates if num_candidates is None else num_candidates,
            source_types=source_types,
        )

    def handle_action(
        self,
        intent: Intent | str,
        trip_id: str,
        source_type: SourceType | str,
        data: list[dict] | None = None,
        query: str | None = None,
        limit: int | None = None,
        num_candidates: int | None = None,
    ) -> dict:
        """Dispatch a planner intent to ingestion and/or retrieval.

        - RETRIEVE_ONLY: search; ``query`` required
        - SCRAPE_AND_UPDATE: ingest; ``data`` list required
        - FULL_REPLAN: ingest ``data`` if given, then search if ``query`` given
        - PLAN_EDIT_ONLY: evidence untouched
        """
        try:
            intent = Intent(intent)
        except ValueError:
            raise ValidationError(f"Invalid intent: {intent!r}") from None
        try:
            source_type = SourceType(source_type)
        except ValueError:
            raise ValidationError(f"Invalid source type: {source_type!r}") from None

        logger.info("Handling %s for trip %s (%s)", intent.value, trip_id, source_type.value)
        search_types = [source_type.value]

        if intent is Intent.RETRIEVE_ONLY:
            if not query:
                raise ValidationError("Query required for retrieval")
            results = self.retrieve(
                trip_id, query, limit=limit, num_candidates=num_candidates, source_types=search_types,
            )
            return {"status": "ok", "results": results}

        if intent is Intent.SCRAPE_AND_UPDATE:
            if not isinstance(data, list):
                raise ValidationError("Data array required")
            ingested = self.ingest(trip_id, source_type, data)
            return {"status": "ok", "ingested": ingested.as_dict()}

        if intent is Intent.FULL_REPLAN:
            response: dict = {"status": "ok", "results": []}
            if isinstance(data, list):
                response["ingested"] = self.ingest(trip_id, source_type, data).as_dict()
            if query:
                response["results"] = self.retrieve(
                    trip_id, query, limit=limit, num_candidates=num_candidates, source_types=search_types,
                )
            return response

        return {"status": "ok", "message": "Plan edit only - evidence untouched"}


def build_service(settings: Settings | None = None) -> EvidenceService:
    """Construct the store client and embedding provider from settings.

    Raises ConfigurationError before any I/O if credentials are missing.
    """
    settings = settings or get_settings()
    provider = get_embedding_provider(settings)
    store = ChromaStore(
        path=settings.evidence_chroma_path,
        collection_name=settings.evidence_collection,
    )
    return EvidenceService(
        store,
        provider,
        model=settings.embeddings_model,
        default_limit=settings.evidence_search_limit,
        default_num_candidates=settings.evidence_num_candidates,
    )
