"""Ingestion engine: dedup, change detection and soft-delete-and-replace.

Wires together: record text -> batch embedding -> dedup key -> diff against
the active chunk -> evidence store.
"""

import json
import logging
from datetime import datetime, timezone

from src.embedding.provider import EmbeddingProvider
from src.errors import ProviderError, ValidationError
from src.ingestion.dedup import compute_content_hash, compute_dedup_key
from src.ingestion.formatting import build_record_text, default_title, has_material_change
from src.ingestion.locks import KeyedLock
from src.models.chunk import EvidenceChunk
from src.models.enums import SourceType
from src.models.evidence import IngestResult
from src.vectorstore.chroma_store import ChromaStore

logger = logging.getLogger(__name__)


def _parse_source_type(source_type) -> SourceType:
    try:
        return SourceType(source_type)
    except ValueError:
        valid = ", ".join(s.value for s in SourceType)
        raise ValidationError(
            f"Invalid source type: {source_type!r}. Expected one of: {valid}"
        ) from None


def _normalize_record(record: dict) -> dict:
    """Return the record as it reads back from the store's JSON payload."""
    return json.loads(json.dumps(record, default=str))


class IngestionEngine:
    """Ingests batches of scraped records for a trip.

    Flight records are matched globally by their structured query key;
    lodging and web records are matched within their trip. A flight chunk
    belongs to the trip that last inserted or replaced it: when another trip
    ingests the same unchanged offer the record is skipped and the chunk
    stays with its owner, so it is not retrievable from the second trip.
    """

    def __init__(
        self,
        store: ChromaStore,
        embedding_provider: EmbeddingProvider,
        model: str | None = None,
        locks: KeyedLock | None = None,
    ):
        self._store = store
        self._provider = embedding_provider
        self._model = model or embedding_provider.model_name
        self._locks = locks or KeyedLock()

    @property
    def model(self) -> str:
        return self._model

    def ingest(self, trip_id: str, source_type: SourceType | str, records: list[dict]) -> IngestResult:
        """Ingest a batch of records and report inserted/replaced/skipped counts.

        Steps:
        1. Validate input; an empty batch returns zero counts without
           calling the embedding provider
        2. Build the text of every record
        3. Embed the whole batch in one provider call
        4. Per record: derive the dedup key and diff against the active chunk
        5. Soft-delete replaced chunks (and any stray older actives), then add all new chunks in one write

        Provider and store errors abort the batch. Nothing is retried here;
        re-running the same call is safe because unchanged records skip.
        """
        if not trip_id or not str(trip_id).strip():
            raise ValidationError("trip_id is required")
        source_type = _parse_source_type(source_type)
        if records is None:
            raise ValidationError("records must be a list")
        if not records:
            return IngestResult()

        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise ValidationError(f"Record {i} is not an object", details={"index": i})
        # Compare and store records in the same shape the payload reads back as
        records = [_normalize_record(r) for r in records]

        texts = []
        for i, record in enumerate(records):
            text = build_record_text(record, source_type)
            if not text:
                raise ValidationError(f"Record {i} has no text to embed", details={"index": i})
            texts.append(text)

        logger.info(
            "Ingesting %d %s records for trip %s", len(records), source_type.value, trip_id,
        )
        embeddings = self._provider.embed_batch(texts, model=self._model)
        if len({len(e) for e in embeddings}) > 1:
            raise ProviderError(
                "Embedding provider returned vectors of different lengths",
                details={"model": self._model},
            )

        # Last occurrence of a key within the batch wins
        latest: dict[str, int] = {}
        for i, record in enumerate(records):
            latest[compute_dedup_key(record, source_type)] = i

        result = IngestResult(skipped=len(records) - len(latest))
        scope = None if source_type is SourceType.FLIGHT else trip_id
        now = datetime.now(timezone.utc)

        lock_keys = [self._lock_key(key, scope) for key in latest]
        with self._locks.hold_all(lock_keys):
            to_deactivate: list[str] = []
            to_insert: list[EvidenceChunk] = []

            for key, i in sorted(latest.items(), key=lambda item: item[1]):
                record = records[i]
                active = self._store.find_chunks(key, trip_id=scope, active_only=True)
                if len(active) > 1:
                    logger.warning(
                        "Found %d active chunks for key %s; keeping the newest",
                        len(active), key[:12],
                    )
                    to_deactivate.extend(c.id for c in active[:-1])

                if not active:
                    logger.debug("Insert %s record %d (key %s)", source_type.value, i, key[:12])
                    result.inserted += 1
                elif has_material_change(active[-1].payload, record, source_type):
                    logger.debug("Replace chunk %s (key %s)", active[-1].id, key[:12])
                    to_deactivate.append(active[-1].id)
                    result.replaced += 1
                else:
                    logger.debug("Skip unchanged %s record %d (key %s)", source_type.value, i, key[:12])
                    result.skipped += 1
                    continue

                to_insert.append(self._build_chunk(
                    trip_id, source_type, record, i, texts[i], embeddings[i], key, now,
                ))

            # Deactivate before inserting: a failure in between leaves a key
            # with no active chunk, never two.
            self._store.deactivate(to_deactivate)
            self._store.add_chunks(to_insert)

        logger.info(
            "Ingested trip %s: inserted=%d replaced=%d skipped=%d",
            trip_id, result.inserted, result.replaced, result.skipped,
        )
        return result

    @staticmethod
    def _lock_key(dedup_key: str, scope: str | None) -> str:
        return dedup_key if scope is None else f"{scope}:{dedup_key}"

    def _build_chunk(
        self,
        trip_id: str,
        source_type: SourceType,
        record: dict,
        index: int,
        text: str,
        embedding: list[float],
        dedup_key: str,
        now: datetime,
    ) -> EvidenceChunk:
        source_id = record.get("sourceId") or f"src_{int(now.timestamp() * 1000)}_{index}"
        return EvidenceChunk(
            trip_id=trip_id,
            source_id=str(source_id),
            source_type=source_type,
            text=text,
            embedding=list(embedding),
            embedding_model=self._model,
            dedup_key=dedup_key,
            content_hash=compute_content_hash(record, source_type),
            url=record.get("url") or "",
            title=default_title(record, source_type),
            chunk_index=index,
            tags=list(record.get("tags") or []),
            payload=dict(record),
            created_at=now,
        )
