"""ChromaDB-backed evidence store for trip chunks."""

import json
import logging
from contextlib import contextmanager
from datetime import datetime

import chromadb
from chromadb.config import Settings as ChromaSettings

from src.errors import StoreError
from src.models.chunk import EvidenceChunk
from src.models.evidence import EvidenceResult
from src.vectorstore.search import VectorSearchRequest

logger = logging.getLogger(__name__)

COLLECTION_NAME = "chunks"


@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except StoreError:
        raise
    except Exception as e:
        raise StoreError(f"Chroma {operation} failed: {e}", details={"operation": operation}) from e


def _where(*clauses: dict) -> dict:
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": list(clauses)}


def _to_metadata(chunk: EvidenceChunk) -> dict:
    return {
        "trip_id": chunk.trip_id,
        "source_id": chunk.source_id,
        "source_type": chunk.source_type.value,
        "url": chunk.url or "",
        "title": chunk.title or "",
        "chunk_index": chunk.chunk_index,
        "tags": json.dumps(list(chunk.tags)),
        "embedding_model": chunk.embedding_model,
        "dedup_key": chunk.dedup_key,
        "content_hash": chunk.content_hash,
        "payload": json.dumps(chunk.payload, default=str),
        "is_active": chunk.is_active,
        "created_at": chunk.created_at.isoformat(),
    }


def _from_row(chunk_id: str, text: str, metadata: dict, embedding=None) -> EvidenceChunk:
    return EvidenceChunk(
        id=chunk_id,
        trip_id=metadata["trip_id"],
        source_id=metadata.get("source_id", ""),
        source_type=metadata["source_type"],
        text=text,
        embedding=[float(x) for x in embedding] if embedding is not None else [],
        embedding_model=metadata["embedding_model"],
        dedup_key=metadata["dedup_key"],
        content_hash=metadata.get("content_hash", ""),
        url=metadata.get("url", ""),
        title=metadata.get("title", ""),
        chunk_index=metadata.get("chunk_index", 0),
        tags=json.loads(metadata.get("tags") or "[]"),
        payload=json.loads(metadata.get("payload") or "{}"),
        is_active=bool(metadata.get("is_active", False)),
        created_at=datetime.fromisoformat(metadata["created_at"]),
    )


class ChromaStore:
    """ChromaDB-backed store of evidence chunks.

    Manages a single collection (default 'chunks') with cosine distance.
    Chunks are append-only: the only mutation is ``deactivate``, which flips
    ``is_active`` to False. There is no hard delete and no reactivation.
    """

    def __init__(self, path: str = "./data/chroma", collection_name: str = COLLECTION_NAME):
        with _store_errors("connect"):
            if path == ":memory:":
                self._client = chromadb.Client()
            else:
                self._client = chromadb.PersistentClient(
                    path=path,
                    settings=ChromaSettings(anonymized_telemetry=False),
                )
            self._collection = self._client.get_or_create_collection(
                name=collection_name,
                metadata={"hnsw:space": "cosine"},
            )
        self._collection_name = collection_name

    @property
    def collection_name(self) -> str:
        return self._collection_name

    def add_chunks(self, chunks: list[EvidenceChunk]) -> int:
        """Insert chunks in a single write.

        Returns the number of chunks added.
        """
        if not chunks:
            return 0

        with _store_errors("add"):
            self._collection.add(
                ids=[c.id for c in chunks],
                embeddings=[c.embedding for c in chunks],
                documents=[c.text for c in chunks],
                metadatas=[_to_metadata(c) for c in chunks],
            )
        logger.debug("Stored %d chunks in %s", len(chunks), self._collection_name)
        return len(chunks)

    def find_chunks(
        self,
        dedup_key: str,
        trip_id: str | None = None,
        active_only: bool = False,
    ) -> list[EvidenceChunk]:
        """Return chunks with a dedup key, optionally scoped to a trip.

        Inactive history is included unless ``active_only`` is set. Results
        are ordered by creation time.
        """
        clauses = [{"dedup_key": {"$eq": dedup_key}}]
        if trip_id is not None:
            clauses.append({"trip_id": {"$eq": trip_id}})
        if active_only:
            clauses.append({"is_active": {"$eq": True}})

        with _store_errors("get"):
            results = self._collection.get(
                where=_where(*clauses),
                include=["documents", "metadatas", "embeddings"],
            )

        ids = results["ids"]
        documents = results.get("documents")
        metadatas = results.get("metadatas")
        embeddings = results.get("embeddings")
        chunks = [
            _from_row(
                ids[i],
                documents[i] if documents is not None else "",
                metadatas[i] if metadatas is not None else {},
                embeddings[i] if embeddings is not None else None,
            )
            for i in range(len(ids))
        ]
        chunks.sort(key=lambda c: c.created_at)
        return chunks

    def find_active(self, dedup_key: str, trip_id: str | None = None) -> EvidenceChunk | None:
        """Return the active chunk for a dedup key, or None.

        Pass ``trip_id`` to scope the lookup to one trip; leave it None for
        trip-agnostic structured keys.
        """
        active = self.find_chunks(dedup_key, trip_id=trip_id, active_only=True)
        if len(active) > 1:
            logger.warning(
                "Found %d active chunks for dedup key %s; using the newest",
                len(active), dedup_key,
            )
        return active[-1] if active else None

    def deactivate(self, chunk_ids: list[str]) -> int:
        """Soft-delete chunks by flipping ``is_active`` to False.

        Returns the number of chunks that were active before the call.
        """
        if not chunk_ids:
            return 0

        with _store_errors("update"):
            current = self._collection.get(ids=list(chunk_ids), include=["metadatas"])
            ids = []
            metadatas = []
            for chunk_id, metadata in zip(current["ids"], current["metadatas"]):
                if not metadata.get("is_active"):
                    continue
                updated = dict(metadata)
                updated["is_active"] = False
                ids.append(chunk_id)
                metadatas.append(updated)
            if ids:
                self._collection.update(ids=ids, metadatas=metadatas)

        logger.debug("Deactivated %d chunks", len(ids))
        return len(ids)

    def vector_search(self, request: VectorSearchRequest) -> list[EvidenceResult]:
        """Run a filtered similarity query and project display fields.

        Fetches ``num_candidates`` neighbours matching the filter and keeps
        the best ``limit``. Score is cosine similarity rescaled to [0, 1]
        (``1 - distance / 2``). Ties keep the index's order, which is not
        guaranteed stable.
        """
        with _store_errors("query"):
            if self._collection.count() == 0:
                return []
            # n_results above the filtered match count fails on some Chroma versions
            matching = len(self._collection.get(where=request.filter, include=[])["ids"])
            if matching == 0:
                return []
            results = self._collection.query(
                query_embeddings=[request.query_vector],
                n_results=min(request.num_candidates, matching),
                where=request.filter,
                include=["documents", "metadatas", "distances"],
            )

        output: list[EvidenceResult] = []
        if results["ids"] and results["ids"][0]:
            documents = results.get("documents")
            metadatas = results.get("metadatas")
            distances = results.get("distances")
            for i in range(len(results["ids"][0])):
                metadata = metadatas[0][i] if metadatas else {}
                distance = distances[0][i] if distances else 2.0
                output.append(EvidenceResult(
                    id=results["ids"][0][i],
                    text=documents[0][i] if documents else "",
                    url=metadata.get("url", ""),
                    title=metadata.get("title", ""),
                    score=max(0.0, min(1.0, 1.0 - distance / 2.0)),
                ))

        output.sort(key=lambda r: r["score"], reverse=True)
        return output[:request.limit]

    def count_active(self, dedup_key: str, trip_id: str | None = None) -> int:
        """Number of active chunks carrying a dedup key."""
        return len(self.find_chunks(dedup_key, trip_id=trip_id, active_only=True))

    @property
    def count(self) -> int:
        """Return the number of chunks in the collection, active or not."""
        with _store_errors("count"):
            return self._collection.count()
