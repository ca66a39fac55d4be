"""Evidence Chunk data model."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from src.models.enums import SourceType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EvidenceChunk:
    """One stored unit of trip evidence: text, its embedding, and metadata.

    Chunks are never edited after they are written; the store may only flip
    ``is_active`` from True to False.
    """

    trip_id: str
    source_id: str
    source_type: SourceType
    text: str
    embedding: list[float]
    embedding_model: str
    dedup_key: str
    content_hash: str = ""
    url: str = ""
    title: str = "Source"
    chunk_index: int = 0
    tags: list[str] = field(default_factory=list)
    payload: dict = field(default_factory=dict)
    is_active: bool = True
    created_at: datetime = field(default_factory=_utcnow)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        if not isinstance(self.source_type, SourceType):
            self.source_type = SourceType(self.source_type)
        if not self.trip_id:
            raise ValueError("trip_id must not be empty")
        if not self.text:
            raise ValueError("text must not be empty")
        if not self.dedup_key:
            raise ValueError("dedup_key must not be empty")
        if not self.embedding_model:
            raise ValueError("embedding_model must not be empty")
        if self.chunk_index < 0:
            raise ValueError("chunk_index must be >= 0")
