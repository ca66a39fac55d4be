"""Ingestion outcome and retrieval result models."""

from dataclasses import asdict, dataclass
from typing import TypedDict


class EvidenceResult(TypedDict):
    """A ranked evidence snippet returned by retrieval."""
    id: str
    text: str
    url: str
    title: str
    score: float


@dataclass
class IngestResult:
    """Per-batch counts of ingestion decisions."""

    inserted: int = 0
    replaced: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.replaced + self.skipped

    def as_dict(self) -> dict[str, int]:
        return asdict(self)
