"""Vector search request construction for trip-scoped evidence retrieval."""

from dataclasses import dataclass, field

DEFAULT_LIMIT = 8
DEFAULT_NUM_CANDIDATES = 200
EMBEDDING_PATH = "embedding"


@dataclass
class VectorSearchRequest:
    """A filtered approximate nearest-neighbour query.

    ``num_candidates`` is the breadth of the candidate pool the index
    considers; ``limit`` bounds how many ranked results come back.
    """

    query_vector: list[float]
    filter: dict
    limit: int = DEFAULT_LIMIT
    num_candidates: int = DEFAULT_NUM_CANDIDATES
    path: str = EMBEDDING_PATH
    projection: tuple[str, ...] = field(default=("id", "text", "url", "title", "score"))

    def __post_init__(self):
        if not self.query_vector:
            raise ValueError("query_vector must not be empty")
        if self.limit < 1:
            raise ValueError("limit must be >= 1")
        if self.num_candidates < self.limit:
            raise ValueError("num_candidates must be >= limit")


def build_vector_search_filter(trip_id: str, source_types: list[str] | None = None) -> dict:
    """Build the metadata filter for active evidence of one trip.

    Produces ``trip_id == trip_id AND is_active == True`` plus
    ``source_type IN source_types`` when a non-empty list is supplied.
    """
    clauses: list[dict] = [
        {"trip_id": {"$eq": trip_id}},
        {"is_active": {"$eq": True}},
    ]
    if source_types:
        clauses.append({"source_type": {"$in": [str(getattr(s, "value", s)) for s in source_types]}})
    return {"$and": clauses}


def build_vector_search_request(
    trip_id: str,
    query_vector: list[float],
    limit: int = DEFAULT_LIMIT,
    num_candidates: int = DEFAULT_NUM_CANDIDATES,
    source_types: list[str] | None = None,
) -> VectorSearchRequest:
    """Assemble the full similarity search request for a trip query."""
    return VectorSearchRequest(
        query_vector=query_vector,
        filter=build_vector_search_filter(trip_id, source_types),
        limit=limit,
        num_candidates=num_candidates,
    )
