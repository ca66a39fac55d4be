"""Unit tests for vector search request construction."""

import pytest

from src.models.enums import SourceType
from src.vectorstore.search import (
    VectorSearchRequest,
    build_vector_search_filter,
    build_vector_search_request,
)


class TestBuildVectorSearchFilter:
    def test_trip_and_active(self):
        assert build_vector_search_filter("T1") == {"$and": [
            {"trip_id": {"$eq": "T1"}},
            {"is_active": {"$eq": True}},
        ]}

    def test_source_types(self):
        where = build_vector_search_filter("T1", ["flight", "lodging"])
        assert where["$and"][2] == {"source_type": {"$in": ["flight", "lodging"]}}

    def test_accepts_enums(self):
        where = build_vector_search_filter("T1", [SourceType.WEB])
        assert where["$and"][2] == {"source_type": {"$in": ["web"]}}

    def test_empty_source_types_ignored(self):
        assert len(build_vector_search_filter("T1", [])["$and"]) == 2


class TestVectorSearchRequest:
    def test_defaults(self):
        request = build_vector_search_request("T1", [0.1, 0.2])
        assert request.limit == 8
        assert request.num_candidates == 200
        assert request.path == "embedding"
        assert "embedding" not in request.projection
        assert "score" in request.projection

    def test_num_candidates_below_limit(self):
        with pytest.raises(ValueError):
            VectorSearchRequest(query_vector=[0.1], filter={}, limit=10, num_candidates=5)

    def test_empty_vector(self):
        with pytest.raises(ValueError):
            VectorSearchRequest(query_vector=[], filter={})
