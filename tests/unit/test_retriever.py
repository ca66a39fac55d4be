"""Unit tests for trip-scoped retrieval."""

from unittest.mock import MagicMock

import pytest

from src.errors import ProviderError, ValidationError
from src.models.enums import SourceType
from src.retrieval.retriever import Retriever

QUERY_TEXT = "cheap ramen near shinjuku station"


class TestFilterCorrectness:
    def test_never_returns_other_trips(self, engine, retriever):
        # Identical text in T2 would be the best match if trips were not filtered
        engine.ingest("T2", SourceType.WEB, [{"text": QUERY_TEXT}])
        engine.ingest("T1", SourceType.WEB, [{"text": "Museum opening hours in Ueno"}])

        results = retriever.retrieve("T1", QUERY_TEXT, limit=5, num_candidates=50)

        assert [r["text"] for r in results] == ["Museum opening hours in Ueno"]

    def test_never_returns_inactive(self, engine, retriever, tokyo_flight):
        engine.ingest("T1", SourceType.FLIGHT, [dict(tokyo_flight, airline="ANA")])
        engine.ingest("T1", SourceType.FLIGHT, [dict(tokyo_flight, airline="ANA", price=850)])

        results = retriever.retrieve("T1", "ANA 920 11h 0 stops", limit=5, num_candidates=50)

        assert [r["text"] for r in results] == ["ANA 850 11h 0 stops"]

    def test_source_type_filter(self, engine, retriever, tokyo_flight):
        engine.ingest("T1", SourceType.WEB, [{"text": "Tokyo flight tips"}])
        engine.ingest("T1", SourceType.FLIGHT, [tokyo_flight])

        results = retriever.retrieve("T1", "Tokyo flight", source_types=["flight"])

        assert len(results) == 1
        assert results[0]["title"] == "SFO to TYO"


class TestRanking:
    def test_ordered_by_score(self, engine, retriever):
        engine.ingest("T1", SourceType.WEB, [
            {"text": "Sushi breakfast at Toyosu market"},
            {"text": "Cheap ramen near Shinjuku station late at night"},
            {"text": "Day trip to Nikko shrines"},
        ])

        results = retriever.retrieve("T1", QUERY_TEXT, limit=3)

        assert results[0]["text"].startswith("Cheap ramen")
        scores = [r["score"] for r in results]
        assert scores == sorted(scores, reverse=True)
        assert all(0.0 <= s <= 1.0 for s in scores)

    def test_limit(self, engine, retriever):
        engine.ingest("T1", SourceType.WEB, [{"text": f"Tokyo note {i}"} for i in range(6)])
        assert len(retriever.retrieve("T1", "Tokyo", limit=2)) == 2

    def test_no_embedding_in_results(self, engine, retriever):
        engine.ingest("T1", SourceType.WEB, [{"text": "Tokyo tower views", "url": "https://example.com/t"}])
        result = retriever.retrieve("T1", "Tokyo tower")[0]
        assert set(result) == {"id", "text", "url", "title", "score"}
        assert result["url"] == "https://example.com/t"


class TestEmptyState:
    def test_empty_store(self, retriever):
        assert retriever.retrieve("T1", "anything") == []

    def test_trip_without_chunks(self, engine, retriever):
        engine.ingest("T2", SourceType.WEB, [{"text": "Kyoto temples"}])
        assert retriever.retrieve("T1", "Kyoto temples") == []


class TestQueryEmbedding:
    def test_uses_query_input_type_and_model(self, retriever, provider):
        retriever.retrieve("T1", "Tokyo flight")
        assert provider.calls == [
            {"texts": ["Tokyo flight"], "model": "test-hash-v1", "input_type": "query"}
        ]

    def test_provider_failure_propagates(self, store):
        provider = MagicMock()
        provider.model_name = "m"
        provider.embed_query.side_effect = ProviderError("down")
        with pytest.raises(ProviderError):
            Retriever(store, provider).retrieve("T1", "Tokyo")


class TestValidation:
    def test_blank_query(self, retriever):
        with pytest.raises(ValidationError):
            retriever.retrieve("T1", "   ")

    def test_missing_trip(self, retriever):
        with pytest.raises(ValidationError):
            retriever.retrieve("", "Tokyo")

    def test_limit_below_one(self, retriever):
        with pytest.raises(ValidationError):
            retriever.retrieve("T1", "Tokyo", limit=0)

    def test_candidates_below_limit(self, retriever, provider):
        with pytest.raises(ValidationError):
            retriever.retrieve("T1", "Tokyo", limit=10, num_candidates=5)
        assert provider.calls == []
