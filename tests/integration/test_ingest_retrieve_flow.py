"""Integration tests for the ingest -> re-ingest -> retrieve flow.

Uses an in-memory ChromaDB collection and the hashing embedding provider,
so no network access or model download is needed.
"""

import threading

from src.ingestion.dedup import compute_dedup_key
from src.ingestion.pipeline import IngestionEngine
from src.ingestion.locks import KeyedLock
from src.models.enums import SourceType
from src.service import EvidenceService


class TestFlightPriceUpdateScenario:
    """SFO -> TYO offer ingested, repriced, then retrieved."""

    def test_full_scenario(self, store, provider, tokyo_flight):
        service = EvidenceService(store, provider)

        first = service.ingest("trip-tokyo", SourceType.FLIGHT, [tokyo_flight])
        assert first.as_dict() == {"inserted": 1, "replaced": 0, "skipped": 0}

        second = service.ingest("trip-tokyo", SourceType.FLIGHT, [dict(tokyo_flight, price=850)])
        assert second.as_dict() == {"inserted": 0, "replaced": 1, "skipped": 0}

        key = compute_dedup_key(tokyo_flight, SourceType.FLIGHT)
        active = store.find_chunks(key, active_only=True)
        assert len(active) == 1
        assert active[0].payload["price"] == 850

        results = service.retrieve("trip-tokyo", "Tokyo flight", limit=1)
        assert len(results) == 1
        assert results[0]["id"] == active[0].id
        assert results[0]["text"] == "850 11h 0 stops"
        assert isinstance(results[0]["score"], float)

    def test_retry_after_success_writes_nothing(self, store, provider, tokyo_flight):
        service = EvidenceService(store, provider)
        batch = [tokyo_flight, dict(tokyo_flight, destination="OSA")]

        service.ingest("trip-tokyo", SourceType.FLIGHT, batch)
        count = store.count
        retry = service.ingest("trip-tokyo", SourceType.FLIGHT, batch)

        assert retry.skipped == 2
        assert store.count == count


class TestConcurrentIngestion:
    def test_same_key_from_many_threads_keeps_one_active(self, store, provider, tokyo_flight):
        locks = KeyedLock()
        errors = []

        def worker(price):
            try:
                IngestionEngine(store, provider, locks=locks).ingest(
                    "trip-tokyo", SourceType.FLIGHT, [dict(tokyo_flight, price=price)],
                )
            except Exception as e:  # surfaced through the assertion below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(900 - i * 10,)) for i in range(6)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        key = compute_dedup_key(tokyo_flight, SourceType.FLIGHT)
        assert store.count_active(key) == 1
        assert len(store.find_chunks(key)) == 6

    def test_different_trips_proceed_independently(self, store, provider):
        engine = IngestionEngine(store, provider)
        results = {}

        def worker(trip_id):
            results[trip_id] = engine.ingest(
                trip_id, SourceType.WEB, [{"text": f"Evidence for {trip_id} number {i}"} for i in range(3)],
            )

        threads = [threading.Thread(target=worker, args=(f"trip-{n}",)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(r.inserted == 3 for r in results.values())
        assert store.count == 12
