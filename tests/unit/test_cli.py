"""Tests for the typer CLI commands."""

import json
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from src.cli.main import app
from src.errors import ConfigurationError
from src.service import EvidenceService

runner = CliRunner()


@pytest.fixture
def service(store, provider):
    return EvidenceService(store, provider)


@pytest.fixture
def records_file(tmp_path, tokyo_flight):
    path = tmp_path / "flights.json"
    path.write_text(json.dumps([tokyo_flight]), encoding="utf-8")
    return path


class TestIngestCommand:
    def test_ingest_prints_counts(self, service, records_file):
        with patch("src.cli.ingest.build_service", return_value=service):
            result = runner.invoke(app, ["ingest", str(records_file), "--trip-id", "T1", "--source-type", "flight"])

        assert result.exit_code == 0, result.output
        assert "Inserted: 1" in result.output
        assert "Skipped (unchanged): 0" in result.output

    def test_records_wrapper_object(self, service, tmp_path):
        path = tmp_path / "web.json"
        path.write_text(json.dumps({"records": [{"text": "Ginza shopping"}]}), encoding="utf-8")
        with patch("src.cli.ingest.build_service", return_value=service):
            result = runner.invoke(app, ["ingest", str(path), "-t", "T1"])

        assert result.exit_code == 0, result.output
        assert "Inserted: 1" in result.output

    def test_configuration_error_exits_1(self, records_file):
        with patch("src.cli.ingest.build_service", side_effect=ConfigurationError("VOYAGE_API_KEY is required")):
            result = runner.invoke(app, ["ingest", str(records_file), "-t", "T1", "-s", "flight"])

        assert result.exit_code == 1
        assert "VOYAGE_API_KEY is required" in result.output


class TestSearchCommand:
    def test_search_renders_results(self, service):
        service.ingest("T1", "web", [{"text": "Ginza shopping street", "title": "Ginza"}])
        with patch("src.cli.search.build_service", return_value=service):
            result = runner.invoke(app, ["search", "Ginza shopping", "--trip-id", "T1"])

        assert result.exit_code == 0, result.output
        assert "Ginza" in result.output

    def test_search_no_results(self, service):
        with patch("src.cli.search.build_service", return_value=service):
            result = runner.invoke(app, ["search", "anything", "-t", "T1"])

        assert result.exit_code == 0
        assert "No evidence found" in result.output


class TestSmokeCommand:
    def test_smoke_round_trip(self, service):
        with patch("src.cli.smoke.build_service", return_value=service):
            result = runner.invoke(app, ["smoke"])

        assert result.exit_code == 0, result.output
        assert "Affordable Tokyo itinerary" in result.output
