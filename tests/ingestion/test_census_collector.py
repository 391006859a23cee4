"""Tests for the BOE census collector."""

import json
import logging
from unittest.mock import Mock

import pytest
import requests

from src.ingestion.collectors.census_collector import BOECensusCollector
from src.ingestion.collectors.rate_limited_fetcher import RateLimitedFetcher, RateLimiter
from src.ingestion.errors import CensusError
from src.ingestion.models import INGESTABLE, NOT_INGESTABLE
from src.storage.seed_store import SeedStore

API = "https://boe.es/datosabiertos/api/legislacion-consolidada"


def _make_response(text: str, status: int = 200) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.text = text
    resp.content = text.encode("utf-8")
    resp.headers = {"content-type": "application/json; charset=utf-8"}
    resp.url = API
    return resp


def _make_collector(tmp_path, responses, page_size: int = 2) -> BOECensusCollector:
    session = Mock()
    session.get.side_effect = responses
    fetcher = RateLimitedFetcher(
        rate_limiter=RateLimiter(min_interval=0.0),
        max_retries=1,
        session=session,
        sleep=Mock(),
    )
    return BOECensusCollector(
        output_dir=tmp_path / "reports",
        log_file=tmp_path / "logs" / "census.log",
        fetcher=fetcher,
        seed_store=SeedStore(tmp_path / "seed"),
        api_base=API,
        page_size=page_size,
    )


def _requested_urls(collector: BOECensusCollector) -> list[str]:
    return [c.args[0] for c in collector.fetcher._session.get.call_args_list]


class TestPagination:
    def test_short_page_terminates(self, tmp_path, catalog_item, catalog_page):
        pages = [
            _make_response(catalog_page([catalog_item("BOE-A-1"), catalog_item("BOE-A-2")])),
            _make_response(catalog_page([catalog_item("BOE-A-3")])),
        ]
        collector = _make_collector(tmp_path, pages)

        items = collector.fetch_catalog()

        assert [i["identificador"] for i in items] == ["BOE-A-1", "BOE-A-2", "BOE-A-3"]
        assert _requested_urls(collector) == [f"{API}?limit=2&offset=0", f"{API}?limit=2&offset=2"]

    def test_empty_object_data_terminates(self, tmp_path, catalog_item, catalog_page):
        pages = [
            _make_response(catalog_page([catalog_item("BOE-A-1"), catalog_item("BOE-A-2")])),
            _make_response(json.dumps({"status": {"code": "200", "text": "ok"}, "data": {}})),
        ]
        collector = _make_collector(tmp_path, pages)

        assert len(collector.fetch_catalog()) == 2
        assert len(_requested_urls(collector)) == 2

    def test_http_error_aborts(self, tmp_path):
        collector = _make_collector(tmp_path, [_make_response("", 404)])
        with pytest.raises(CensusError, match="HTTP 404"):
            collector.fetch_catalog()

    def test_exhausted_retries_abort(self, tmp_path):
        collector = _make_collector(tmp_path, [_make_response("", 503), _make_response("", 503)])
        with pytest.raises(CensusError):
            collector.fetch_catalog()

    def test_error_envelope_aborts(self, tmp_path):
        body = json.dumps({"status": {"code": "400", "text": "Bad request"}, "data": []})
        collector = _make_collector(tmp_path, [_make_response(body)])
        with pytest.raises(CensusError, match="Bad request"):
            collector.fetch_catalog()

    def test_invalid_json_aborts(self, tmp_path):
        collector = _make_collector(tmp_path, [_make_response("<html>maintenance</html>")])
        with pytest.raises(CensusError, match="invalid JSON"):
            collector.fetch_catalog()

    def test_truncated_responses_abort_after_retries(self, tmp_path):
        broken = [requests.exceptions.ChunkedEncodingError("broken") for _ in range(2)]
        collector = _make_collector(tmp_path, broken)
        with pytest.raises(CensusError, match="offset 0"):
            collector.fetch_catalog()

    @pytest.mark.parametrize(
        "error",
        [
            requests.exceptions.MissingSchema("no scheme"),
            requests.exceptions.TooManyRedirects("loop"),
            requests.exceptions.ContentDecodingError("gzip"),
        ],
    )
    def test_other_request_errors_abort(self, tmp_path, error):
        collector = _make_collector(tmp_path, [error])
        with pytest.raises(CensusError, match="BOE API request failed"):
            collector.fetch_catalog()


class TestCollect:
    def test_builds_sorted_classified_worklist(self, tmp_path, catalog_item, catalog_page):
        items = [
            catalog_item("BOE-A-1", fecha_disposicion="20100101"),
            catalog_item("BOE-A-2", fecha_disposicion="20200101", url_html_consolidada=""),
            catalog_item("BOE-A-3", fecha_disposicion="20150101", vigencia_agotada="S"),
        ]
        collector = _make_collector(tmp_path, [_make_response(catalog_page(items))], page_size=10)

        worklist = collector.collect()

        assert [e.identifier for e in worklist.entries] == ["BOE-A-2", "BOE-A-3", "BOE-A-1"]
        by_id = {e.identifier: e for e in worklist.entries}
        assert by_id["BOE-A-2"].classification == NOT_INGESTABLE
        assert by_id["BOE-A-2"].skip_reason == "No consolidated HTML URL"
        assert by_id["BOE-A-3"].status == "repealed"
        assert by_id["BOE-A-1"].classification == INGESTABLE
        assert not any(e.ingested for e in worklist.entries)

    def test_cross_references_seed_records(self, tmp_path, catalog_item, catalog_page):
        seed_dir = tmp_path / "seed"
        seed_dir.mkdir()
        (seed_dir / "BOE-A-1.json").write_text(
            json.dumps({"id": "BOE-A-1", "provisions": [{}, {}, {}], "ingestion_date": "2026-01-10"}),
            encoding="utf-8",
        )
        items = [catalog_item("BOE-A-1"), catalog_item("BOE-A-2")]
        collector = _make_collector(tmp_path, [_make_response(catalog_page(items))], page_size=10)

        worklist = collector.collect()
        entry = worklist.get("BOE-A-1")

        assert entry.ingested
        assert entry.provision_count == 3
        assert entry.ingestion_date == "2026-01-10"
        assert not worklist.get("BOE-A-2").ingested
        assert worklist.summary["total_ingested"] == 1
        assert worklist.summary["total_provisions"] == 3

    def test_estatal_filter_then_limit(self, tmp_path, catalog_item, catalog_page):
        regional = {"codigo": "2", "texto": "Autonómico"}
        items = [
            catalog_item("BOE-A-1"),
            catalog_item("BOE-A-2", ambito=regional),
            catalog_item("BOE-A-3"),
            catalog_item("BOE-A-4"),
        ]
        collector = _make_collector(tmp_path, [_make_response(catalog_page(items))], page_size=10)

        worklist = collector.collect(limit=2, estatal_only=True)

        assert sorted(e.identifier for e in worklist.entries) == ["BOE-A-1", "BOE-A-3"]
        assert worklist.summary["scope_breakdown"] == {"Estatal": 2}

    def test_catalog_failure_propagates(self, tmp_path):
        collector = _make_collector(tmp_path, [_make_response("", 500), _make_response("", 500)])
        with pytest.raises(CensusError):
            collector.collect()


class TestHealthCheck:
    def test_true_when_catalog_answers(self, tmp_path, catalog_item, catalog_page):
        collector = _make_collector(tmp_path, [_make_response(catalog_page([catalog_item("BOE-A-1")]))])

        assert collector.health_check() is True
        assert _requested_urls(collector) == [f"{API}?limit=1&offset=0"]

    def test_false_on_error(self, tmp_path):
        collector = _make_collector(tmp_path, [_make_response("", 404)])
        assert collector.health_check() is False

    def test_false_on_truncated_responses(self, tmp_path):
        broken = [requests.exceptions.ChunkedEncodingError("broken") for _ in range(2)]
        collector = _make_collector(tmp_path, broken)
        assert collector.health_check() is False

    def test_false_on_invalid_api_base(self, tmp_path):
        collector = _make_collector(tmp_path, [requests.exceptions.InvalidURL("bad url")])
        assert collector.health_check() is False


class TestLogLevel:
    def test_log_level_reaches_collector_and_default_fetcher(self, tmp_path):
        collector = BOECensusCollector(
            output_dir=tmp_path / "reports",
            log_file=tmp_path / "logs" / "census.log",
            seed_store=SeedStore(tmp_path / "seed"),
            log_level="DEBUG",
        )

        assert collector.logger.level == logging.DEBUG
        assert collector.fetcher.logger.level == logging.DEBUG
        collector.fetcher.close()
