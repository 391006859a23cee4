"""Tests for seed record and raw markup storage."""

import json
import os
from datetime import datetime

import pytest
import pytz

from src.ingestion.errors import PersistenceError
from src.ingestion.models import Definition, NormalizedDocument, Provision, RawDocument
from src.storage.raw_cache import RawMarkupCache
from src.storage.seed_store import SeedStore


@pytest.fixture
def document(act) -> NormalizedDocument:
    return NormalizedDocument(
        id=act.identifier,
        title=act.title,
        short_name=act.short_name,
        status=act.status,
        issued_date=act.issued_date,
        in_force_date=act.in_force_date,
        url=act.url,
        provisions=(
            Provision("art1", "1", "Objeto", "Esta ley regula el tratamiento.", "CAPÍTULO I"),
            Provision("art2", "2", "Definiciones", "a) Dato: cualquier información."),
        ),
        definitions=(Definition("Dato", "cualquier información.", "art2"),),
    )


class TestSeedStore:
    def test_write_record_shape(self, tmp_path, document):
        store = SeedStore(tmp_path)
        path = store.write(document, "2026-01-10")

        assert path == tmp_path / "BOE-A-2018-16673.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["type"] == "statute"
        assert data["title_en"] == ""
        assert data["ingestion_date"] == "2026-01-10"
        assert data["provisions"][0] == {
            "provision_ref": "art1",
            "chapter": "CAPÍTULO I",
            "section": "1",
            "title": "Objeto",
            "content": "Esta ley regula el tratamiento.",
        }
        assert "chapter" not in data["provisions"][1]
        assert data["definitions"] == [
            {"term": "Dato", "definition": "cualquier información.", "source_provision": "art2"}
        ]

    def test_fallback_record(self, tmp_path, act):
        store = SeedStore(tmp_path)
        store.write(NormalizedDocument.fallback(act), "2026-01-10")

        data = store.read(act.identifier)
        assert data["provisions"] == []
        assert data["definitions"] == []
        assert data["title"] == act.title

    def test_rewrite_supersedes(self, tmp_path, document, act):
        store = SeedStore(tmp_path)
        store.write(document, "2026-01-10")
        store.write(NormalizedDocument.fallback(act), "2026-01-11")

        state = store.state(act.identifier)
        assert state.provision_count == 0
        assert state.ingestion_date == "2026-01-11"

    def test_state(self, tmp_path, document):
        store = SeedStore(tmp_path)
        store.write(document, "2026-01-10")

        state = store.state(document.id)
        assert state.provision_count == 2
        assert state.definition_count == 1
        assert state.ingestion_date == "2026-01-10"

    def test_state_missing(self, tmp_path):
        assert SeedStore(tmp_path).state("BOE-A-0") is None

    def test_state_corrupt_record(self, tmp_path):
        (tmp_path / "BOE-A-1.json").write_text("{truncated", encoding="utf-8")
        assert SeedStore(tmp_path).state("BOE-A-1") is None

    def test_legacy_record_uses_file_date(self, tmp_path):
        path = tmp_path / "BOE-A-1.json"
        path.write_text(json.dumps({"id": "BOE-A-1", "provisions": [{}]}), encoding="utf-8")
        stamp = pytz.timezone("Europe/Madrid").localize(datetime(2025, 6, 15, 12, 0, 0)).timestamp()
        os.utime(path, (stamp, stamp))

        state = SeedStore(tmp_path).state("BOE-A-1")
        assert state.ingestion_date == "2025-06-15"
        assert state.provision_count == 1

    def test_write_failure_raises_persistence_error(self, tmp_path, document):
        blocker = tmp_path / "seed"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(PersistenceError):
            SeedStore(blocker).write(document, "2026-01-10")


class TestRawMarkupCache:
    def test_save_and_load(self, tmp_path):
        cache = RawMarkupCache(tmp_path)
        raw = RawDocument(
            identifier="BOE-A-1",
            url="https://www.boe.es/buscar/act.php?id=BOE-A-1",
            markup="<html>texto</html>",
            retrieved_at="2026-01-10T09:00:00+00:00",
            final_url="https://www.boe.es/buscar/act.php?id=BOE-A-1",
            content_type="text/html; charset=utf-8",
        )
        cache.save(raw)

        assert cache.load("BOE-A-1") == raw

    def test_missing(self, tmp_path):
        assert RawMarkupCache(tmp_path).load("BOE-A-1") is None

    def test_corrupt(self, tmp_path):
        (tmp_path / "BOE-A-1.json").write_text('{"identifier": "BOE-A-1"}', encoding="utf-8")
        assert RawMarkupCache(tmp_path).load("BOE-A-1") is None
