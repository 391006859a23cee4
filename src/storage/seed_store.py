"""
Seed record storage.

One self-contained JSON document per ingested norm, keyed by BOE identifier:

    data/seed/{identifier}.json

Records have no cross-record dependencies; the database builder may read
them independently and in any order. A re-ingestion replaces the record.
"""

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

import pytz

from src.ingestion.errors import PersistenceError
from src.ingestion.models import NormalizedDocument
from src.shared.config import Config
from src.shared.utils import atomic_write_json, to_madrid


@dataclass(frozen=True)
class SeedState:
    """What the census needs to know about an existing seed record."""

    provision_count: int
    definition_count: int
    ingestion_date: str


class SeedStore:
    """Directory of per-item seed records."""

    def __init__(self, seed_dir: Path | None = None) -> None:
        self.seed_dir = seed_dir or Config.SEED_DIR

    def path_for(self, identifier: str) -> Path:
        return self.seed_dir / f"{identifier}.json"

    def exists(self, identifier: str) -> bool:
        return self.path_for(identifier).exists()

    def write(self, document: NormalizedDocument, ingestion_date: str) -> Path:
        """
        Atomically write (or replace) the seed record for ``document``.

        Raises:
            PersistenceError: If the write fails.
        """
        path = self.path_for(document.id)
        try:
            atomic_write_json(path, document.to_dict(ingestion_date=ingestion_date))
        except OSError as e:
            raise PersistenceError(f"Could not write seed record {path}: {e}") from e
        return path

    def read(self, identifier: str) -> dict[str, Any] | None:
        """Return the raw seed record, or None if missing or unreadable."""
        path = self.path_for(identifier)
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError):
            return None
        return data if isinstance(data, dict) else None

    def state(self, identifier: str) -> SeedState | None:
        """
        Summarize an existing seed record.

        Records written before ``ingestion_date`` was stored fall back to the
        file's modification date, so an ingested entry always has a date.
        """
        record = self.read(identifier)
        if record is None:
            return None

        ingestion_date = record.get("ingestion_date")
        if not ingestion_date:
            mtime = self.path_for(identifier).stat().st_mtime
            ingestion_date = to_madrid(datetime.fromtimestamp(mtime, pytz.UTC)).date().isoformat()

        return SeedState(
            provision_count=len(record.get("provisions") or []),
            definition_count=len(record.get("definitions") or []),
            ingestion_date=ingestion_date,
        )
