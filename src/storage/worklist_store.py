"""
Worklist (census) document storage.

The census is persisted as a single versioned JSON document. Its embedded
summary is a cache: it is recomputed from the entries every time the
document is serialized, never read back as a source of truth.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pandas as pd

from src.ingestion.errors import PersistenceError
from src.ingestion.models import INGESTABLE, NOT_INGESTABLE, SKIP, WorklistEntry
from src.shared.config import Config
from src.shared.utils import atomic_write_json, madrid_today_iso

SCHEMA_VERSION = "1.0"

JURISDICTION = "ES"
JURISDICTION_NAME = "Spain"
PORTAL = "boe-open-data-api"
PORTAL_URL = "https://www.boe.es/datosabiertos/"

SUMMARY_COLUMNS = ["classification", "ingested", "provision_count", "ambito", "rango"]


# -------------------------------------------------------------------
# Summary
# -------------------------------------------------------------------

def _breakdown(series: pd.Series) -> dict[str, int]:
    counts = series.value_counts()
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], str(kv[0])))
    return {str(k): int(v) for k, v in ordered}


def compute_summary(entries: list[WorklistEntry]) -> dict[str, Any]:
    """Aggregate totals and per-category breakdowns from the entries."""
    df = pd.DataFrame(
        [
            (e.classification, e.ingested, e.provision_count, e.item.ambito, e.item.rango)
            for e in entries
        ],
        columns=SUMMARY_COLUMNS,
    )
    classifications = df["classification"].value_counts()

    return {
        "total_laws": len(df),
        "total_ingestable": int(classifications.get(INGESTABLE, 0)),
        "total_not_ingestable": int(classifications.get(NOT_INGESTABLE, 0)),
        "total_skip": int(classifications.get(SKIP, 0)),
        "total_ingested": int(df["ingested"].astype(bool).sum()),
        "total_provisions": int(df["provision_count"].astype(int).sum()),
        "scope_breakdown": _breakdown(df["ambito"]),
        "rango_breakdown": _breakdown(df["rango"]),
    }


# -------------------------------------------------------------------
# Document
# -------------------------------------------------------------------

@dataclass
class Worklist:
    """Ordered census entries plus document metadata."""

    entries: list[WorklistEntry] = field(default_factory=list)
    generated: str = field(default_factory=madrid_today_iso)
    schema_version: str = SCHEMA_VERSION

    @property
    def summary(self) -> dict[str, Any]:
        return compute_summary(self.entries)

    def get(self, identifier: str) -> WorklistEntry | None:
        for entry in self.entries:
            if entry.identifier == identifier:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": self.schema_version,
            "jurisdiction": JURISDICTION,
            "jurisdiction_name": JURISDICTION_NAME,
            "portal": PORTAL,
            "portal_url": PORTAL_URL,
            "generated": self.generated,
            "summary": self.summary,
            "laws": [e.to_dict() for e in self.entries],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Worklist":
        return cls(
            entries=[WorklistEntry.from_dict(law) for law in data.get("laws", [])],
            generated=data.get("generated") or madrid_today_iso(),
            schema_version=data.get("schema_version", SCHEMA_VERSION),
        )


# -------------------------------------------------------------------
# Persistence
# -------------------------------------------------------------------

class WorklistStore:
    """Reads and atomically rewrites the census document."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or Config.CENSUS_PATH

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> Worklist:
        """
        Load the census document.

        Raises:
            FileNotFoundError: If no census has been written yet.
            ValueError: If the document is not valid JSON.
        """
        with open(self.path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Census file {self.path} is not valid JSON: {e}") from e
        return Worklist.from_dict(data)

    def save(self, worklist: Worklist) -> Path:
        """
        Persist the worklist with a freshly recomputed summary.

        Raises:
            PersistenceError: If the write fails.
        """
        try:
            atomic_write_json(self.path, worklist.to_dict())
        except OSError as e:
            raise PersistenceError(f"Could not write census to {self.path}: {e}") from e
        return self.path
