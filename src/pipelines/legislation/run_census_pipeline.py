"""
Legislation Census Pipeline Runner (BOE CATALOG → WORKLIST)

Enumerates the BOE consolidated legislation catalog, cross-references the
existing seed records and writes the census document that the ingestion
pipeline consumes.
"""

from pathlib import Path

from src.ingestion.collectors.census_collector import BOECensusCollector
from src.shared.config import Config
from src.storage.seed_store import SeedStore
from src.storage.worklist_store import Worklist, WorklistStore


# -------------------------------------------------------------------
# Pipeline
# -------------------------------------------------------------------

def run(
    limit: int | None = None,
    estatal_only: bool = False,
    census_path: Path | None = None,
    seed_dir: Path | None = None,
    collector: BOECensusCollector | None = None,
    log_level: str | None = None,
) -> Worklist:
    """
    Build and persist the census.

    Raises:
        CensusError: If the catalog cannot be enumerated completely. No
            census file is written in that case.
        PersistenceError: If the census cannot be written.
    """
    Config.validate()

    collector = collector or BOECensusCollector(seed_store=SeedStore(seed_dir), log_level=log_level)
    worklist = collector.collect(limit=limit, estatal_only=estatal_only)

    store = WorklistStore(census_path)
    path = store.save(worklist)
    collector.logger.info("Census written to %s (%d laws)", path, len(worklist.entries))

    collector.export_json(
        {"generated": worklist.generated, "census_path": str(path), "summary": worklist.summary},
        "report",
    )
    return worklist


if __name__ == "__main__":
    run()
