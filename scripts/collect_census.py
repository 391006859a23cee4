"""BOE consolidated legislation census script.

Enumerates the BOE Open Data catalog (legislacion-consolidada) and writes the
census worklist to data/census.json.

Usage:
    # Full catalog
    python scripts/collect_census.py

    # National legislation only, first 500 items
    python scripts/collect_census.py --estatal --limit 500

    # Health check only
    python scripts/collect_census.py --health-check

Example:
    $ python scripts/collect_census.py --estatal
    [INFO] Page 1 (offset 0): 10000 items (total: 10000)
    [INFO] Page 2 (offset 10000): 2113 items (total: 12113)
    [INFO] Filtered to estatal: 8034 (removed 4079 autonómico)
    [INFO] CENSUS REPORT
    [INFO] Census written to data/census.json (8034 laws)
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.ingestion.collectors.census_collector import BOECensusCollector
from src.ingestion.errors import IngestionError
from src.pipelines.legislation import run_census_pipeline
from src.shared.utils import setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Build the census of BOE consolidated legislation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--limit",
        type=int,
        help="Keep only the first N catalog items",
        metavar="N",
    )

    parser.add_argument(
        "--estatal",
        action="store_true",
        help="Only national (estatal) legislation",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check only and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def main() -> int:
    """Main census script."""
    args = parse_args()

    log_level = "DEBUG" if args.verbose else None
    logger = setup_logger("collect_census", level=log_level or "INFO")

    if args.health_check:
        ok = BOECensusCollector(log_level=log_level).health_check()
        logger.info("Health check: %s", "PASSED" if ok else "FAILED")
        return 0 if ok else 1

    try:
        run_census_pipeline.run(
            limit=args.limit, estatal_only=args.estatal, log_level=log_level
        )
    except IngestionError as e:
        logger.error("Census failed: %s", e)
        return 1

    logger.info("[SUCCESS] Census complete")
    return 0


if __name__ == "__main__":
    sys.exit(main())
