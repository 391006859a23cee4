"""BOE consolidated legislation ingestion script.

Reads data/census.json and ingests every ingestable law into
data/seed/{identifier}.json. Safe to interrupt: rerunning resumes where the
previous run stopped.

Usage:
    # Ingest everything not yet ingested
    python scripts/ingest_legislation.py

    # First 100 pending items, flushing the census every 10 items
    python scripts/ingest_legislation.py --limit 100 --batch-size 10

    # Re-ingest already ingested items
    python scripts/ingest_legislation.py --force

    # Re-parse cached markup without network access (parser iteration)
    python scripts/ingest_legislation.py --force --skip-fetch
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.ingestion.errors import PersistenceError
from src.pipelines.legislation import run_ingestion_pipeline
from src.shared.utils import setup_logger


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Ingest BOE consolidated legislation into seed records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("--limit", type=int, help="Process at most N items", metavar="N")
    parser.add_argument("--force", action="store_true", help="Re-ingest already ingested items")
    parser.add_argument(
        "--skip-fetch",
        action="store_true",
        help="Parse cached markup instead of fetching (fetches when no cache exists)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        help="Flush the census every N processed items",
        metavar="N",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    return parser.parse_args()


def main() -> int:
    """Main ingestion script."""
    args = parse_args()

    log_level = "DEBUG" if args.verbose else None
    logger = setup_logger("ingest_legislation", level=log_level or "INFO")

    try:
        run_ingestion_pipeline.run(
            limit=args.limit,
            force=args.force,
            skip_fetch=args.skip_fetch,
            batch_size=args.batch_size,
            log_level=log_level,
        )
    except FileNotFoundError as e:
        logger.error("No census found (%s). Run scripts/collect_census.py first.", e)
        return 1
    except PersistenceError as e:
        logger.error("Aborting: %s", e)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted. Rerun to resume.")
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
