"""BOE consolidated legislation census collector.

Enumerates the complete BOE Open Data catalog of consolidated legislation
and turns it into the ingestion worklist:

- Pages through ``legislacion-consolidada?limit=N&offset=M``
- Classifies every item (ingestable / not_ingestable) and maps its status
- Cross-references existing seed records for ingestion state
- Sorts by disposition date (newest first), identifier as tie-break

The catalog endpoint gets its own throttle (same minimum delay as the
document fetcher) because it is a different endpoint. Any catalog failure
aborts the census: a partial catalog would silently under-enumerate the
corpus.

Response envelope::

    {"status": {"code": "200", "text": "ok"}, "data": [ {...}, ... ]}

``data`` is an empty object (not a list) when there are no more results.
"""

import json
from pathlib import Path
from typing import Any

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.collectors.boe_utils import (
    SCOPE_ESTATAL,
    build_worklist_entry,
    parse_catalog_item,
    sort_worklist,
)
from src.ingestion.collectors.rate_limited_fetcher import RateLimitedFetcher, RateLimiter
from src.ingestion.errors import CensusError, FetchError
from src.ingestion.models import CatalogItem, WorklistEntry
from src.shared.config import Config
from src.shared.utils import madrid_today_iso
from src.storage.seed_store import SeedStore
from src.storage.worklist_store import Worklist


class BOECensusCollector(BaseCollector):
    """Builds the worklist from the BOE consolidated legislation catalog."""

    SOURCE_NAME = "boe_census"

    JSON_ACCEPT = "application/json"

    def __init__(
        self,
        output_dir: Path | None = None,
        log_file: Path | None = None,
        fetcher: RateLimitedFetcher | None = None,
        seed_store: SeedStore | None = None,
        api_base: str | None = None,
        page_size: int | None = None,
        log_level: str | None = None,
    ) -> None:
        """Initialize the census collector.

        Args:
            output_dir: Directory for census reports.
            log_file: Optional path for file-based logging.
            fetcher: Catalog fetcher. Defaults to one with a private throttle
                and an ``application/json`` Accept header.
            seed_store: Seed records to cross-reference.
            api_base: Catalog endpoint.
            page_size: Items requested per page.
            log_level: Logger level for the collector and its default fetcher.
        """
        log_path = log_file or (Config.LOGS_DIR / "collectors" / "census_collector.log")
        super().__init__(
            output_dir=output_dir or Config.DATA_DIR / "reports",
            log_file=log_path,
            log_level=log_level,
        )
        self.fetcher = fetcher or RateLimitedFetcher(
            rate_limiter=RateLimiter(),
            accept=self.JSON_ACCEPT,
            log_file=log_path,
            log_level=log_level,
        )
        self.seed_store = seed_store or SeedStore()
        self.api_base = (api_base or Config.BOE_API_BASE).rstrip("/")
        self.page_size = page_size or Config.CENSUS_PAGE_SIZE

    # -----------------------
    # Catalog pagination
    # -----------------------

    def page_url(self, offset: int, limit: int | None = None) -> str:
        return f"{self.api_base}?limit={limit or self.page_size}&offset={offset}"

    def fetch_page(self, offset: int, limit: int | None = None) -> list[dict[str, Any]]:
        """Fetch one catalog page.

        Raises:
            CensusError: On exhausted retries, non-200 status, a non-success
                envelope or undecodable JSON.
        """
        url = self.page_url(offset, limit)
        try:
            result = self.fetcher.fetch(url)
            result.raise_for_status()
        except FetchError as e:
            raise CensusError(f"BOE API request failed for offset {offset}: {e}") from e

        try:
            body = json.loads(result.body)
        except json.JSONDecodeError as e:
            raise CensusError(f"BOE API returned invalid JSON for offset {offset}: {e}") from e

        status = body.get("status") if isinstance(body, dict) else None
        if not isinstance(status, dict) or str(status.get("code")) != "200":
            text = status.get("text") if isinstance(status, dict) else "missing status envelope"
            raise CensusError(f"BOE API error for offset {offset}: {text}")

        data = body.get("data")
        if not isinstance(data, list):
            return []
        return data

    def fetch_catalog(self) -> list[dict[str, Any]]:
        """Page through the whole catalog.

        A page shorter than the page size is the last one.
        """
        items: list[dict[str, Any]] = []
        offset = 0
        page_num = 0

        while True:
            page_num += 1
            page = self.fetch_page(offset)
            if not page:
                self.logger.info("Page %d (offset %d): empty, done", page_num, offset)
                break

            items.extend(page)
            self.logger.info(
                "Page %d (offset %d): %d items (total: %d)", page_num, offset, len(page), len(items)
            )

            if len(page) < self.page_size:
                break
            offset += self.page_size

        self.logger.info("Total items from BOE API: %d", len(items))
        return items

    # -----------------------
    # Worklist
    # -----------------------

    def _cross_reference(self, entry: WorklistEntry) -> WorklistEntry:
        if not entry.identifier:
            return entry
        state = self.seed_store.state(entry.identifier)
        if state is not None:
            entry.mark_ingested(state.provision_count, state.ingestion_date)
        return entry

    def build_entries(self, items: list[CatalogItem]) -> list[WorklistEntry]:
        """Classify, cross-reference and sort catalog items."""
        entries = [self._cross_reference(build_worklist_entry(item)) for item in items]
        return sort_worklist(entries)

    def collect(self, limit: int | None = None, estatal_only: bool = False) -> Worklist:
        """Enumerate the catalog into a fresh worklist.

        Args:
            limit: Keep only the first N catalog items (after filtering).
            estatal_only: Keep only national (estatal) legislation.

        Returns:
            Sorted worklist with ingestion state taken from seed records.

        Raises:
            CensusError: If the catalog cannot be enumerated completely.
        """
        raw_items = self.fetch_catalog()
        items = [parse_catalog_item(raw) for raw in raw_items]

        if estatal_only:
            before = len(items)
            items = [item for item in items if item.ambito_codigo == SCOPE_ESTATAL]
            self.logger.info(
                "Filtered to estatal: %d (removed %d autonómico)", len(items), before - len(items)
            )

        if limit and len(items) > limit:
            items = items[:limit]
            self.logger.info("Limited to: %d items", len(items))

        worklist = Worklist(entries=self.build_entries(items), generated=madrid_today_iso())
        self.log_report(worklist)
        return worklist

    def health_check(self) -> bool:
        """Request a single catalog item."""
        try:
            self.fetch_page(0, limit=1)
            return True
        except CensusError as e:
            self.logger.error("Health check failed: %s", e)
            return False

    # -----------------------
    # Reporting
    # -----------------------

    def log_report(self, worklist: Worklist) -> dict[str, Any]:
        summary = worklist.summary
        self.logger.info("=" * 60)
        self.logger.info("CENSUS REPORT")
        self.logger.info("=" * 60)
        self.logger.info("Total laws:         %d", summary["total_laws"])
        self.logger.info("Ingestable:         %d", summary["total_ingestable"])
        self.logger.info("Not ingestable:     %d", summary["total_not_ingestable"])
        self.logger.info("Already ingested:   %d", summary["total_ingested"])
        self.logger.info("Total provisions:   %d", summary["total_provisions"])

        self.logger.info("Scope breakdown:")
        for scope, count in summary["scope_breakdown"].items():
            self.logger.info("  %-35s %d", scope or "(unknown)", count)

        self.logger.info("Rango breakdown:")
        for rango, count in summary["rango_breakdown"].items():
            self.logger.info("  %-35s %d", rango or "(unknown)", count)
        return summary
