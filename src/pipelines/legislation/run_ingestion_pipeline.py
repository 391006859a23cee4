"""
Legislation Ingestion Pipeline Runner (CENSUS → FETCH → PARSE → SEED)

Walks the census worklist in order and, for every ingestable entry:

    pending → fetching → parsing → success | fallback | failed
    pending → skipped   (seed record already exists, no --force)

Per-item failures never abort the run: a non-200 response (fallback) or
any unexpected error (failed) still writes a metadata-only seed record and
marks the entry ingested. A failed durable write (PersistenceError) aborts
the run.

The worklist is flushed every ``batch_size`` mutations and at the end, so
an interrupted run loses at most one batch. Entries whose seed record was
written before the interruption are reconciled on the next run.
"""

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path

from src.ingestion.collectors.rate_limited_fetcher import RateLimitedFetcher
from src.ingestion.errors import FetchOther, PersistenceError
from src.ingestion.models import (
    INGESTABLE,
    ActMetadata,
    NormalizedDocument,
    RawDocument,
    WorklistEntry,
)
from src.ingestion.preprocessors.boe_html_parser import parse_boe_html
from src.shared.config import Config
from src.shared.utils import madrid_today_iso, setup_logger, utc_now_iso
from src.storage.raw_cache import RawMarkupCache
from src.storage.seed_store import SeedStore
from src.storage.worklist_store import Worklist, WorklistStore

# -------------------------------------------------------------------
# Outcomes
# -------------------------------------------------------------------

SUCCESS = "success"
FALLBACK = "fallback"
FAILED = "failed"
SKIPPED = "skipped"
OUTCOMES = (SUCCESS, FALLBACK, FAILED, SKIPPED)

#: Markup shorter than this is suspicious for a consolidated text.
MIN_EXPECTED_MARKUP_CHARS = 1000


@dataclass
class IngestionOptions:
    limit: int | None = None
    force: bool = False
    skip_fetch: bool = False
    batch_size: int = Config.INGEST_BATCH_SIZE


@dataclass
class IngestionReport:
    """Run-level tallies, reported at the end of every run."""

    counts: Counter = field(default_factory=Counter)
    total_provisions: int = 0
    total_definitions: int = 0
    failures: list[tuple[str, str, str]] = field(default_factory=list)

    def record(
        self,
        identifier: str,
        outcome: str,
        document: NormalizedDocument | None = None,
        message: str | None = None,
    ) -> None:
        self.counts[outcome] += 1
        if document is not None:
            self.total_provisions += len(document.provisions)
            self.total_definitions += len(document.definitions)
        if outcome in (FALLBACK, FAILED):
            self.failures.append((identifier, outcome, message or ""))

    @property
    def processed(self) -> int:
        return sum(self.counts[o] for o in (SUCCESS, FALLBACK, FAILED))

    def format(self, max_failures: int | None = None) -> list[str]:
        max_failures = Config.MAX_REPORTED_FAILURES if max_failures is None else max_failures
        lines = [
            "INGESTION REPORT",
            f"Processed:          {self.processed}",
        ]
        lines += [f"  {o + ':':<18}{self.counts[o]}" for o in OUTCOMES]
        lines += [
            f"Total provisions:   {self.total_provisions}",
            f"Total definitions:  {self.total_definitions}",
        ]

        if self.failures:
            lines.append(f"Failures and fallbacks ({len(self.failures)}):")
            for identifier, outcome, message in self.failures[:max_failures]:
                lines.append(f"  {identifier} [{outcome}]: {message}")
            hidden = len(self.failures) - max_failures
            if hidden > 0:
                lines.append(f"  ... and {hidden} more")
        return lines


# -------------------------------------------------------------------
# Pipeline
# -------------------------------------------------------------------


class LegislationIngestionPipeline:
    """Drives fetcher and parser over the worklist, persisting progress."""

    def __init__(
        self,
        worklist_store: WorklistStore | None = None,
        seed_store: SeedStore | None = None,
        raw_cache: RawMarkupCache | None = None,
        fetcher: RateLimitedFetcher | None = None,
        log_file: Path | None = None,
        log_level: str | None = None,
    ) -> None:
        log_path = log_file or (Config.LOGS_DIR / "pipelines" / "ingestion_pipeline.log")
        self.logger = setup_logger(self.__class__.__name__, log_path, log_level or Config.LOG_LEVEL)
        self.worklist_store = worklist_store or WorklistStore()
        self.seed_store = seed_store or SeedStore()
        self.raw_cache = raw_cache or RawMarkupCache()
        self.fetcher = fetcher or RateLimitedFetcher(log_file=log_path, log_level=log_level)

    def run(self, options: IngestionOptions | None = None) -> IngestionReport:
        """
        Process the worklist.

        Raises:
            FileNotFoundError: If no census has been generated yet.
            PersistenceError: If a seed record or the worklist cannot be written.
        """
        options = options or IngestionOptions()
        if options.batch_size <= 0:
            raise ValueError("batch_size must be positive")

        worklist = self.worklist_store.load()
        report = IngestionReport()
        pending = 0

        ingestable = [e for e in worklist.entries if e.classification == INGESTABLE]
        self.logger.info(
            "Worklist: %d entries, %d ingestable (limit=%s, force=%s, skip_fetch=%s)",
            len(worklist.entries),
            len(ingestable),
            options.limit,
            options.force,
            options.skip_fetch,
        )

        for entry in ingestable:
            if options.limit is not None and report.processed >= options.limit:
                break

            state = None if options.force else self.seed_store.state(entry.identifier)
            if state is not None:
                report.record(entry.identifier, SKIPPED)
                if not entry.ingested:
                    entry.mark_ingested(state.provision_count, state.ingestion_date)
                    pending += 1
            else:
                self.ingest_entry(entry, options, report)
                pending += 1

            if pending >= options.batch_size:
                self._flush(worklist)
                pending = 0

        self._flush(worklist)

        for line in report.format():
            self.logger.info(line)
        return report

    # -----------------------
    # Per-item state machine
    # -----------------------

    def ingest_entry(
        self, entry: WorklistEntry, options: IngestionOptions, report: IngestionReport
    ) -> str:
        """Fetch, parse and persist one entry. Returns the outcome."""
        act = entry.to_act_metadata()
        message = None

        try:
            raw = self._retrieve(entry, options.skip_fetch)
            document = self._parse(raw, act)
            outcome = SUCCESS
        except FetchOther as e:
            message = str(e)
            document = NormalizedDocument.fallback(act)
            outcome = FALLBACK
            self.logger.warning("%s: %s, writing fallback record", entry.identifier, message)
        except PersistenceError:
            raise
        except Exception as e:
            message = f"{type(e).__name__}: {e}"
            document = NormalizedDocument.fallback(act)
            outcome = FAILED
            self.logger.error("%s: %s, writing fallback record", entry.identifier, message)

        ingestion_date = madrid_today_iso()
        self.seed_store.write(document, ingestion_date)
        entry.mark_ingested(len(document.provisions), ingestion_date)
        report.record(entry.identifier, outcome, document, message)

        if outcome == SUCCESS:
            self.logger.info(
                "%s: %d provisions, %d definitions",
                entry.identifier,
                len(document.provisions),
                len(document.definitions),
            )
        return outcome

    def _retrieve(self, entry: WorklistEntry, skip_fetch: bool) -> RawDocument:
        if skip_fetch:
            cached = self.raw_cache.load(entry.identifier)
            if cached is not None:
                return cached
            self.logger.info("%s: no cached markup, fetching", entry.identifier)

        result = self.fetcher.fetch(entry.url)
        result.raise_for_status()

        raw = RawDocument(
            identifier=entry.identifier,
            url=entry.url,
            markup=result.body,
            retrieved_at=utc_now_iso(),
            final_url=result.url,
            content_type=result.content_type,
        )
        self.raw_cache.save(raw)
        return raw

    def _parse(self, raw: RawDocument, act: ActMetadata) -> NormalizedDocument:
        markup = raw.markup
        if len(markup) < MIN_EXPECTED_MARKUP_CHARS or ("art" not in markup and "Art" not in markup):
            self.logger.warning(
                "%s: suspicious content (%d chars), parsing anyway", raw.identifier, len(markup)
            )

        document = parse_boe_html(markup, act)
        if not document.provisions:
            self.logger.warning("%s: no provisions found", raw.identifier)
        return document

    def _flush(self, worklist: Worklist) -> None:
        self.worklist_store.save(worklist)
        self.logger.debug("Worklist flushed to %s", self.worklist_store.path)


# -------------------------------------------------------------------
# Entry point
# -------------------------------------------------------------------


def run(
    limit: int | None = None,
    force: bool = False,
    skip_fetch: bool = False,
    batch_size: int | None = None,
    log_level: str | None = None,
) -> IngestionReport:
    Config.validate()
    options = IngestionOptions(
        limit=limit,
        force=force,
        skip_fetch=skip_fetch,
        batch_size=batch_size or Config.INGEST_BATCH_SIZE,
    )
    pipeline = LegislationIngestionPipeline(log_level=log_level)
    try:
        return pipeline.run(options)
    finally:
        pipeline.fetcher.close()


if __name__ == "__main__":
    run()
