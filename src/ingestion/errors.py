"""Exception hierarchy for census and ingestion runs.

Per-item failures (``FetchError`` subclasses, unexpected parse errors) are
contained by the ingestion pipeline and degrade to a fallback record.
``PersistenceError`` and ``CensusError`` abort the whole run.
"""


class IngestionError(Exception):
    """Base class for all pipeline errors."""


class FetchError(IngestionError):
    """A document or catalog request did not produce usable content."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(message)
        self.url = url


class FetchTransient(FetchError):
    """A single attempt failed with 429, 5xx or a network error (retryable)."""

    def __init__(self, url: str, status_code: int | None, reason: str | None = None) -> None:
        detail = f"HTTP {status_code}" if status_code is not None else (reason or "network error")
        super().__init__(url, f"Transient failure for {url}: {detail}")
        self.status_code = status_code


class FetchExhausted(FetchError):
    """Every retry attempt failed with a transient error."""

    def __init__(self, url: str, last_status: int | None, attempts: int) -> None:
        detail = f"HTTP {last_status}" if last_status is not None else "network error"
        super().__init__(url, f"Failed to fetch {url} after {attempts} attempts (last: {detail})")
        self.last_status = last_status
        self.attempts = attempts


class FetchOther(FetchError):
    """Non-retryable, non-200 response. Terminal for the item only."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(url, f"HTTP {status_code}")
        self.status_code = status_code


class PersistenceError(IngestionError):
    """A durable write failed; worklist integrity can no longer be guaranteed."""


class CensusError(IngestionError):
    """The remote catalog could not be enumerated completely."""
