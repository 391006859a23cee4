"""Rate-limited HTTP client for boe.es.

BOE (Boletín Oficial del Estado) serves consolidated legislation as public
open data. Requests honour a politeness contract with the upstream service:

- A minimum delay (0.5 s by default) between the *start* of consecutive
  requests, enforced by a shared :class:`RateLimiter`
- A descriptive User-Agent identifying this client
- Retry on HTTP 429/5xx, network errors and truncated bodies with
  exponential backoff (2 s, 4 s, 8 s ... for the default settings)

Any other status, including 4xx other than 429, is returned to the caller
without retrying. Any other ``requests`` failure (bad URL, redirect loop,
undecodable body) raises a terminal :class:`FetchError`.

Example:
    >>> fetcher = RateLimitedFetcher()
    >>> result = fetcher.fetch("https://www.boe.es/buscar/act.php?id=BOE-A-2018-16673")
    >>> result.status_code
    200
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import requests

from src.ingestion.errors import FetchError, FetchExhausted, FetchOther, FetchTransient
from src.shared.config import Config
from src.shared.utils import setup_logger

DEFAULT_ACCEPT = "text/html, application/xhtml+xml, */*"
DEFAULT_ACCEPT_LANGUAGE = "es-ES,es;q=0.9,en;q=0.5"


def is_retryable_status(status_code: int) -> bool:
    """429 and every 5xx status are transient."""
    return status_code == 429 or 500 <= status_code <= 599


class RateLimiter:
    """Minimum-interval throttle measured from request start to request start.

    One instance represents one politeness contract. Every fetcher that
    talks to the same host should share it.
    """

    def __init__(
        self,
        min_interval: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.min_interval = Config.REQUEST_DELAY if min_interval is None else min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """Block until the next request may start.

        Returns:
            Seconds slept (0.0 when no wait was needed).
        """
        with self._lock:
            waited = 0.0
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    self._sleep(waited)
            self._last_request = self._clock()
            return waited


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a single (possibly retried) GET."""

    status_code: int
    body: str
    content_type: str
    url: str

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    def raise_for_status(self) -> None:
        """Raise :class:`FetchOther` for any non-200 result."""
        if not self.ok:
            raise FetchOther(self.url, self.status_code)


class RateLimitedFetcher:
    """Single-GET HTTP client with shared throttling and bounded retries.

    Args:
        rate_limiter: Throttle shared with other callers (a private one is
            created when omitted).
        max_retries: Retries after the first attempt (``max_retries + 1``
            attempts in total).
        backoff: First backoff in seconds; doubles on every retry.
        timeout: Per-request timeout in seconds.
        session: Optional pre-configured ``requests.Session``.
        accept: ``Accept`` header value.
        sleep: Sleep function used for backoff.
        log_file: Optional path for file-based logging.
        log_level: Logger level (defaults to ``Config.LOG_LEVEL``).
    """

    def __init__(
        self,
        rate_limiter: RateLimiter | None = None,
        max_retries: int | None = None,
        backoff: float | None = None,
        timeout: int | None = None,
        session: requests.Session | None = None,
        accept: str = DEFAULT_ACCEPT,
        sleep: Callable[[float], None] = time.sleep,
        log_file: Path | None = None,
        log_level: str | None = None,
    ) -> None:
        self.rate_limiter = rate_limiter or RateLimiter()
        self.max_retries = Config.MAX_RETRIES if max_retries is None else max_retries
        self.backoff = Config.RETRY_BACKOFF if backoff is None else backoff
        self.timeout = timeout or Config.REQUEST_TIMEOUT
        self._session = session or self._create_session(accept)
        self._sleep = sleep
        self.logger = setup_logger(self.__class__.__name__, log_file, log_level or Config.LOG_LEVEL)

    def fetch(self, url: str) -> FetchResult:
        """GET ``url`` honouring the throttle and retry policy.

        Returns:
            FetchResult for the first non-retryable response (any status).

        Raises:
            FetchExhausted: If every attempt failed transiently.
            FetchError: On a non-retryable request failure (invalid URL,
                too many redirects, undecodable content).
        """
        attempts = self.max_retries + 1
        last_error: FetchTransient | None = None

        for attempt in range(attempts):
            self.rate_limiter.wait()
            try:
                result = self._get(url)
            except FetchTransient as exc:
                last_error = exc
            else:
                return result

            if attempt < self.max_retries:
                delay = self.backoff * (2**attempt)
                self.logger.warning(
                    "%s (attempt %d/%d), retrying in %.1fs",
                    last_error,
                    attempt + 1,
                    attempts,
                    delay,
                )
                self._sleep(delay)

        self.logger.error("Giving up on %s after %d attempts", url, attempts)
        raise FetchExhausted(
            url, last_error.status_code if last_error else None, attempts
        ) from last_error

    def _get(self, url: str) -> FetchResult:
        try:
            resp = self._session.get(url, timeout=self.timeout, allow_redirects=True)
        except (
            requests.exceptions.ConnectionError,
            requests.exceptions.Timeout,
            requests.exceptions.ChunkedEncodingError,
        ) as exc:
            raise FetchTransient(url, None, str(exc)) from exc
        except requests.exceptions.RequestException as exc:
            raise FetchError(url, f"Request failed for {url}: {exc}") from exc

        if is_retryable_status(resp.status_code):
            raise FetchTransient(url, resp.status_code)

        content_type = resp.headers.get("content-type", "")
        if "charset" not in content_type.lower() and resp.content:
            resp.encoding = resp.apparent_encoding

        return FetchResult(
            status_code=resp.status_code,
            body=resp.text,
            content_type=content_type,
            url=resp.url or url,
        )

    # -----------------------
    # Helpers
    # -----------------------

    def _create_session(self, accept: str) -> requests.Session:
        session = requests.Session()
        session.headers.update(
            {
                "User-Agent": Config.USER_AGENT,
                "Accept": accept,
                "Accept-Language": DEFAULT_ACCEPT_LANGUAGE,
            }
        )
        return session

    def close(self) -> None:
        self._session.close()
