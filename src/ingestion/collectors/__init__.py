"""Collectors package."""

from src.ingestion.collectors.base_collector import BaseCollector
from src.ingestion.collectors.census_collector import BOECensusCollector
from src.ingestion.collectors.rate_limited_fetcher import (
    FetchResult,
    RateLimitedFetcher,
    RateLimiter,
)

__all__ = [
    "BaseCollector",
    "BOECensusCollector",
    "FetchResult",
    "RateLimitedFetcher",
    "RateLimiter",
]
