"""Data ingestion module - collectors, preprocessors, models and errors."""

from src.ingestion.errors import (
    CensusError,
    FetchError,
    FetchExhausted,
    FetchOther,
    FetchTransient,
    IngestionError,
    PersistenceError,
)

__all__ = [
    "CensusError",
    "FetchError",
    "FetchExhausted",
    "FetchOther",
    "FetchTransient",
    "IngestionError",
    "PersistenceError",
]
