"""Configuration management for the Spanish legislation ingestion pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _path_from_env(name: str, default: Path) -> Path:
    value = os.getenv(name)
    return Path(value) if value else default


class Config:
    """Application configuration."""

    # Project paths
    ROOT_DIR = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = _path_from_env("DATA_DIR", ROOT_DIR / "data")
    LOGS_DIR: Path = _path_from_env("LOGS_DIR", ROOT_DIR / "logs")

    # Pipeline artefacts
    CENSUS_PATH: Path = _path_from_env("CENSUS_PATH", DATA_DIR / "census.json")
    SEED_DIR: Path = _path_from_env("SEED_DIR", DATA_DIR / "seed")
    SOURCE_DIR: Path = _path_from_env("SOURCE_DIR", DATA_DIR / "source")

    # BOE endpoints
    BOE_API_BASE: str = os.getenv(
        "BOE_API_BASE", "https://boe.es/datosabiertos/api/legislacion-consolidada"
    )
    USER_AGENT: str = os.getenv(
        "BOE_USER_AGENT",
        "Spanish-Law-Ingest/1.0 (consolidated legislation corpus builder; polite crawler)",
    )

    # Politeness and retry settings
    REQUEST_DELAY: float = float(os.getenv("REQUEST_DELAY", "0.5"))
    REQUEST_TIMEOUT: int = int(os.getenv("REQUEST_TIMEOUT", "60"))
    MAX_RETRIES: int = int(os.getenv("MAX_RETRIES", "3"))
    RETRY_BACKOFF: float = float(os.getenv("RETRY_BACKOFF", "2.0"))

    # Census and ingestion settings
    CENSUS_PAGE_SIZE: int = int(os.getenv("CENSUS_PAGE_SIZE", "10000"))
    INGEST_BATCH_SIZE: int = int(os.getenv("INGEST_BATCH_SIZE", "25"))
    MAX_REPORTED_FAILURES: int = int(os.getenv("MAX_REPORTED_FAILURES", "20"))

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def validate(cls) -> None:
        """Validate numeric settings."""
        if cls.REQUEST_DELAY <= 0:
            raise ValueError("REQUEST_DELAY must be positive")
        if cls.REQUEST_TIMEOUT <= 0:
            raise ValueError("REQUEST_TIMEOUT must be positive")
        if cls.MAX_RETRIES < 0:
            raise ValueError("MAX_RETRIES must not be negative")
        if cls.RETRY_BACKOFF <= 0:
            raise ValueError("RETRY_BACKOFF must be positive")
        if cls.CENSUS_PAGE_SIZE <= 0:
            raise ValueError("CENSUS_PAGE_SIZE must be positive")
        if cls.INGEST_BATCH_SIZE <= 0:
            raise ValueError("INGEST_BATCH_SIZE must be positive")


config = Config()
