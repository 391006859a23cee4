"""Tests for configuration module."""
import os
from pathlib import Path

import pytest

from src.shared.config import Config


def test_config_paths_exist():
    """Test that config paths are properly initialized."""
    assert isinstance(Config.ROOT_DIR, Path)
    assert isinstance(Config.DATA_DIR, Path)
    assert isinstance(Config.LOGS_DIR, Path)
    assert isinstance(Config.CENSUS_PATH, Path)
    assert isinstance(Config.SEED_DIR, Path)


def test_config_default_values():
    """Test default configuration values."""
    assert Config.REQUEST_DELAY == float(os.getenv("REQUEST_DELAY", "0.5"))
    assert Config.REQUEST_TIMEOUT == int(os.getenv("REQUEST_TIMEOUT", "60"))
    assert Config.MAX_RETRIES == int(os.getenv("MAX_RETRIES", "3"))
    assert Config.CENSUS_PAGE_SIZE == int(os.getenv("CENSUS_PAGE_SIZE", "10000"))
    assert Config.BOE_API_BASE.startswith("https://")


def test_config_validation_passes_with_defaults():
    Config.validate()


@pytest.mark.parametrize(
    "name, value, message",
    [
        ("REQUEST_DELAY", 0, "REQUEST_DELAY must be positive"),
        ("MAX_RETRIES", -1, "MAX_RETRIES must not be negative"),
        ("CENSUS_PAGE_SIZE", 0, "CENSUS_PAGE_SIZE must be positive"),
        ("INGEST_BATCH_SIZE", 0, "INGEST_BATCH_SIZE must be positive"),
    ],
)
def test_config_validation_rejects_bad_values(monkeypatch, name, value, message):
    """Test configuration validation fails for out-of-range settings."""
    monkeypatch.setattr(Config, name, value)

    with pytest.raises(ValueError, match=message):
        Config.validate()
