"""Shared utilities and configuration."""

from src.shared.config import Config
from src.shared.utils import atomic_write_json, madrid_today_iso, setup_logger, to_madrid, utc_now_iso

__all__ = [
    "Config",
    "setup_logger",
    "to_madrid",
    "utc_now_iso",
    "madrid_today_iso",
    "atomic_write_json",
]
