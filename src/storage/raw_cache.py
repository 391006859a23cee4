"""
Raw markup cache.

Retrieved documents are kept exactly as fetched so a later run can re-parse
them without touching the network (``--skip-fetch``):

    data/source/{identifier}.json
"""

import json
from pathlib import Path

from src.ingestion.errors import PersistenceError
from src.ingestion.models import RawDocument
from src.shared.config import Config
from src.shared.utils import atomic_write_json


class RawMarkupCache:
    """Per-identifier store of fetched markup."""

    def __init__(self, source_dir: Path | None = None) -> None:
        self.source_dir = source_dir or Config.SOURCE_DIR

    def path_for(self, identifier: str) -> Path:
        return self.source_dir / f"{identifier}.json"

    def load(self, identifier: str) -> RawDocument | None:
        """Return the cached document, or None if absent or unreadable."""
        try:
            with open(self.path_for(identifier), encoding="utf-8") as f:
                return RawDocument.from_dict(json.load(f))
        except (OSError, json.JSONDecodeError, KeyError, TypeError):
            return None

    def save(self, document: RawDocument) -> Path:
        """
        Raises:
            PersistenceError: If the write fails.
        """
        path = self.path_for(document.identifier)
        try:
            atomic_write_json(path, document.to_dict(), indent=None)
        except OSError as e:
            raise PersistenceError(f"Could not cache raw markup {path}: {e}") from e
        return path
