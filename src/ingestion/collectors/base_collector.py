"""Abstract base class for BOE Open Data collectors.

Collectors own the network side of a run: they enumerate or retrieve
documents and hand structured results to the storage layer. Parsing of
consolidated text is handled by preprocessors.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from src.shared.config import Config
from src.shared.utils import atomic_write_json, setup_logger


class BaseCollector(ABC):
    """Base class for all collectors.

    Subclasses must define:
        SOURCE_NAME (str): identifier used in file naming (e.g. "boe_census").

    Subclasses must implement:
        collect(): fetch the source's documents.
        health_check(): verify the source is reachable.

    The export_json() method writes a collector report atomically.
    """

    SOURCE_NAME: str  # e.g. "boe_census"

    def __init__(
        self, output_dir: Path, log_file: Path | None = None, log_level: str | None = None
    ) -> None:
        """Initialize the collector.

        Args:
            output_dir: Directory for exported artefacts (created if missing).
            log_file: Optional path for file-based logging.
            log_level: Logger level (defaults to ``Config.LOG_LEVEL``).
        """
        self.output_dir = output_dir
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.logger = setup_logger(self.__class__.__name__, log_file, log_level or Config.LOG_LEVEL)

    @abstractmethod
    def collect(self, *args: Any, **kwargs: Any) -> Any:
        """Collect everything the source offers."""
        ...

    @abstractmethod
    def health_check(self) -> bool:
        """Verify the data source is reachable and responding.

        Returns:
            True if the source is available, False otherwise.
        """
        ...

    def export_json(self, payload: Any, name: str) -> Path:
        """Export a JSON document as {output_dir}/{SOURCE_NAME}_{name}.json.

        Raises:
            ValueError: If the payload cannot be serialized.
        """
        try:
            json.dumps(payload)
        except TypeError as e:
            raise ValueError(f"Cannot export '{name}': {e}") from e

        path = self.output_dir / f"{self.SOURCE_NAME}_{name}.json"
        atomic_write_json(path, payload)
        self.logger.info("Exported %s to %s", name, path)
        return path
