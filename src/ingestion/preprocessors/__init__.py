"""Preprocessors turning raw BOE markup into normalized documents."""

from src.ingestion.preprocessors.boe_html_parser import parse_boe_html
from src.ingestion.preprocessors.definition_extractors import (
    DEFAULT_EXTRACTORS,
    DefinitionExtractor,
    extract_definitions,
)

__all__ = [
    "DEFAULT_EXTRACTORS",
    "DefinitionExtractor",
    "extract_definitions",
    "parse_boe_html",
]
