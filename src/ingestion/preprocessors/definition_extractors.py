"""Definition extraction for definitions articles.

Spanish legal drafting has used several styles for definition lists over the
decades. Each style is modelled as an independent extractor:

    a) Término: definición.          (lettered)
    «Término»: definición.           (quoted, also "..." and “...”)
    1. Término: definición.          (numbered)

Extractors run in that order over the stripped body text of one provision.
Every candidate goes through the same length guards and the same dedup
rule: a (term, source provision) pair that was already accepted
(case-insensitive term, by any extractor) is dropped. Callers pass one
``seen`` set per document so repeated article numbers do not duplicate pairs.
"""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from src.ingestion.models import Definition

# ---------------------------------------------------------------------------
# Triggers
# ---------------------------------------------------------------------------

TITLE_KEYWORDS = ("definicion", "definición", "conceptos")
BODY_KEYWORDS = ("a los efectos de", "se entenderá por")

# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------

MIN_TERM_CHARS = 2
MAX_TERM_CHARS = 99
MIN_DEFINITION_CHARS = 10


def is_definition_provision(title: str, content: str) -> bool:
    """Whether a provision looks like a definitions article.

    Example:
        >>> is_definition_provision("Definiciones", "")
        True
        >>> is_definition_provision("Objeto", "A los efectos de esta ley se entenderá por:")
        True
    """
    title_lower = title.lower()
    content_lower = content.lower()
    return any(k in title_lower for k in TITLE_KEYWORDS) or any(
        k in content_lower for k in BODY_KEYWORDS
    )


def is_plausible(term: str, definition: str) -> bool:
    """Reject mis-segmented matches (empty or oversized terms, stub definitions)."""
    return (
        MIN_TERM_CHARS <= len(term) <= MAX_TERM_CHARS
        and len(definition) >= MIN_DEFINITION_CHARS
    )


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DefinitionExtractor:
    """One drafting style: a regex whose groups are (term, definition)."""

    name: str
    pattern: re.Pattern[str]

    def candidates(self, text: str) -> Iterator[tuple[str, str]]:
        for match in self.pattern.finditer(text):
            yield match.group(1).strip(), match.group(2).strip()


LETTERED = DefinitionExtractor(
    "lettered",
    re.compile(r"[a-zñ]\)\s*([^:]+):\s*([^.]+(?:\.[^a-zñ)]+)*\.)", re.IGNORECASE),
)

QUOTED = DefinitionExtractor(
    "quoted",
    re.compile(r"[«\"“]([^»\"”]+)[»\"”]:\s*([^.]+(?:\.[^«\"“]+)*\.)"),
)

NUMBERED = DefinitionExtractor(
    "numbered",
    re.compile(r"\d+\.\s*([^:]+):\s*([^.]+(?:\.[^0-9]+)*\.)"),
)

DEFAULT_EXTRACTORS: tuple[DefinitionExtractor, ...] = (LETTERED, QUOTED, NUMBERED)


def extract_definitions(
    text: str,
    source_provision: str | None = None,
    extractors: Iterable[DefinitionExtractor] = DEFAULT_EXTRACTORS,
    seen: set[tuple[str, str | None]] | None = None,
) -> list[Definition]:
    """Run the extractors in order and merge their accepted candidates.

    Args:
        text: Stripped provision body.
        source_provision: Reference key of the provision, copied onto every
            definition.
        extractors: Ordered extractors; earlier ones win on duplicate terms.
        seen: Accepted (lower-cased term, source provision) pairs, updated in
            place. Share one set across a document.

    Returns:
        Definitions in discovery order, unique by case-insensitive term and
        source provision.

    Example:
        >>> [d.term for d in extract_definitions("a) Dato: cualquier información.")]
        ['Dato']
    """
    seen = set() if seen is None else seen
    definitions: list[Definition] = []

    for extractor in extractors:
        for term, definition in extractor.candidates(text):
            if not is_plausible(term, definition):
                continue
            key = (term.lower(), source_provision)
            if key in seen:
                continue
            seen.add(key)
            definitions.append(Definition(term, definition, source_provision))

    return definitions
