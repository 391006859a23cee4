"""Structural parser for BOE consolidated legislation HTML.

Turns the consolidated text served by boe.es into a normalized document.
The usual BOE layout is:

- ``<div class="articulo">`` for each article
- ``<h5>`` (sometimes ``<h4>``) inside it with the number and title, e.g.
  ``Artículo 1. Objeto de la ley`` or ``<a>Artículo 1.</a> Objeto``
- ``<p>`` elements with the article body
- ``<div class="titulo">`` / ``<div class="capitulo">`` (or ``<p>`` with
  those classes) for the enclosing structural headings

Older or alternate layouts without article containers are handled by a
fallback that scans for article headings directly.

The parser is a pure function: no I/O, no clock, and it never raises on
malformed markup. Missing structure yields fewer provisions.

Example:
    >>> doc = parse_boe_html(markup, act)
    >>> [p.provision_ref for p in doc.provisions]
    ['art1', 'art2', 'art2bis']
"""

import re

from bs4 import BeautifulSoup

from src.ingestion.models import (
    MAX_PROVISION_CHARS,
    ActMetadata,
    Definition,
    NormalizedDocument,
    Provision,
)
from src.ingestion.preprocessors.definition_extractors import (
    extract_definitions,
    is_definition_provision,
)

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

ORDINAL_MODIFIERS = ("bis", "ter", "quater", "quinquies", "sexies", "septies", "octies", "nonies")

_ORDINAL = r"\d+[a-zA-Z]*(?:\s+(?:" + "|".join(ORDINAL_MODIFIERS) + r")\b)?"

#: "Artículo 3", "Artículo 3 bis", "Articulo 12a"
ARTICLE_ORDINAL = re.compile(r"Art[ií]culo\s+(" + _ORDINAL + ")", re.IGNORECASE)

ARTICLE_CONTAINER = re.compile(r"<div[^>]*\bclass=\"articulo\"[^>]*>", re.IGNORECASE)
CONTAINER_ID = re.compile(r"\bid=\"([^\"]*)\"", re.IGNORECASE)
CONTAINER_HEADING = re.compile(r"<h[45][^>]*>(.*?)</h[45]>", re.IGNORECASE | re.DOTALL)
ID_ORDINAL = re.compile(r"a(?:rt[ií]culo)?[-_]?(\d+[a-zA-Z]*)", re.IGNORECASE)

FALLBACK_HEADING = re.compile(
    r"<(?:h[3-6]|p)[^>]*>\s*(?:<[^>]+>)*\s*Art[ií]culo\s+("
    + _ORDINAL
    + r")\b[.\s]*(.*?)</(?:h[3-6]|p)>",
    re.IGNORECASE | re.DOTALL,
)

CHAPTER_PATTERNS = (
    re.compile(
        r"<(?:p|h[34])[^>]*class=\"(?:titulo|capitulo)[^\"]*\"[^>]*>(.*?)</(?:p|h[34])>",
        re.IGNORECASE | re.DOTALL,
    ),
    re.compile(r"<div[^>]*class=\"(?:titulo|capitulo)\"[^>]*>(.*?)</div>", re.IGNORECASE | re.DOTALL),
)

#: Characters scanned backwards from an article for its chapter heading.
CHAPTER_WINDOW = 10000

MIN_CONTENT_CHARS = 5
PROVISION_REF_PREFIX = "art"

_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def strip_html(markup: str) -> str:
    """Drop tags, scripts and styles, decode entities, collapse whitespace.

    Example:
        >>> strip_html("<p>Ley&nbsp;Org&aacute;nica</p>\\n<p>3/2018</p>")
        'Ley Orgánica 3/2018'
    """
    if "<" not in markup and "&" not in markup:
        return _WHITESPACE.sub(" ", markup).strip()

    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return _WHITESPACE.sub(" ", soup.get_text(" ")).strip()


def normalize_ordinal(ordinal: str) -> str:
    """Lower-case an article ordinal and drop internal whitespace ("3 Bis" -> "3bis")."""
    return _WHITESPACE.sub("", ordinal).lower()


def derive_provision_ref(ordinal: str) -> str:
    """Stable reference key for an article ordinal.

    Example:
        >>> derive_provision_ref("3 bis")
        'art3bis'
    """
    return PROVISION_REF_PREFIX + normalize_ordinal(ordinal)


def find_chapter_heading(markup: str, position: int, window: int = CHAPTER_WINDOW) -> str | None:
    """Most recent título/capítulo heading within ``window`` chars before ``position``.

    Heading families are tried in order; the first family with any plausible
    heading wins and its last match is used. Long chapters can push the real
    heading out of the window, in which case None (or an older heading) is
    returned.
    """
    before = markup[max(0, position - window) : position]

    for pattern in CHAPTER_PATTERNS:
        last = None
        for match in pattern.finditer(before):
            text = strip_html(match.group(1))
            if 3 < len(text) < 300:
                last = text
        if last:
            return last
    return None


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def _build_provision(
    markup: str,
    position: int,
    ordinal: str,
    title: str,
    body_markup: str,
    definitions: list[Definition],
    seen: set[tuple[str, str | None]],
) -> Provision | None:
    body = strip_html(body_markup)
    if len(body) < MIN_CONTENT_CHARS:
        return None

    section = normalize_ordinal(ordinal)
    provision_ref = PROVISION_REF_PREFIX + section

    if is_definition_provision(title, body):
        definitions.extend(extract_definitions(body, provision_ref, seen=seen))

    return Provision(
        provision_ref=provision_ref,
        section=section,
        title=title,
        content=body[:MAX_PROVISION_CHARS],
        chapter=find_chapter_heading(markup, position),
    )


def _parse_containers(
    markup: str,
    starts: list[re.Match[str]],
    definitions: list[Definition],
    seen: set[tuple[str, str | None]],
) -> list[Provision]:
    provisions: list[Provision] = []

    for i, start in enumerate(starts):
        pos = start.start()
        if i + 1 < len(starts):
            end = starts[i + 1].start()
        else:
            end = markup.find("</body>", pos)
            if end <= pos:
                end = len(markup)
        block = markup[pos:end]

        ordinal = ""
        title = ""
        body_markup = block
        heading = CONTAINER_HEADING.search(block)
        if heading:
            heading_text = strip_html(heading.group(1))
            match = ARTICLE_ORDINAL.search(heading_text)
            if match:
                ordinal = match.group(1)
                title = re.sub(r"^[.\s]+", "", heading_text[match.end() :]).strip()
            body_markup = block[heading.end() :]

        if not ordinal:
            id_attr = CONTAINER_ID.search(start.group(0))
            id_match = ID_ORDINAL.search(id_attr.group(1)) if id_attr else None
            if id_match:
                ordinal = id_match.group(1)

        if not ordinal:
            continue

        provision = _build_provision(markup, pos, ordinal, title, body_markup, definitions, seen)
        if provision:
            provisions.append(provision)

    return provisions


def _parse_headings(
    markup: str, definitions: list[Definition], seen: set[tuple[str, str | None]]
) -> list[Provision]:
    provisions: list[Provision] = []
    matches = list(FALLBACK_HEADING.finditer(markup))

    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(markup)
        provision = _build_provision(
            markup,
            match.start(),
            match.group(1),
            strip_html(match.group(2)),
            markup[match.end() : end],
            definitions,
            seen,
        )
        if provision:
            provisions.append(provision)

    return provisions


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def parse_boe_html(markup: str, act: ActMetadata) -> NormalizedDocument:
    """Parse consolidated HTML into a normalized document.

    Args:
        markup: Raw HTML as fetched.
        act: Item metadata copied onto the document.

    Returns:
        NormalizedDocument with provisions in document order. A document
        with no recognisable articles has no provisions.
    """
    definitions: list[Definition] = []
    seen: set[tuple[str, str | None]] = set()

    starts = list(ARTICLE_CONTAINER.finditer(markup))
    if starts:
        provisions = _parse_containers(markup, starts, definitions, seen)
    else:
        provisions = _parse_headings(markup, definitions, seen)

    return NormalizedDocument(
        id=act.identifier,
        title=act.title,
        short_name=act.short_name,
        status=act.status,
        issued_date=act.issued_date,
        in_force_date=act.in_force_date,
        url=act.url,
        provisions=tuple(provisions),
        definitions=tuple(definitions),
        description=act.description,
    )
