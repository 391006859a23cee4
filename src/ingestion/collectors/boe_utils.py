"""Shared BOE utilities for catalog enumeration.

Provides constants, date formatting, status mapping and classification used
by the census collector when turning BOE Open Data catalog items into
worklist entries.

BOE API documentation:
    https://www.boe.es/datosabiertos/documentos/APIconsolidada.pdf
"""

from typing import Any

from src.ingestion.models import (
    INGESTABLE,
    NOT_INGESTABLE,
    STATUS_AMENDED,
    STATUS_IN_FORCE,
    STATUS_REPEALED,
    CatalogItem,
    WorklistEntry,
)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

#: ``ambito.codigo`` for national (estatal) legislation; regional is ``2``.
SCOPE_ESTATAL = "1"

#: ``estado_consolidacion.codigo`` values.
CONSOLIDATION_FINISHED = "3"
CONSOLIDATION_OUTDATED = "4"

SKIP_REASON_NO_URL = "No consolidated HTML URL"
SKIP_REASON_NO_IDENTIFIER = "No BOE identifier"


# ---------------------------------------------------------------------------
# Date Parsing
# ---------------------------------------------------------------------------


def format_boe_date(boe_date: str | None) -> str:
    """Convert a BOE ``YYYYMMDD`` date to ISO ``YYYY-MM-DD``.

    Example:
        >>> format_boe_date("20181205")
        '2018-12-05'
        >>> format_boe_date(None)
        ''
    """
    if not boe_date or len(boe_date) < 8:
        return ""
    return f"{boe_date[0:4]}-{boe_date[4:6]}-{boe_date[6:8]}"


# ---------------------------------------------------------------------------
# Catalog Items
# ---------------------------------------------------------------------------


def _code_and_text(raw: dict[str, Any], key: str) -> tuple[str, str]:
    value = raw.get(key) or {}
    if isinstance(value, dict):
        return str(value.get("codigo") or ""), str(value.get("texto") or "")
    return "", str(value)


def parse_catalog_item(raw: dict[str, Any]) -> CatalogItem:
    """Build a :class:`CatalogItem` from one BOE API ``data`` element.

    Missing nested objects degrade to empty strings; dates are converted to
    ISO format.
    """
    ambito_codigo, ambito = _code_and_text(raw, "ambito")
    rango_codigo, rango = _code_and_text(raw, "rango")
    estado_codigo, estado = _code_and_text(raw, "estado_consolidacion")
    _, departamento = _code_and_text(raw, "departamento")

    return CatalogItem(
        identifier=str(raw.get("identificador") or ""),
        title=str(raw.get("titulo") or ""),
        url_html_consolidada=str(raw.get("url_html_consolidada") or ""),
        ambito_codigo=ambito_codigo,
        ambito=ambito,
        rango_codigo=rango_codigo,
        rango=rango,
        estado_consolidacion_codigo=estado_codigo,
        estado_consolidacion=estado,
        vigencia_agotada=str(raw.get("vigencia_agotada") or "N"),
        departamento=departamento,
        numero_oficial=str(raw.get("numero_oficial") or ""),
        fecha_disposicion=format_boe_date(raw.get("fecha_disposicion")),
        fecha_publicacion=format_boe_date(raw.get("fecha_publicacion")),
        fecha_vigencia=format_boe_date(raw.get("fecha_vigencia")),
        url_eli=str(raw.get("url_eli") or ""),
    )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def map_status(item: CatalogItem) -> str:
    """Map expiry flag and consolidation status to a document status.

    Expiry takes precedence over staleness.
    """
    if item.repealed:
        return STATUS_REPEALED
    if item.estado_consolidacion_codigo == CONSOLIDATION_OUTDATED:
        return STATUS_AMENDED
    return STATUS_IN_FORCE


def classify_item(item: CatalogItem) -> tuple[str, str | None]:
    """Decide whether an item can be ingested.

    Outdated consolidations are still ingestable (flagged through their
    status, not excluded).

    Returns:
        ``(classification, skip_reason)``
    """
    if not item.url_html_consolidada:
        return NOT_INGESTABLE, SKIP_REASON_NO_URL
    if not item.identifier:
        return NOT_INGESTABLE, SKIP_REASON_NO_IDENTIFIER
    return INGESTABLE, None


def build_worklist_entry(item: CatalogItem) -> WorklistEntry:
    """Classify a catalog item into a fresh (not yet ingested) worklist entry."""
    classification, skip_reason = classify_item(item)
    return WorklistEntry(
        item=item,
        status=map_status(item),
        classification=classification,
        skip_reason=skip_reason,
    )


def sort_worklist(entries: list[WorklistEntry]) -> list[WorklistEntry]:
    """Most recent disposition date first, identifier ascending as tie-break."""
    by_identifier = sorted(entries, key=lambda e: e.identifier)
    return sorted(
        by_identifier,
        key=lambda e: e.item.fecha_disposicion or "0000-00-00",
        reverse=True,
    )
