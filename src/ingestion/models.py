"""Data model shared by the census, parser, storage and pipeline layers.

Catalog-derived fields keep the BOE Open Data field names (``rango``,
``ambito``, ``fecha_disposicion``...) so the census document mirrors the
source catalog. Pipeline-owned fields use plain English names.
"""

from dataclasses import asdict, dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

INGESTABLE = "ingestable"
NOT_INGESTABLE = "not_ingestable"
SKIP = "skip"
CLASSIFICATIONS: tuple[str, ...] = (INGESTABLE, NOT_INGESTABLE, SKIP)

STATUS_IN_FORCE = "in_force"
STATUS_AMENDED = "amended"
STATUS_REPEALED = "repealed"
STATUS_NOT_YET_IN_FORCE = "not_yet_in_force"

#: Hard cap on stored provision text.
MAX_PROVISION_CHARS = 12000


# ---------------------------------------------------------------------------
# Census
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CatalogItem:
    """Immutable descriptor of one consolidated norm in the BOE catalog."""

    identifier: str
    title: str
    url_html_consolidada: str
    ambito_codigo: str
    ambito: str
    rango_codigo: str
    rango: str
    estado_consolidacion_codigo: str
    estado_consolidacion: str
    vigencia_agotada: str  # "S" = expired/repealed, "N" = in force
    departamento: str = ""
    numero_oficial: str = ""
    fecha_disposicion: str = ""
    fecha_publicacion: str = ""
    fecha_vigencia: str = ""
    url_eli: str = ""

    @property
    def repealed(self) -> bool:
        return self.vigencia_agotada == "S"


@dataclass
class WorklistEntry:
    """A catalog item plus the fields the ingestion pipeline mutates.

    ``classification`` is assigned once at census time. ``ingested``,
    ``provision_count`` and ``ingestion_date`` change as items are ingested;
    an ingested entry always carries an ingestion date.
    """

    item: CatalogItem
    status: str
    classification: str
    skip_reason: str | None = None
    ingested: bool = False
    provision_count: int = 0
    ingestion_date: str | None = None

    def __post_init__(self) -> None:
        if self.classification not in CLASSIFICATIONS:
            raise ValueError(f"Unknown classification '{self.classification}'")
        if self.provision_count < 0:
            raise ValueError("provision_count must be >= 0")
        if self.ingested and not self.ingestion_date:
            raise ValueError(f"Entry {self.item.identifier} is ingested but has no ingestion_date")

    @property
    def identifier(self) -> str:
        return self.item.identifier

    @property
    def url(self) -> str:
        return self.item.url_html_consolidada

    @property
    def short_name(self) -> str:
        """Citation-style short name, e.g. ``Ley Orgánica 3/2018``."""
        if self.item.numero_oficial and self.item.rango:
            return f"{self.item.rango} {self.item.numero_oficial}"
        return self.item.identifier

    def mark_ingested(self, provision_count: int, ingestion_date: str) -> None:
        if not ingestion_date:
            raise ValueError("ingestion_date is required when marking an entry ingested")
        if provision_count < 0:
            raise ValueError("provision_count must be >= 0")
        self.ingested = True
        self.provision_count = provision_count
        self.ingestion_date = ingestion_date

    def to_act_metadata(self) -> "ActMetadata":
        return ActMetadata(
            identifier=self.identifier,
            title=self.item.title,
            short_name=self.short_name,
            status=self.status,
            issued_date=self.item.fecha_disposicion,
            in_force_date=self.item.fecha_vigencia,
            url=self.url,
        )

    def to_dict(self) -> dict[str, Any]:
        item = self.item
        return {
            "id": item.identifier,
            "title": item.title,
            "identifier": item.identifier,
            "url": item.url_html_consolidada,
            "status": self.status,
            "category": item.rango,
            "classification": self.classification,
            "skip_reason": self.skip_reason,
            "ingested": self.ingested,
            "provision_count": self.provision_count,
            "ingestion_date": self.ingestion_date,
            "rango_codigo": item.rango_codigo,
            "rango": item.rango,
            "ambito_codigo": item.ambito_codigo,
            "ambito": item.ambito,
            "departamento": item.departamento,
            "numero_oficial": item.numero_oficial,
            "fecha_disposicion": item.fecha_disposicion,
            "fecha_publicacion": item.fecha_publicacion,
            "fecha_vigencia": item.fecha_vigencia,
            "vigencia_agotada": item.vigencia_agotada,
            "estado_consolidacion_codigo": item.estado_consolidacion_codigo,
            "estado_consolidacion": item.estado_consolidacion,
            "url_eli": item.url_eli,
            "url_html_consolidada": item.url_html_consolidada,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorklistEntry":
        item = CatalogItem(
            identifier=data.get("identifier") or data.get("id") or "",
            title=data.get("title", ""),
            url_html_consolidada=data.get("url_html_consolidada") or data.get("url") or "",
            ambito_codigo=data.get("ambito_codigo", ""),
            ambito=data.get("ambito", ""),
            rango_codigo=data.get("rango_codigo", ""),
            rango=data.get("rango", ""),
            estado_consolidacion_codigo=data.get("estado_consolidacion_codigo", ""),
            estado_consolidacion=data.get("estado_consolidacion", ""),
            vigencia_agotada=data.get("vigencia_agotada", "N"),
            departamento=data.get("departamento", ""),
            numero_oficial=data.get("numero_oficial", ""),
            fecha_disposicion=data.get("fecha_disposicion", ""),
            fecha_publicacion=data.get("fecha_publicacion", ""),
            fecha_vigencia=data.get("fecha_vigencia", ""),
            url_eli=data.get("url_eli", ""),
        )
        return cls(
            item=item,
            status=data.get("status", STATUS_IN_FORCE),
            classification=data.get("classification", INGESTABLE),
            skip_reason=data.get("skip_reason"),
            ingested=bool(data.get("ingested", False)),
            provision_count=int(data.get("provision_count", 0)),
            ingestion_date=data.get("ingestion_date"),
        )


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ActMetadata:
    """Item metadata the parser copies onto the normalized document."""

    identifier: str
    title: str
    short_name: str
    status: str
    issued_date: str
    in_force_date: str
    url: str
    description: str | None = None


@dataclass(frozen=True)
class RawDocument:
    """Unparsed markup for one item, as retrieved."""

    identifier: str
    url: str
    markup: str
    retrieved_at: str
    final_url: str = ""
    content_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RawDocument":
        return cls(
            identifier=data["identifier"],
            url=data["url"],
            markup=data["markup"],
            retrieved_at=data.get("retrieved_at", ""),
            final_url=data.get("final_url", ""),
            content_type=data.get("content_type", ""),
        )


@dataclass(frozen=True)
class Provision:
    """One article: stable reference key, optional chapter, heading and body."""

    provision_ref: str
    section: str
    title: str
    content: str
    chapter: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"provision_ref": self.provision_ref}
        if self.chapter:
            data["chapter"] = self.chapter
        data.update(section=self.section, title=self.title, content=self.content)
        return data


@dataclass(frozen=True)
class Definition:
    term: str
    definition: str
    source_provision: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"term": self.term, "definition": self.definition}
        if self.source_provision:
            data["source_provision"] = self.source_provision
        return data


@dataclass(frozen=True)
class NormalizedDocument:
    """Seed record for one norm, consumed by the database builder."""

    id: str
    title: str
    short_name: str
    status: str
    issued_date: str
    in_force_date: str
    url: str
    provisions: tuple[Provision, ...] = field(default_factory=tuple)
    definitions: tuple[Definition, ...] = field(default_factory=tuple)
    description: str | None = None
    type: str = "statute"
    title_en: str = ""

    @classmethod
    def fallback(cls, act: ActMetadata) -> "NormalizedDocument":
        """Metadata-only record used when the text could not be fetched or parsed."""
        return cls(
            id=act.identifier,
            title=act.title,
            short_name=act.short_name,
            status=act.status,
            issued_date=act.issued_date,
            in_force_date=act.in_force_date,
            url=act.url,
            description=act.description,
        )

    def to_dict(self, ingestion_date: str | None = None) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.type,
            "title": self.title,
            "title_en": self.title_en,
            "short_name": self.short_name,
            "status": self.status,
            "issued_date": self.issued_date,
            "in_force_date": self.in_force_date,
            "url": self.url,
        }
        if self.description:
            data["description"] = self.description
        data["provisions"] = [p.to_dict() for p in self.provisions]
        data["definitions"] = [d.to_dict() for d in self.definitions]
        if ingestion_date:
            data["ingestion_date"] = ingestion_date
        return data
