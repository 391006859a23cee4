"""
Root pytest configuration.

Shared fixtures: sample BOE consolidated HTML, item metadata and BOE Open
Data catalog items. No test touches the network.
"""

import json

import pytest

from src.ingestion.models import ActMetadata


def _catalog_item(identifier: str, **overrides) -> dict:
    """One element of the catalog API ``data`` array."""
    item = {
        "identificador": identifier,
        "titulo": f"Ley de prueba {identifier}",
        "url_html_consolidada": f"https://www.boe.es/buscar/act.php?id={identifier}",
        "ambito": {"codigo": "1", "texto": "Estatal"},
        "rango": {"codigo": "1300", "texto": "Ley"},
        "departamento": {"codigo": "7723", "texto": "Jefatura del Estado"},
        "estado_consolidacion": {"codigo": "3", "texto": "Finalizado"},
        "vigencia_agotada": "N",
        "numero_oficial": "1/2020",
        "fecha_disposicion": "20200101",
        "fecha_publicacion": "20200102",
        "fecha_vigencia": "20200103",
        "url_eli": f"https://www.boe.es/eli/es/l/{identifier}",
    }
    item.update(overrides)
    return item


def _catalog_page(items: list[dict]) -> str:
    return json.dumps({"status": {"code": "200", "text": "ok"}, "data": items})


SAMPLE_HTML = """<html><body>
<div class="titulo"><p class="titulo_num">TÍTULO I</p></div>
<p class="capitulo_num">CAPÍTULO I. Disposiciones generales</p>
<div class="articulo" id="a1"><h5 class="articulo">Artículo 1. Objeto</h5>
<p>Esta ley tiene por objeto regular la protección de datos personales.</p></div>
<div class="articulo" id="a2"><h5 class="articulo">Artículo 2. Definiciones</h5>
<p>A los efectos de esta ley se entenderá por:</p>
<p>a) Dato personal: toda información sobre una persona física identificada.</p>
<p>b) Tratamiento: cualquier operación realizada sobre datos personales.</p></div>
<div class="articulo" id="a2bis"><h5 class="articulo">Artículo 2 bis. Ámbito</h5>
<p>La presente ley se aplica en todo el territorio nacional.</p></div>
</body></html>
"""


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_HTML


@pytest.fixture
def act() -> ActMetadata:
    return ActMetadata(
        identifier="BOE-A-2018-16673",
        title="Ley Orgánica 3/2018, de Protección de Datos Personales",
        short_name="Ley Orgánica 3/2018",
        status="in_force",
        issued_date="2018-12-05",
        in_force_date="2018-12-07",
        url="https://www.boe.es/buscar/act.php?id=BOE-A-2018-16673",
    )


@pytest.fixture
def catalog_item():
    """Factory for catalog API items: ``catalog_item("BOE-A-2020-1", vigencia_agotada="S")``."""
    return _catalog_item


@pytest.fixture
def catalog_page():
    """Factory for a successful catalog API response body."""
    return _catalog_page
