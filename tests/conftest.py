"""
Fixtures compartidas para los tests.

Proporciona:
- Rutas a los CFDI de ejemplo en tests/resources
- Una instancia de Cfdi cargada con el CFDI de ejemplo
- Un renderizador de QR falso para no depender de la imagen real
"""
from pathlib import Path
from typing import List, Tuple

import pytest

from cfdi_wrapper.application.cfdi import Cfdi
from cfdi_wrapper.domain.ports.qr_renderer import QrRenderer

RESOURCES = Path(__file__).parent / "resources"


class FakeQrRenderer(QrRenderer):
    """Devuelve bytes predecibles y registra cada llamada."""

    def __init__(self):
        self.calls: List[Tuple[str, int, int]] = []

    def encode(self, payload: str, width: int, height: int) -> bytes:
        self.calls.append((payload, width, height))
        return f"{payload}@{width}x{height}".encode("utf-8")


# ==================== FIXTURES GLOBALES ====================

@pytest.fixture
def resources() -> Path:
    return RESOURCES


@pytest.fixture
def sample_xml() -> str:
    return (RESOURCES / "sample-cfdi.xml").read_text(encoding="utf-8")


@pytest.fixture
def sample_xml_2() -> str:
    return (RESOURCES / "sample-cfdi-2.xml").read_text(encoding="utf-8")


@pytest.fixture
def invalid_xml() -> str:
    return (RESOURCES / "sample-cfdi-invalid.xml").read_text(encoding="utf-8")


@pytest.fixture
def qr_renderer() -> FakeQrRenderer:
    return FakeQrRenderer()


@pytest.fixture
def cfdi(sample_xml, qr_renderer) -> Cfdi:
    """CFDI de ejemplo con dos conceptos, IVA trasladado e impuestos locales."""
    return Cfdi(sample_xml, qr_renderer=qr_renderer)
