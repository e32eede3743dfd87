# cfdi_wrapper/infrastructure/xml/namespace_validator.py
import logging
from typing import FrozenSet

from cfdi_wrapper.domain.cfdi_paths import REQUIRED_NAMESPACES
from cfdi_wrapper.domain.exceptions import MalformedCfdiError

logger = logging.getLogger(__name__)


def missing_namespaces(document) -> FrozenSet[str]:
    """Prefijos requeridos que el documento no declara."""
    return frozenset(REQUIRED_NAMESPACES - document.prefixes)


def is_valid(document, throw_exception: bool = False) -> bool:
    """
    Revisa que el documento declare los prefijos tfd, xsi, cfdi e implocal.
    Solo mira las declaraciones: no garantiza que cada ruta exista.
    """
    missing = missing_namespaces(document)
    if not missing:
        return True

    logger.warning(f"CFDI sin los namespaces requeridos: {sorted(missing)}")
    if throw_exception:
        raise MalformedCfdiError(missing)
    return False
