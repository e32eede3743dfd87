# cfdi_wrapper/domain/cfdi_paths.py
from typing import Dict, FrozenSet, Tuple
from types import MappingProxyType

from cfdi_wrapper.domain.exceptions import UnknownPathError

# --- TABLA DE RUTAS ---
# Nombre lógico en notación de puntos -> expresión XPath con prefijos.
PATHS = MappingProxyType({
    'cfdi': '//cfdi:Comprobante',
    'cfdi.issuing': '//cfdi:Comprobante//cfdi:Emisor',
    'cfdi.issuing.address': '//cfdi:Comprobante//cfdi:Emisor//cfdi:DomicilioFiscal',
    'cfdi.issuing.issued_at': '//cfdi:Comprobante//cfdi:Emisor//cfdi:ExpedidoEn',
    'cfdi.issuing.regimen': '//cfdi:Comprobante//cfdi:Emisor//cfdi:RegimenFiscal',
    'cfdi.receiver': '//cfdi:Comprobante//cfdi:Receptor',
    'cfdi.receiver.address': '//cfdi:Comprobante//cfdi:Receptor//cfdi:Domicilio',
    'cfdi.items': '//cfdi:Comprobante//cfdi:Conceptos//cfdi:Concepto',
    'cfdi.taxes': '//cfdi:Comprobante//cfdi:Impuestos',
    'cfdi.taxes.holdbacks': '//cfdi:Comprobante//cfdi:Impuestos//cfdi:Retenciones//cfdi:Retencion',
    'cfdi.taxes.transfers': '//cfdi:Comprobante//cfdi:Impuestos//cfdi:Traslados//cfdi:Traslado',
    'cfdi.addon.taxes': '//cfdi:Comprobante//cfdi:Complemento//implocal:ImpuestosLocales',
    'cfdi.addon.taxes.holdbacks': '//cfdi:Comprobante//cfdi:Complemento//implocal:ImpuestosLocales//implocal:RetencionesLocales',
    'cfdi.addon.digital_stamp': '//tfd:TimbreFiscalDigital',
})

# --- NAMESPACES ---
REQUIRED_NAMESPACES: FrozenSet[str] = frozenset({'tfd', 'xsi', 'cfdi', 'implocal'})

# --- ATRIBUTOS DEL COMPROBANTE ---
COMPROBANTE_ATTRIBUTES: Tuple[str, ...] = (
    'version',
    'serie',
    'folio',
    'fecha',
    'subTotal',
    'total',
    'certificado',
    'noCertificado',
    'condicionesDePago',
    'descuento',
    'motivoDescuento',
    'TipoCambio',
    'Moneda',
    'metodoDePago',
    'sello',
    'tipoDeComprobante',
    'formaDePago',
    'LugarExpedicion',
    'NumCtaPago',
)

# Alias -> nombre canónico, por región.
COMPROBANTE_ALIASES = MappingProxyType({
    'subtotal': 'subTotal',
    'tipoCambio': 'TipoCambio',
    'moneda': 'Moneda',
    'lugarExpedicion': 'LugarExpedicion',
    'numCtaPago': 'NumCtaPago',
})

DIGITAL_STAMP_ALIASES = MappingProxyType({
    'UUID': 'uuid',
    'fecha': 'stamp_date',
    'fechaTimbrado': 'stamp_date',
    'selloCFD': 'cfd_signature',
    'cfd': 'cfd_signature',
    'noCertificadoSAT': 'sat_certificate_number',
    'selloSAT': 'sat_signature',
    'sat': 'sat_signature',
})

LOCAL_TAX_ALIASES = MappingProxyType({
    'totalDeRetenciones': 'total_withheld',
    'totaldeRetenciones': 'total_withheld',
    'retenciones': 'total_withheld',
    'totalDeTraslados': 'total_transferred',
    'totaldeTraslados': 'total_transferred',
    'traslados': 'total_transferred',
    'retencionesLocales': 'local_withholding',
})

ALIASES: Dict[str, MappingProxyType] = {
    'comprobante': COMPROBANTE_ALIASES,
    'timbre': DIGITAL_STAMP_ALIASES,
    'impuestosLocales': LOCAL_TAX_ALIASES,
}

LEYENDA = 'Este documento es una representación impresa de un CFDI'


def resolve_path(logical_name: str) -> str:
    """Traduce un nombre lógico ('cfdi.issuing.address') a su XPath."""
    try:
        return PATHS[logical_name]
    except KeyError:
        raise UnknownPathError(logical_name) from None


def resolve_alias(region: str, external_name: str) -> str:
    """
    Devuelve el nombre canónico de `external_name` dentro de `region`.
    Si no es un alias se devuelve tal cual; rechazarlo le toca a quien despacha.
    """
    return ALIASES[region].get(external_name, external_name)
