# cfdi_wrapper/application/cfdi.py
import base64
import logging
import os
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Union

import config
from cfdi_wrapper.application import materializers
from cfdi_wrapper.application.attribute_resolver import AttributeResolver
from cfdi_wrapper.domain.cfdi_paths import (
    COMPROBANTE_ALIASES,
    COMPROBANTE_ATTRIBUTES,
    LEYENDA,
    REQUIRED_NAMESPACES,
)
from cfdi_wrapper.domain.exceptions import (
    FieldNotFoundError,
    FileAlreadyExistsError,
    MalformedCfdiError,
    UndefinedAttributeError,
    UnsupportedTaxError,
)
from cfdi_wrapper.domain.models.cfdi import (
    Address,
    DigitalStamp,
    Issuer,
    LineItem,
    LocalTaxAddon,
    Receiver,
    TaxSummary,
    TransferredTax,
)
from cfdi_wrapper.domain.ports.qr_renderer import QrRenderer
from cfdi_wrapper.infrastructure.external.qrcode_adapter import QrcodeRenderer
from cfdi_wrapper.infrastructure.xml import namespace_validator
from cfdi_wrapper.infrastructure.xml.document_loader import (
    CfdiDocument,
    load_document,
    load_document_from_file,
)

logger = logging.getLogger(__name__)

PathOrContent = Union[str, bytes, os.PathLike]


class Cfdi:
    """
    Envoltorio de solo lectura sobre un CFDI 3.2.

    Los atributos del Comprobante y sus alias se leen como `cfdi.total` o
    `cfdi.get('subtotal')`; los nodos anidados (emisor, receptor, conceptos,
    impuestos, impuestosLocales, timbre) se devuelven como modelos de dominio.
    Cada lectura consulta el documento vigente, nada se guarda en caché.

    `path_or_content` puede ser una ruta o el contenido del XML. Un `str` que
    no empieza con "<" solo se lee como archivo si existe; de lo contrario se
    parsea como XML, así que `Cfdi("no-existe.xml")` lanza MalformedXmlError.
    Solo un `os.PathLike` inexistente lanza FileNotFoundError.
    """

    def __init__(self, path_or_content: Optional[PathOrContent] = None, qr_renderer: Optional[QrRenderer] = None):
        self._document: Optional[CfdiDocument] = None
        self.qr_renderer = qr_renderer or QrcodeRenderer()
        self._fields = self._build_dispatch_table()

        if path_or_content is None:
            return
        if _is_existing_file(path_or_content):
            self.load_from_file(path_or_content)
        else:
            self.load(path_or_content)

    def _build_dispatch_table(self) -> Dict[str, Callable[[], Any]]:
        fields: Dict[str, Callable[[], Any]] = {
            name: partial(self.get_attribute, name)
            for name in (*COMPROBANTE_ATTRIBUTES, *COMPROBANTE_ALIASES)
        }
        fields.update({
            'emisor': self.get_issuer,
            'receptor': self.get_receiver,
            'conceptos': self.get_line_items,
            'impuestos': self.get_tax_summary,
            'impuestosLocales': self.get_local_tax_addon,
            'timbre': self.get_digital_stamp,
            'timbreFiscalDigital': self.get_digital_stamp,
            'cadenaOriginal': self.get_cadena_original,
            'leyenda': lambda: LEYENDA,
            'iva': partial(self.get_transferred_tax, 'IVA'),
        })
        return fields

    # --- CARGA Y VALIDACIÓN ---

    def load(self, xml_content: Union[str, bytes], throw_exception: bool = True) -> bool:
        """
        Reemplaza el CFDI cargado por `xml_content`.
        Retorna True si el documento declara los namespaces requeridos.
        """
        # Si la carga falla no debe quedar el documento anterior disponible
        self._document = None
        self._document = load_document(xml_content)
        return self.is_valid(throw_exception)

    def load_from_file(self, path: Union[str, os.PathLike], throw_exception: bool = True) -> bool:
        self._document = None
        self._document = load_document_from_file(path)
        return self.is_valid(throw_exception)

    def is_valid(self, throw_exception: bool = False) -> bool:
        if self._document is None:
            if throw_exception:
                raise MalformedCfdiError(REQUIRED_NAMESPACES)
            return False
        return namespace_validator.is_valid(self._document, throw_exception)

    def _require_document(self) -> CfdiDocument:
        if self._document is None:
            raise MalformedCfdiError(REQUIRED_NAMESPACES)
        if not self._document.valid:
            raise MalformedCfdiError(REQUIRED_NAMESPACES - self._document.prefixes)
        return self._document

    def _resolver(self) -> AttributeResolver:
        return AttributeResolver(self._require_document())

    # --- ACCESO A CAMPOS ---

    def get(self, name: str) -> Any:
        """Acceso genérico por nombre: atributos, alias, nodos anidados y campos calculados."""
        getter = self._fields.get(name)
        if getter is None:
            raise UndefinedAttributeError(f"El atributo '{name}' no está definido para un CFDI")
        return getter()

    def __getattr__(self, name: str) -> Any:
        if name.startswith('_'):
            raise AttributeError(name)
        return self.get(name)

    def get_attribute(self, name: str) -> str:
        return self._resolver().get_attribute(name)

    def get_address(self, path: str) -> Address:
        return materializers.build_address(self._resolver(), path)

    def get_issuer(self) -> Issuer:
        return materializers.build_issuer(self._resolver())

    def get_receiver(self) -> Receiver:
        return materializers.build_receiver(self._resolver())

    def get_line_items(self) -> List[LineItem]:
        return materializers.build_line_items(self._resolver())

    def get_tax_summary(self) -> TaxSummary:
        return materializers.build_tax_summary(self._resolver())

    def get_transferred_tax(self, tax: str = 'IVA') -> TransferredTax:
        """Traslado del impuesto indicado; por ahora solo se soporta IVA."""
        if tax.upper() != 'IVA':
            raise UnsupportedTaxError(f"Impuesto no soportado: {tax}")

        for transfer in materializers.build_transferred_taxes(self._resolver()):
            if transfer.tax.upper() == 'IVA':
                return transfer
        raise FieldNotFoundError("El CFDI no tiene traslados de IVA")

    def get_local_tax_addon(self) -> LocalTaxAddon:
        return materializers.build_local_tax_addon(self._resolver())

    def get_digital_stamp(self) -> DigitalStamp:
        return materializers.build_digital_stamp(self._resolver())

    # --- CAMPOS DERIVADOS ---

    def get_cadena_original(self) -> str:
        """Cadena original del timbre: ||version|UUID|FechaTimbrado|selloCFD|noCertificadoSAT||"""
        stamp = self.get_digital_stamp()
        return (
            f"||{stamp.version}|{stamp.uuid}|{stamp.stamp_date}"
            f"|{stamp.cfd_signature}|{stamp.sat_certificate_number}||"
        )

    def get_qr_string(self) -> str:
        """Cadena para el código QR de verificación. Los valores van sin codificar."""
        issuer = self.get_issuer()
        receiver = self.get_receiver()
        total = self.get_attribute('total')
        stamp = self.get_digital_stamp()
        return f"?re={issuer.rfc}&rr={receiver.rfc}&tt={total}&id={stamp.uuid}"

    def qr(self, width: Optional[int] = None, height: Optional[int] = None) -> str:
        """Imagen PNG del código QR codificada en base64."""
        return base64.b64encode(self._render_qr(width, height)).decode('ascii')

    def qr_code(self, path: Union[str, os.PathLike], width: Optional[int] = None, height: Optional[int] = None) -> int:
        """Guarda la imagen PNG del código QR en `path`. Retorna los bytes escritos."""
        image = self._render_qr(width, height)
        with open(path, 'wb') as png_file:
            written = png_file.write(image)
        logger.info(f"Código QR guardado en {path}")
        return written

    def _render_qr(self, width: Optional[int], height: Optional[int]) -> bytes:
        return self.qr_renderer.encode(
            self.get_qr_string(),
            width or config.QR_WIDTH,
            height or config.QR_HEIGHT,
        )

    # --- SERIALIZACIÓN ---

    def to_string(self) -> str:
        return self._require_document().raw

    def __str__(self) -> str:
        return self.to_string()

    def to_file(self, path: Union[str, os.PathLike], overwrite: bool = False) -> int:
        """
        Escribe la forma canónica del CFDI en `path`.
        Retorna los bytes escritos.
        """
        if os.path.exists(path) and not overwrite:
            raise FileAlreadyExistsError(f"El archivo '{path}' ya existe")

        content = self.to_string().encode('utf-8')
        with open(path, 'wb') as xml_file:
            written = xml_file.write(content)
        logger.info(f"CFDI escrito en {path} ({written} bytes)")
        return written


def _is_existing_file(path_or_content: PathOrContent) -> bool:
    if isinstance(path_or_content, os.PathLike):
        return True
    if isinstance(path_or_content, str) and not path_or_content.lstrip().startswith('<'):
        return os.path.isfile(path_or_content)
    return False
