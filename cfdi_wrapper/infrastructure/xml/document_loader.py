# cfdi_wrapper/infrastructure/xml/document_loader.py
import logging
import os
import re
from typing import Dict, FrozenSet, List, Union
from lxml import etree

from cfdi_wrapper.domain.exceptions import MalformedXmlError
from cfdi_wrapper.infrastructure.xml.namespace_validator import missing_namespaces

logger = logging.getLogger(__name__)

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'

_DECLARATION_RE = re.compile(r'^\s*<\?xml\s[^>]*\?>')
# Las secciones CDATA se conservan tal cual; solo se colapsa el espacio entre etiquetas
_BETWEEN_TAGS_RE = re.compile(r'(<!\[CDATA\[.*?\]\]>)|(?<=>)\s+(?=<)', re.DOTALL)


class CfdiDocument:
    """
    Representación cargada de un CFDI: el texto canónico, el árbol de lxml y
    los prefijos de namespace declarados en cualquier nodo del documento.
    """

    def __init__(self, raw: str, root: etree._Element, namespaces: Dict[str, str]):
        self.raw = raw
        self.root = root
        self.namespaces = namespaces
        # Sin registrar nada: el aviso lo emite namespace_validator.is_valid
        self.valid = not missing_namespaces(self)

    @property
    def prefixes(self) -> FrozenSet[str]:
        return frozenset(self.namespaces)

    def xpath(self, expression: str) -> List[etree._Element]:
        """Evalúa `expression` usando los prefijos declarados por el propio documento."""
        return self.root.xpath(expression, namespaces=self.namespaces)


def _collapse_between_tags(match: re.Match) -> str:
    cdata = match.group(1)
    return cdata if cdata is not None else ''


def canonicalize(xml_text: str) -> str:
    """
    Normaliza el texto del XML para que la salida no dependa de la indentación
    original: quita la declaración, los saltos de línea y el espacio entre
    etiquetas, y antepone una declaración UTF-8 seguida de un salto de línea.
    """
    text = xml_text.lstrip('\ufeff')
    text = _DECLARATION_RE.sub('', text, count=1)
    text = text.replace('\n', '').replace('\r', '')
    text = _BETWEEN_TAGS_RE.sub(_collapse_between_tags, text)
    return f"{XML_DECLARATION}\n{text.strip()}"


def discover_namespaces(root: etree._Element) -> Dict[str, str]:
    """Prefijo -> URI de todos los namespaces declarados en el árbol."""
    namespaces: Dict[str, str] = {}
    for element in root.iter(etree.Element):
        for prefix, uri in element.nsmap.items():
            if prefix is not None:
                namespaces.setdefault(prefix, uri)
    return namespaces


def _decode(xml_bytes: bytes) -> str:
    # lxml respeta la codificación declarada; la usamos para obtener el texto
    try:
        root = etree.fromstring(xml_bytes, parser=_new_parser())
        encoding = root.getroottree().docinfo.encoding or 'UTF-8'
        return xml_bytes.decode(encoding).lstrip('\ufeff')
    except (etree.XMLSyntaxError, UnicodeDecodeError, LookupError) as e:
        raise MalformedXmlError(f"No se pudo leer el XML: {e}") from e


def _new_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True)


def load_document(xml_content: Union[str, bytes]) -> CfdiDocument:
    """
    Parsea el contenido y construye el documento. El árbol se arma a partir
    del texto canónico, de modo que lo que se lee es exactamente lo que
    `canonicalize` produce al volver a serializar.
    """
    if isinstance(xml_content, bytes):
        xml_content = _decode(xml_content)
    if not isinstance(xml_content, str):
        raise TypeError(f"Se esperaba str o bytes, se recibió {type(xml_content).__name__}")

    canonical = canonicalize(xml_content)
    try:
        root = etree.fromstring(canonical.encode('utf-8'), parser=_new_parser())
    except (etree.XMLSyntaxError, ValueError) as e:
        raise MalformedXmlError(f"No se pudo parsear el XML: {e}") from e

    document = CfdiDocument(canonical, root, discover_namespaces(root))
    logger.debug(f"Documento cargado con namespaces: {sorted(document.prefixes)}")
    return document


def load_document_from_file(path: Union[str, os.PathLike]) -> CfdiDocument:
    """Lee el archivo en binario y delega en `load_document`."""
    logger.info(f"Cargando CFDI desde {path}")
    with open(path, 'rb') as xml_file:
        content = xml_file.read()
    return load_document(content)
