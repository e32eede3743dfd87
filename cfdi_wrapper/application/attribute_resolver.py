# cfdi_wrapper/application/attribute_resolver.py
from typing import List, Optional
from lxml import etree

from cfdi_wrapper.domain.cfdi_paths import COMPROBANTE_ATTRIBUTES, resolve_alias, resolve_path
from cfdi_wrapper.domain.exceptions import FieldNotFoundError, UndefinedAttributeError
from cfdi_wrapper.infrastructure.xml.document_loader import CfdiDocument


class AttributeResolver:
    """
    Traduce nombres lógicos de la tabla de rutas a consultas XPath sobre un
    documento ya cargado y extrae los atributos de los nodos encontrados.
    """

    def __init__(self, document: CfdiDocument):
        self.document = document

    def query(self, logical_name: str) -> List[etree._Element]:
        """Todos los nodos que coinciden con la ruta, en orden de documento."""
        expression = resolve_path(logical_name)
        try:
            return self.document.xpath(expression)
        except etree.XPathEvalError as e:
            # Un prefijo no declarado equivale a que el nodo no existe
            raise FieldNotFoundError(f"No se pudo evaluar '{logical_name}': {e}") from e

    def first(self, logical_name: str) -> etree._Element:
        """El primer nodo de la ruta; falla si no hay ninguno."""
        nodes = self.query(logical_name)
        if not nodes:
            raise FieldNotFoundError(f"El CFDI no contiene el nodo '{logical_name}'")
        return nodes[0]

    def get_attribute(self, name: str) -> str:
        """Atributo del nodo Comprobante, aceptando sus alias."""
        attribute = resolve_alias('comprobante', name)
        if attribute not in COMPROBANTE_ATTRIBUTES:
            raise UndefinedAttributeError(f"El atributo '{name}' no está definido para un CFDI")

        return required_attribute(self.first('cfdi'), attribute)


def required_attribute(node: etree._Element, name: str) -> str:
    value = node.get(name)
    if value is None:
        tag = etree.QName(node).localname
        raise FieldNotFoundError(f"El nodo '{tag}' no tiene el atributo '{name}'")
    return value


def optional_attribute(node: etree._Element, name: str, default: Optional[str] = '') -> Optional[str]:
    return node.get(name, default)
