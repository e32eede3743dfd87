# cfdi_wrapper/domain/exceptions.py


class CfdiError(Exception):
    """Error base de la librería. Todos los errores del dominio heredan de aquí."""


class MalformedXmlError(CfdiError):
    """El contenido recibido no se pudo parsear como XML."""


class MalformedCfdiError(CfdiError):
    """El XML es válido pero no declara los namespaces requeridos de un CFDI."""

    def __init__(self, missing=None):
        self.missing = sorted(missing or [])
        message = "El CFDI no es válido"
        if self.missing:
            message += f": faltan los namespaces {', '.join(self.missing)}"
        super().__init__(message)


class FieldNotFoundError(CfdiError, LookupError):
    """El nodo o atributo esperado no existe en un CFDI por lo demás válido."""


class UndefinedAttributeError(CfdiError, AttributeError):
    """Se pidió un campo que el modelo no conoce."""


class UnsupportedTaxError(CfdiError, ValueError):
    """Se pidió un impuesto por nombre distinto al soportado (IVA)."""


class UnknownPathError(CfdiError, KeyError):
    """Nombre lógico ausente de la tabla de rutas."""


class FileAlreadyExistsError(CfdiError, FileExistsError):
    """El archivo destino ya existe y no se permitió sobrescribirlo."""
