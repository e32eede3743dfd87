# cfdi_wrapper/domain/models/cfdi.py
from pydantic import BaseModel, ConfigDict
from typing import Any, ClassVar, List, Mapping

from cfdi_wrapper.domain.cfdi_paths import DIGITAL_STAMP_ALIASES, LOCAL_TAX_ALIASES


class CfdiRecord(BaseModel):
    """
    Registro inmutable extraído de un nodo del CFDI.

    Cada valor se guarda una sola vez, en su campo canónico. Los nombres
    alternos (los del XSD del SAT o variantes históricas) se resuelven al
    leerlos mediante `field_aliases`, así dos alias nunca pueden diferir.
    """
    field_aliases: ClassVar[Mapping[str, str]] = {}

    model_config = ConfigDict(frozen=True)

    def __getattr__(self, item: str) -> Any:
        canonical = type(self).field_aliases.get(item)
        if canonical is not None:
            return getattr(self, canonical)
        return super().__getattr__(item)


class Address(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = {
        'calle': 'street',
        'colonia': 'neighborhood',
        'localidad': 'locality',
        'municipio': 'municipality',
        'noExterior': 'exterior_number',
        'noInterior': 'interior_number',
        'estado': 'state',
        'pais': 'country',
        'codigoPostal': 'postal_code',
    }

    street: str
    neighborhood: str
    municipality: str
    exterior_number: str
    state: str
    country: str
    postal_code: str
    # Opcionales en el nodo: cadena vacía si el atributo no existe
    locality: str = ''
    interior_number: str = ''


class IssuedAt(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = {'pais': 'country'}

    country: str


class FiscalRegime(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = {'Regimen': 'regime', 'regimen': 'regime'}

    regime: str


class Receiver(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = {
        'nombre': 'name',
        'address': 'fiscal_address',
        'fiscalAddress': 'fiscal_address',
        'domicilio': 'fiscal_address',
        'domicilioFiscal': 'fiscal_address',
    }

    rfc: str
    name: str
    fiscal_address: Address


class Issuer(Receiver):
    field_aliases: ClassVar[Mapping[str, str]] = {
        **Receiver.field_aliases,
        'expedidoEn': 'issued_at',
        'regime': 'fiscal_regime',
        'fiscalRegime': 'fiscal_regime',
        'regimen': 'fiscal_regime',
        'regimenFiscal': 'fiscal_regime',
    }

    issued_at: IssuedAt
    fiscal_regime: FiscalRegime


class LineItem(CfdiRecord):
    """Un concepto. Los importes se conservan como texto, sin redondeos."""
    field_aliases: ClassVar[Mapping[str, str]] = {
        'cantidad': 'quantity',
        'unidad': 'unit',
        'descripcion': 'description',
        'valorUnitario': 'unit_value',
        'importe': 'amount',
    }

    quantity: str
    unit: str
    description: str
    unit_value: str
    amount: str


class WithheldTax(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = {'impuesto': 'tax', 'importe': 'amount'}

    tax: str
    amount: str


class TransferredTax(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = {
        'impuesto': 'tax',
        'importe': 'amount',
        'tasa': 'rate',
    }

    tax: str
    amount: str
    rate: str


class TaxSummary(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = {
        'totalImpuestosTrasladados': 'total_transferred',
        'totalImpuestosRetenidos': 'total_withheld',
        'retenciones': 'withheld',
        'traslados': 'transferred',
    }

    total_transferred: str
    total_withheld: str
    withheld: List[WithheldTax]
    transferred: List[TransferredTax]


class LocalWithholding(TransferredTax):
    """Retención local (complemento implocal): impuesto, importe y tasa."""


class LocalTaxAddon(CfdiRecord):
    field_aliases: ClassVar[Mapping[str, str]] = LOCAL_TAX_ALIASES

    version: str
    total_withheld: str
    total_transferred: str
    # Solo se materializa el primer nodo RetencionesLocales
    local_withholding: LocalWithholding


class DigitalStamp(CfdiRecord):
    """Timbre Fiscal Digital emitido por el SAT."""
    field_aliases: ClassVar[Mapping[str, str]] = DIGITAL_STAMP_ALIASES

    version: str
    uuid: str
    stamp_date: str
    cfd_signature: str
    sat_certificate_number: str
    sat_signature: str
