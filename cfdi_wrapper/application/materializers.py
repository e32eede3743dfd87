# cfdi_wrapper/application/materializers.py
"""
Arman los registros anidados del CFDI (emisor, receptor, conceptos,
impuestos, impuestos locales y timbre) a partir de los nodos que entrega el
`AttributeResolver`. Ningún registro se devuelve a medias: si falta un
atributo requerido se propaga `FieldNotFoundError`.
"""
from typing import List

from cfdi_wrapper.application.attribute_resolver import (
    AttributeResolver,
    optional_attribute,
    required_attribute,
)
from cfdi_wrapper.domain.models.cfdi import (
    Address,
    DigitalStamp,
    FiscalRegime,
    IssuedAt,
    Issuer,
    LineItem,
    LocalTaxAddon,
    LocalWithholding,
    Receiver,
    TaxSummary,
    TransferredTax,
    WithheldTax,
)

ADDRESS_PATHS = ('cfdi.issuing.address', 'cfdi.receiver.address')


def build_address(resolver: AttributeResolver, path: str) -> Address:
    """`path` es 'cfdi.issuing.address' o 'cfdi.receiver.address'."""
    if path not in ADDRESS_PATHS:
        raise ValueError(f"Ruta de domicilio no soportada: {path}")

    node = resolver.first(path)
    return Address(
        street=required_attribute(node, 'calle'),
        neighborhood=required_attribute(node, 'colonia'),
        municipality=required_attribute(node, 'municipio'),
        exterior_number=required_attribute(node, 'noExterior'),
        state=required_attribute(node, 'estado'),
        country=required_attribute(node, 'pais'),
        postal_code=required_attribute(node, 'codigoPostal'),
        locality=optional_attribute(node, 'localidad'),
        interior_number=optional_attribute(node, 'noInterior'),
    )


def build_issued_at(resolver: AttributeResolver) -> IssuedAt:
    node = resolver.first('cfdi.issuing.issued_at')
    return IssuedAt(country=required_attribute(node, 'pais'))


def build_fiscal_regime(resolver: AttributeResolver) -> FiscalRegime:
    node = resolver.first('cfdi.issuing.regimen')
    return FiscalRegime(regime=required_attribute(node, 'Regimen'))


def build_issuer(resolver: AttributeResolver) -> Issuer:
    node = resolver.first('cfdi.issuing')
    return Issuer(
        rfc=required_attribute(node, 'rfc'),
        name=required_attribute(node, 'nombre'),
        fiscal_address=build_address(resolver, 'cfdi.issuing.address'),
        issued_at=build_issued_at(resolver),
        fiscal_regime=build_fiscal_regime(resolver),
    )


def build_receiver(resolver: AttributeResolver) -> Receiver:
    node = resolver.first('cfdi.receiver')
    return Receiver(
        rfc=required_attribute(node, 'rfc'),
        name=required_attribute(node, 'nombre'),
        fiscal_address=build_address(resolver, 'cfdi.receiver.address'),
    )


def build_line_items(resolver: AttributeResolver) -> List[LineItem]:
    return [
        LineItem(
            quantity=required_attribute(item, 'cantidad'),
            unit=required_attribute(item, 'unidad'),
            description=required_attribute(item, 'descripcion'),
            unit_value=required_attribute(item, 'valorUnitario'),
            amount=required_attribute(item, 'importe'),
        )
        for item in resolver.query('cfdi.items')
    ]


def build_withheld_taxes(resolver: AttributeResolver) -> List[WithheldTax]:
    return [
        WithheldTax(
            tax=required_attribute(holdback, 'impuesto'),
            amount=required_attribute(holdback, 'importe'),
        )
        for holdback in resolver.query('cfdi.taxes.holdbacks')
    ]


def build_transferred_taxes(resolver: AttributeResolver) -> List[TransferredTax]:
    return [
        TransferredTax(
            tax=required_attribute(transfer, 'impuesto'),
            amount=required_attribute(transfer, 'importe'),
            rate=required_attribute(transfer, 'tasa'),
        )
        for transfer in resolver.query('cfdi.taxes.transfers')
    ]


def build_tax_summary(resolver: AttributeResolver) -> TaxSummary:
    node = resolver.first('cfdi.taxes')
    return TaxSummary(
        total_transferred=required_attribute(node, 'totalImpuestosTrasladados'),
        total_withheld=required_attribute(node, 'totalImpuestosRetenidos'),
        withheld=build_withheld_taxes(resolver),
        transferred=build_transferred_taxes(resolver),
    )


def build_local_withholding(resolver: AttributeResolver) -> LocalWithholding:
    # Aunque el esquema permite varios nodos, solo se lee el primero
    holdback = resolver.first('cfdi.addon.taxes.holdbacks')
    return LocalWithholding(
        tax=required_attribute(holdback, 'ImpLocRetenido'),
        amount=required_attribute(holdback, 'Importe'),
        rate=required_attribute(holdback, 'TasadeRetencion'),
    )


def build_local_tax_addon(resolver: AttributeResolver) -> LocalTaxAddon:
    node = resolver.first('cfdi.addon.taxes')
    return LocalTaxAddon(
        version=required_attribute(node, 'version'),
        total_withheld=required_attribute(node, 'TotaldeRetenciones'),
        total_transferred=required_attribute(node, 'TotaldeTraslados'),
        local_withholding=build_local_withholding(resolver),
    )


def build_digital_stamp(resolver: AttributeResolver) -> DigitalStamp:
    stamp = resolver.first('cfdi.addon.digital_stamp')
    return DigitalStamp(
        version=required_attribute(stamp, 'version'),
        uuid=required_attribute(stamp, 'UUID'),
        stamp_date=required_attribute(stamp, 'FechaTimbrado'),
        cfd_signature=required_attribute(stamp, 'selloCFD'),
        sat_certificate_number=required_attribute(stamp, 'noCertificadoSAT'),
        sat_signature=required_attribute(stamp, 'selloSAT'),
    )
