# cfdi_wrapper/infrastructure/api/routers/cfdi_router.py
import logging
from fastapi import APIRouter, File, UploadFile, HTTPException
from fastapi.responses import Response
from typing import Any, Dict

import config
from cfdi_wrapper.application.cfdi import Cfdi
from cfdi_wrapper.domain.cfdi_paths import COMPROBANTE_ATTRIBUTES
from cfdi_wrapper.domain.exceptions import FieldNotFoundError, MalformedCfdiError, MalformedXmlError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/cfdi", tags=["CFDI"])


async def _read_cfdi(xml_file: UploadFile) -> Cfdi:
    """Lee el archivo subido y lo carga; los errores de formato se devuelven como 422."""
    content = await xml_file.read()
    if not content:
        raise HTTPException(status_code=400, detail="El archivo XML está vacío.")
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="El archivo XML excede el tamaño permitido.")

    try:
        return Cfdi(content)
    except (MalformedXmlError, MalformedCfdiError) as e:
        logger.warning(f"CFDI rechazado ({xml_file.filename}): {e}")
        raise HTTPException(status_code=422, detail=str(e))


def _comprobante(cfdi: Cfdi) -> Dict[str, str]:
    # Solo los atributos presentes; varios son opcionales en el XSD
    attributes = {}
    for name in COMPROBANTE_ATTRIBUTES:
        try:
            attributes[name] = cfdi.get_attribute(name)
        except FieldNotFoundError:
            continue
    return attributes


@router.post("/", summary="Leer los datos de un CFDI")
async def read_cfdi(
    xml_file: UploadFile = File(..., description="Archivo XML del CFDI.")
) -> Dict[str, Any]:
    """
    Recibe un CFDI y devuelve sus atributos, nodos anidados y campos derivados.
    """
    cfdi = await _read_cfdi(xml_file)
    try:
        return {
            "comprobante": _comprobante(cfdi),
            "emisor": cfdi.get_issuer().model_dump(),
            "receptor": cfdi.get_receiver().model_dump(),
            "conceptos": [item.model_dump() for item in cfdi.get_line_items()],
            "impuestos": cfdi.get_tax_summary().model_dump(),
            "impuestos_locales": cfdi.get_local_tax_addon().model_dump(),
            "timbre": cfdi.get_digital_stamp().model_dump(),
            "cadena_original": cfdi.get_cadena_original(),
            "qr_string": cfdi.get_qr_string(),
            "leyenda": cfdi.leyenda,
        }
    except FieldNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/qr", summary="Generar el código QR de verificación")
async def create_qr(
    xml_file: UploadFile = File(..., description="Archivo XML del CFDI.")
):
    cfdi = await _read_cfdi(xml_file)
    try:
        image = cfdi.qr_renderer.encode(cfdi.get_qr_string(), config.QR_WIDTH, config.QR_HEIGHT)
    except FieldNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=image, media_type="image/png")


@router.post("/canonical", summary="Obtener la forma canónica del CFDI")
async def canonical_cfdi(
    xml_file: UploadFile = File(..., description="Archivo XML del CFDI.")
):
    cfdi = await _read_cfdi(xml_file)
    return Response(content=cfdi.to_string(), media_type="application/xml")
