# cfdi_wrapper/infrastructure/external/qrcode_adapter.py
import io
from typing import Optional
import logging
import qrcode
from PIL import Image

import config
from cfdi_wrapper.domain.ports.qr_renderer import QrRenderer

logger = logging.getLogger(__name__)


class QrcodeRenderer(QrRenderer):
    """
    Adaptador que genera el código QR con la librería `qrcode` y lo escala
    con Pillow al tamaño solicitado.
    """
    def __init__(self, border: Optional[int] = None):
        self.border = config.QR_BORDER if border is None else border

    def encode(self, payload: str, width: int, height: int) -> bytes:
        if width <= 0 or height <= 0:
            raise ValueError(f"Tamaño de imagen inválido: {width}x{height}")

        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=1,
            border=self.border,
        )
        qr.add_data(payload)
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white").get_image()
        # NEAREST conserva los módulos nítidos al escalar
        img = img.convert("L").resize((width, height), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        logger.debug(f"QR generado ({width}x{height}) para {len(payload)} caracteres")
        return buffer.getvalue()
