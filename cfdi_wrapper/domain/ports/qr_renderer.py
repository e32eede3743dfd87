# cfdi_wrapper/domain/ports/qr_renderer.py
from abc import ABC, abstractmethod


class QrRenderer(ABC):
    """Puerto para convertir la cadena de verificación en una imagen QR."""
    @abstractmethod
    def encode(self, payload: str, width: int, height: int) -> bytes:
        """
        Genera la imagen del código QR para `payload`.
        Retorna los bytes de la imagen (PNG) de `width` x `height` pixeles.
        """
        pass
