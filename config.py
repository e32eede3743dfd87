# config.py
import os
from dotenv import load_dotenv

load_dotenv()

# --- CONFIGURACIÓN DEL CÓDIGO QR ---
# Tamaño en pixeles de la imagen generada para la cadena de verificación
QR_WIDTH = int(os.getenv("CFDI_QR_WIDTH", "256"))
QR_HEIGHT = int(os.getenv("CFDI_QR_HEIGHT", "256"))

# Margen (en módulos) alrededor del código
QR_BORDER = int(os.getenv("CFDI_QR_BORDER", "1"))

# --- CONFIGURACIÓN DE LOGS ---
LOG_LEVEL = os.getenv("CFDI_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(levelname)s - [%(funcName)s] - %(message)s'

# --- CONFIGURACIÓN DE LA API ---
# Tamaño máximo aceptado para un XML subido
MAX_UPLOAD_BYTES = int(os.getenv("CFDI_MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)))

# Orígenes permitidos por CORS, separados por comas
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CFDI_CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173").split(",")
    if origin.strip()
]
