# main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
# Importamos los routers de la capa de infraestructura
from cfdi_wrapper.infrastructure.api.routers import cfdi_router

logging.basicConfig(level=config.LOG_LEVEL, format=config.LOG_FORMAT)

app = FastAPI(
    title="API de Lectura de CFDI",
    description="Lectura estructurada de comprobantes fiscales digitales (CFDI 3.2).",
    version="1.0.0"
)

# Configuración de CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(cfdi_router.router)


@app.get("/", tags=["Health Check"])
def read_root():
    return {"status": "ok", "message": "API de CFDI en línea"}
