"""
================================================================================
CONFIG.PY - Configuración de ONI-MED
================================================================================

Parámetros de la aplicación leídos de variables de entorno. Si existe un
fichero .env en la raíz del proyecto, se carga antes de leerlas.

VARIABLES:
- ONI_MED_DATA_DIR:          Carpeta de datos (por defecto ./data)
- ONI_MED_STORAGE_KEY:       Clave del documento persistido
- ONI_MED_EXPORT_DIR:        Carpeta de exportaciones (por defecto data/exports)
- ONI_MED_SOON_DAYS:         Días para considerar "caduca pronto" (30)
- ONI_MED_STOCK_ALERT_DAYS:  Días de stock que disparan alerta (7)
- ONI_MED_LOG_LEVEL:         Nivel de log (INFO)
================================================================================
"""

import os
from pathlib import Path
from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# El .env es opcional; las variables ya definidas en el entorno tienen prioridad
load_dotenv(PROJECT_ROOT / ".env", override=False)

STORAGE_KEY = os.getenv("ONI_MED_STORAGE_KEY", "ONI_MED_STORAGE_KEY")
EXPORT_PREFIX = "oni-med-data-"

DIAS_CADUCIDAD_PROXIMA = int(os.getenv("ONI_MED_SOON_DAYS", "30"))
DIAS_ALERTA_STOCK = int(os.getenv("ONI_MED_STOCK_ALERT_DAYS", "7"))
LOG_LEVEL = os.getenv("ONI_MED_LOG_LEVEL", "INFO").upper()


def directorio_datos() -> Path:
    """Carpeta donde vive el documento persistido (se lee en cada llamada)."""
    return Path(os.getenv("ONI_MED_DATA_DIR", "data"))


def directorio_exportacion() -> Path:
    """Carpeta privada donde se escriben las exportaciones JSON."""
    ruta = os.getenv("ONI_MED_EXPORT_DIR")
    return Path(ruta) if ruta else directorio_datos() / "exports"


def directorio_documentos() -> Path:
    """Carpeta donde la vista de detalle guarda los adjuntos subidos."""
    return directorio_datos() / "documents"
