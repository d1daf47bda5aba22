"""
================================================================================
STORAGE.PY - Almacén clave-valor en disco
================================================================================

Guarda cada clave como un fichero JSON dentro de la carpeta de datos:

    <data_dir>/<CLAVE>.json

Es el equivalente local del almacenamiento clave-valor de una app móvil:
- get_item() devuelve None si la clave no existe
- set_item() reemplaza el documento completo
- remove_item() borra la clave (sin error si no existe)

La escritura se hace en un fichero temporal y se renombra, de modo que una
interrupción a mitad no deja el documento a medio escribir.
================================================================================
"""

import logging
import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class AlmacenJSON:
    """
    Almacén clave-valor respaldado por ficheros.

    Atributos:
        directorio: Carpeta donde viven los documentos
    """

    def __init__(self, directorio):
        self.directorio = Path(directorio)

    def ruta(self, clave: str) -> Path:
        return self.directorio / f"{clave}.json"

    def get_item(self, clave: str) -> Optional[str]:
        """
        Lee el documento guardado bajo una clave.

        Returns:
            str: Contenido del documento, o None si la clave no existe
                 o el fichero está vacío
        """
        ruta = self.ruta(clave)
        if not ruta.exists():
            return None
        with open(ruta, "r", encoding="utf-8") as f:
            contenido = f.read()
        return contenido if contenido.strip() else None

    def set_item(self, clave: str, valor: str) -> None:
        """Reemplaza el documento de la clave con el texto dado."""
        self.directorio.mkdir(parents=True, exist_ok=True)
        ruta = self.ruta(clave)
        temporal = ruta.with_name(ruta.name + ".tmp")
        with open(temporal, "w", encoding="utf-8") as f:
            f.write(valor)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temporal, ruta)

    def remove_item(self, clave: str) -> None:
        ruta = self.ruta(clave)
        if ruta.exists():
            ruta.unlink()

    def respaldar(self, clave: str) -> Optional[Path]:
        """
        Copia el documento actual a un fichero con marca de tiempo.

        Se usa antes de descartar un documento corrupto.

        Returns:
            Path: Ruta de la copia, o None si no había documento
        """
        ruta = self.ruta(clave)
        if not ruta.exists():
            return None
        sello = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        copia = ruta.with_name(f"{clave}.corrupt-{sello}.json")
        shutil.copy2(ruta, copia)
        logger.warning("💾 Copia del documento corrupto guardada en %s", copia)
        return copia
