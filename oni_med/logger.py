"""
Utilidades de log

Salida por consola y fichero rotativo en <data_dir>/logs.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from oni_med import config


def setup_logger(
    name: str = "oni_med",
    log_file: Optional[Path] = None,
    level: Optional[str] = None,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    console_output: bool = True
) -> logging.Logger:
    """
    Configura el logger de la aplicación.

    Args:
        name: Nombre del logger (los módulos cuelgan de "oni_med")
        log_file: Ruta del fichero (por defecto <data_dir>/logs/{name}.log)
        level: Nivel de log; si no se indica se usa ONI_MED_LOG_LEVEL
        max_bytes: Tamaño máximo antes de rotar
        backup_count: Ficheros rotados que se conservan
        console_output: Si también se escribe en stdout

    Returns:
        logging.Logger: El logger configurado

    Ejemplo:
        >>> logger = setup_logger()
        >>> logger.info("ONI-MED arrancado")
    """
    logger = logging.getLogger(name)

    # Streamlit re-ejecuta el script en cada interacción: no duplicar handlers
    if logger.handlers:
        return logger

    logger.setLevel(level or config.LOG_LEVEL)

    if log_file is None:
        log_file = config.directorio_datos() / "logs" / f"{name}.log"
    log_file.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    logger.propagate = False
    return logger
