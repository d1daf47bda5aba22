"""
Clasificación de caducidad de los medicamentos.

- Caducado:        0 días o menos
- Caduca pronto:   entre 1 y 30 días (ONI_MED_SOON_DAYS)
- Normal:          más de 30 días
"""

import math
from datetime import date, datetime
from enum import Enum

from oni_med import config
from oni_med.models import Medicamento


class EstadoCaducidad(str, Enum):
    CADUCADO = "expired"
    PROXIMO = "expiring_soon"
    NORMAL = "normal"
    DESCONOCIDO = "unknown"


def parsear_fecha(fecha_iso: str):
    """
    Interpreta una fecha ISO 8601.

    Returns:
        date si el texto es solo fecha ("2025-06-30"),
        datetime si incluye hora ("2025-06-30T00:00:00.000Z")

    Raises:
        ValueError: Si el texto no es ISO 8601
    """
    texto = fecha_iso.strip()
    if len(texto) == 10:
        return date.fromisoformat(texto)
    return datetime.fromisoformat(texto.replace("Z", "+00:00"))


def dias_hasta_caducidad(fecha_iso: str, ahora=None) -> int:
    """
    Días que faltan hasta la caducidad (negativo si ya pasó).

    Con fechas sin hora se cuentan días de calendario. Con fecha y hora se
    redondea hacia arriba la fracción de día restante.

    Args:
        fecha_iso: Fecha de caducidad en ISO 8601
        ahora: date o datetime de referencia (por defecto, el momento actual)
    """
    fecha = parsear_fecha(fecha_iso)
    if ahora is None:
        ahora = datetime.now().astimezone()

    if isinstance(fecha, datetime):
        if not isinstance(ahora, datetime):
            ahora = datetime.combine(ahora, datetime.min.time())
        # Las horas sin zona se interpretan como hora local
        if fecha.tzinfo is None:
            fecha = fecha.astimezone()
        if ahora.tzinfo is None:
            ahora = ahora.astimezone()
        return math.ceil((fecha - ahora).total_seconds() / 86400)

    hoy = ahora.date() if isinstance(ahora, datetime) else ahora
    return (fecha - hoy).days


def clasificar_caducidad(objetivo, ahora=None, dias_proxima: int = None) -> EstadoCaducidad:
    """
    Clasifica un medicamento (o una fecha ISO) según su caducidad.

    Las fechas que no se pueden interpretar se marcan como DESCONOCIDO en vez
    de romper la vista del inventario.
    """
    if dias_proxima is None:
        dias_proxima = config.DIAS_CADUCIDAD_PROXIMA
    fecha_iso = objetivo.expiry_date if isinstance(objetivo, Medicamento) else objetivo

    try:
        dias = dias_hasta_caducidad(fecha_iso, ahora)
    except (ValueError, TypeError, AttributeError):
        return EstadoCaducidad.DESCONOCIDO

    if dias <= 0:
        return EstadoCaducidad.CADUCADO
    if dias <= dias_proxima:
        return EstadoCaducidad.PROXIMO
    return EstadoCaducidad.NORMAL
