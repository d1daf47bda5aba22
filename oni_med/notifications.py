"""
================================================================================
NOTIFICATIONS.PY - Recordatorios de Toma, Stock y Caducidad
================================================================================

Genera, a partir de la pauta opcional de cada medicamento, los recordatorios
locales y los eventos del calendario.

PAUTA:
- startTime:     Hora de la primera toma del día ("08:00")
- intervalHours: Horas entre tomas (8 -> 08:00, 16:00, 00:00)
- dosePerIntake: Unidades por toma

TIPOS DE RECORDATORIO:
1. Toma (isTakeNotification=True): se repite cada intervalHours
2. Stock (isTakeNotification=False): quedan pocos días de medicación
3. Caducidad (isTakeNotification=False): caducado o a punto de caducar

EJEMPLO DE STOCK:
    totalQuantity=20, dosePerIntake=1, intervalHours=8
    -> 3 tomas/día -> 20 / 3 = 6.7 días de stock
================================================================================
"""

import math
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from oni_med import config
from oni_med.expiry import EstadoCaducidad, clasificar_caducidad, parsear_fecha
from oni_med.models import DatosNotificacion, DisparadorNotificacion, Medicamento, Notificacion

# Paleta ONI-MED
COLOR_TOMA = "#0078D4"
COLOR_CADUCADO = "#FF3B3B"
COLOR_PROXIMO = "#00FF88"
COLOR_NORMAL = "#4A4A4A"

COLORES_CADUCIDAD = {
    EstadoCaducidad.CADUCADO: COLOR_CADUCADO,
    EstadoCaducidad.PROXIMO: COLOR_PROXIMO,
    EstadoCaducidad.NORMAL: COLOR_NORMAL,
    EstadoCaducidad.DESCONOCIDO: COLOR_NORMAL,
}


def _hora_inicio(med: Medicamento) -> Optional[time]:
    if not med.start_time:
        return None
    try:
        return datetime.strptime(med.start_time.strip(), "%H:%M").time()
    except ValueError:
        return None


def tiene_pauta(med: Medicamento) -> bool:
    return bool(med.interval_hours) and med.interval_hours > 0 and _hora_inicio(med) is not None


def horas_de_toma(med: Medicamento, desde: datetime, cantidad: int = 3) -> List[datetime]:
    """
    Próximas tomas a partir de un instante.

    La serie se ancla en startTime del día de `desde` y avanza (o retrocede)
    de intervalHours en intervalHours.

    Args:
        med: Medicamento con pauta
        desde: Instante de referencia (se incluye si coincide con una toma)
        cantidad: Número de tomas a devolver

    Returns:
        list: Instantes de toma ordenados; vacía si no hay pauta válida
    """
    if not tiene_pauta(med):
        return []

    paso = timedelta(hours=med.interval_hours)
    ancla = datetime.combine(desde.date(), _hora_inicio(med), tzinfo=desde.tzinfo)
    saltos = math.ceil((desde - ancla) / paso)
    primera = ancla + saltos * paso
    return [primera + i * paso for i in range(cantidad)]


def dias_de_stock(med: Medicamento) -> Optional[float]:
    """Días que cubre el stock actual con la pauta, o None si no hay pauta."""
    if not med.interval_hours or med.interval_hours <= 0:
        return None
    if not med.dose_per_intake or med.dose_per_intake <= 0:
        return None
    consumo_diario = med.dose_per_intake * (24 / med.interval_hours)
    return med.total_quantity / consumo_diario


def planificar_notificaciones(medicamentos: List[Medicamento], ahora: datetime = None,
                              umbral_stock_dias: float = None) -> List[Notificacion]:
    """
    Planifica los recordatorios locales de todo el inventario.

    Args:
        medicamentos: Lista del inventario
        ahora: Instante de referencia (por defecto, ahora)
        umbral_stock_dias: Días de stock por debajo de los que se avisa

    Returns:
        list: Notificaciones de toma, stock y caducidad
    """
    if ahora is None:
        ahora = datetime.now()
    if umbral_stock_dias is None:
        umbral_stock_dias = config.DIAS_ALERTA_STOCK

    notificaciones = []
    for med in medicamentos:
        tomas = horas_de_toma(med, ahora, cantidad=1)
        if tomas:
            dosis = med.dose_per_intake or 1
            notificaciones.append(Notificacion(
                id=f"{med.id}-take",
                title=f"💊 Time for {med.name}",
                body=f"Take {dosis:g} unit(s). Next dose every {med.interval_hours:g} h.",
                trigger=DisparadorNotificacion(
                    repeats=True,
                    fire_at=tomas[0].isoformat(timespec="minutes"),
                    interval_hours=med.interval_hours,
                ),
                data=DatosNotificacion(medication_id=med.id, is_take_notification=True),
            ))

        stock = dias_de_stock(med)
        if stock is not None and stock <= umbral_stock_dias:
            notificaciones.append(Notificacion(
                id=f"{med.id}-stock",
                title=f"📦 Low stock: {med.name}",
                body=f"{med.total_quantity:g} unit(s) left, about {stock:.1f} days.",
                trigger=DisparadorNotificacion(repeats=False, fire_at=ahora.isoformat(timespec="minutes")),
                data=DatosNotificacion(medication_id=med.id, is_take_notification=False),
            ))

        estado = clasificar_caducidad(med, ahora)
        if estado in (EstadoCaducidad.CADUCADO, EstadoCaducidad.PROXIMO):
            titulo = "⛔ Expired" if estado == EstadoCaducidad.CADUCADO else "⏳ Expiring soon"
            notificaciones.append(Notificacion(
                id=f"{med.id}-expiry",
                title=f"{titulo}: {med.name}",
                body=f"Expiry date: {med.expiry_date}",
                trigger=DisparadorNotificacion(repeats=False, fire_at=ahora.isoformat(timespec="minutes")),
                data=DatosNotificacion(medication_id=med.id, is_take_notification=False),
            ))

    return notificaciones


def eventos_calendario(medicamentos: List[Medicamento], desde: date, dias: int = 30,
                       ahora: datetime = None) -> List[dict]:
    """
    Eventos para el calendario (formato FullCalendar).

    Incluye cada toma dentro de [desde, desde + dias) y la fecha de caducidad
    de cada medicamento, coloreada según su estado.
    """
    inicio = datetime.combine(desde, time.min)
    fin = inicio + timedelta(days=dias)
    eventos = []

    for med in medicamentos:
        if tiene_pauta(med):
            cantidad = math.ceil(dias * 24 / med.interval_hours) + 1
            for toma in horas_de_toma(med, inicio, cantidad=cantidad):
                if toma >= fin:
                    break
                eventos.append({
                    "title": f"💊 {med.name}",
                    "start": toma.strftime("%Y-%m-%dT%H:%M:%S"),
                    "backgroundColor": COLOR_TOMA,
                    "borderColor": COLOR_TOMA,
                })

        try:
            fecha = parsear_fecha(med.expiry_date)
        except ValueError:
            continue
        estado = clasificar_caducidad(med, ahora)
        color = COLORES_CADUCIDAD[estado]
        dia = fecha.date() if isinstance(fecha, datetime) else fecha
        eventos.append({
            "title": f"⏳ {med.name} expires",
            "start": dia.isoformat(),
            "allDay": True,
            "backgroundColor": color,
            "borderColor": color,
        })

    return eventos
