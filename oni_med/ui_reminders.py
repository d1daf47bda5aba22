"""
================================================================================
UI_REMINDERS.PY - Calendario y Recordatorios
================================================================================

Vista de la pauta de todo el inventario:

1. AVISOS: Recordatorios planificados (toma, stock bajo, caducidad)
2. CALENDARIO: Tomas y fechas de caducidad de los próximos 30 días

COMPONENTES EXTERNOS:
- streamlit-calendar: Calendario interactivo tipo FullCalendar
================================================================================
"""

from datetime import date, datetime

import streamlit as st
from streamlit_calendar import calendar

from oni_med.data_manager import cargar_datos
from oni_med.notifications import eventos_calendario, planificar_notificaciones


def render_recordatorios():
    medicamentos = cargar_datos().medications
    ahora = datetime.now()

    st.title("Reminders")

    tab_avisos, tab_cal = st.tabs(["🔔 Alerts", "📅 Calendar"])

    # ==========================================================================
    # 🔔 TAB 1: AVISOS
    # ==========================================================================
    with tab_avisos:
        avisos = planificar_notificaciones(medicamentos, ahora)
        if not avisos:
            st.caption("🎉 Nothing to remind you about.")

        tomas = [n for n in avisos if n.data.is_take_notification]
        alertas = [n for n in avisos if not n.data.is_take_notification]

        for n in alertas:
            st.warning(f"**{n.title}** · {n.body}")

        if tomas:
            st.markdown("##### 💊 Next doses")
            for n in sorted(tomas, key=lambda n: n.trigger.fire_at):
                hora = datetime.fromisoformat(n.trigger.fire_at).strftime("%d/%m %H:%M")
                st.markdown(f"- `{hora}` {n.title} · {n.body}")

    # ==========================================================================
    # 📅 TAB 2: CALENDARIO
    # ==========================================================================
    with tab_cal:
        eventos = eventos_calendario(medicamentos, date.today(), dias=30, ahora=ahora)
        if not eventos:
            st.info("No doses or expiry dates to show.")

        calendar_options = {
            "headerToolbar": {"left": "prev,next today", "center": "title", "right": "dayGridMonth,listWeek"},
            "initialView": "dayGridMonth",
            "selectable": True,
        }
        calendar(events=eventos, options=calendar_options, key="cal_inventario")
