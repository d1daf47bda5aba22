"""
================================================================================
APP.PY - Punto de Entrada Principal de ONI-MED
================================================================================

Archivo principal de la aplicación Streamlit. Gestiona:
- Configuración inicial de la página (título, icono, layout)
- Logging de la aplicación
- Navegación entre las vistas
- Enrutamiento a la pantalla de detalle

VISTAS DISPONIBLES:
- Inventory: Lista de medicamentos (ver, borrar, añadir)
- Reminders: Avisos y calendario de tomas/caducidades
- Settings: Exportar e importar datos

USO:
    streamlit run oni_med/app.py
================================================================================
"""

import os
import sys

import streamlit as st

# =============================================================================
# CONFIGURACIÓN DE PÁGINA (debe ser la primera llamada a Streamlit)
# =============================================================================
st.set_page_config(
    page_title="ONI-MED",
    page_icon="💊",
    layout="centered",
    initial_sidebar_state="expanded"
)

# Añadir la raíz del proyecto al path cuando se lanza con "streamlit run"
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from oni_med.logger import setup_logger  # noqa: E402
from oni_med.styles import inject_custom_css  # noqa: E402
from oni_med.ui_detail import render_detalle  # noqa: E402
from oni_med.ui_inventory import render_inventario  # noqa: E402
from oni_med.ui_reminders import render_recordatorios  # noqa: E402
from oni_med.ui_settings import render_configuracion  # noqa: E402

setup_logger()
inject_custom_css()

# Medicamento abierto en la pantalla de detalle ("new" para alta)
if "medicamento_abierto" not in st.session_state:
    st.session_state.medicamento_abierto = None


def abrir_detalle(id_medicamento):
    """Callback para ir a la pantalla de detalle desde la lista."""
    st.session_state.medicamento_abierto = id_medicamento
    st.rerun()


def volver_a_lista():
    st.session_state.medicamento_abierto = None
    st.rerun()


# =============================================================================
# BARRA LATERAL
# =============================================================================
with st.sidebar:
    st.title("ONI-MED")
    st.caption("Medication inventory")
    st.markdown("---")
    modo = st.radio("Menu", ["💊 Inventory", "🔔 Reminders", "⚙️ Settings"])

# =============================================================================
# ROUTER PRINCIPAL
# =============================================================================
if modo == "💊 Inventory":
    if st.session_state.medicamento_abierto:
        render_detalle(st.session_state.medicamento_abierto, volver_callback=volver_a_lista)
    else:
        render_inventario(ir_a_detalle_callback=abrir_detalle)

elif modo == "🔔 Reminders":
    render_recordatorios()

elif modo == "⚙️ Settings":
    render_configuracion()
