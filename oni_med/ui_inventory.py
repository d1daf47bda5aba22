"""
================================================================================
UI_INVENTORY.PY - Lista del Inventario
================================================================================

Pantalla principal: muestra todos los medicamentos del inventario.

FUNCIONALIDADES:
- Métricas: total de registros, caducados y próximos a caducar
- Tarjeta por medicamento con cantidad y fecha de caducidad
- Color de la caducidad: rojo (caducado), verde HUD (<= 30 días), gris (normal)
- Botón ✏️ para editar y 🗑️ para eliminar (con confirmación)
- Botón "➕ Add medication" que abre la pantalla de detalle vacía
- Tabla resumen (pandas) dentro de un desplegable
================================================================================
"""

import html

import pandas as pd
import streamlit as st

from oni_med.data_manager import cargar_datos, eliminar_medicamento
from oni_med.expiry import EstadoCaducidad, clasificar_caducidad, dias_hasta_caducidad
from oni_med.styles import estilo_caducidad

ETIQUETAS_ESTADO = {
    EstadoCaducidad.CADUCADO: "⛔ Expired",
    EstadoCaducidad.PROXIMO: "⏳ Expiring soon",
    EstadoCaducidad.NORMAL: "✅ OK",
    EstadoCaducidad.DESCONOCIDO: "❔ Unknown date",
}


@st.dialog("🗑️ Delete medication")
def confirmar_borrado(med):
    """Pide confirmación antes de eliminar un registro."""
    st.write(f"Delete **{med.name}** from the inventory?")
    c1, c2 = st.columns(2)
    if c1.button("Delete", type="primary", use_container_width=True):
        resultado = eliminar_medicamento(med.id)
        if resultado.encontrado:
            st.toast(f"{med.name} deleted")
        else:
            st.toast("It was already deleted")
        st.rerun()
    if c2.button("Cancel", use_container_width=True):
        st.rerun()


def tarjeta_html(med, estado) -> str:
    """Tarjeta de un medicamento; los textos del registro se escapan."""
    return f"""
        <div class="oni-card">
            <h4>{html.escape(med.name)}</h4>
            <p>Quantity: {html.escape(str(med.total_quantity))}</p>
            <p style="{estilo_caducidad(estado)}">Expiry: {html.escape(med.expiry_date)}</p>
        </div>
    """


def _tabla_resumen(medicamentos):
    filas = []
    for med in medicamentos:
        try:
            dias = dias_hasta_caducidad(med.expiry_date)
        except ValueError:
            dias = None
        filas.append({
            "Name": med.name,
            "Quantity": med.total_quantity,
            "Expiry": med.expiry_date,
            "Days left": dias,
            "Status": ETIQUETAS_ESTADO[clasificar_caducidad(med)],
        })
    return pd.DataFrame(filas)


def render_inventario(ir_a_detalle_callback):
    """
    Renderiza la lista del inventario.

    Args:
        ir_a_detalle_callback: Función que recibe un ID (o "new") y abre
                               la pantalla de detalle
    """
    datos = cargar_datos()
    medicamentos = datos.medications

    st.title("Medication control")

    # =========================================================================
    # MÉTRICAS
    # =========================================================================
    estados = [clasificar_caducidad(m) for m in medicamentos]
    c1, c2, c3 = st.columns(3)
    c1.metric("Records", len(medicamentos))
    c2.metric("Expired", estados.count(EstadoCaducidad.CADUCADO))
    c3.metric("Expiring ≤ 30 days", estados.count(EstadoCaducidad.PROXIMO))

    if st.button("➕ Add medication", type="primary", use_container_width=True):
        ir_a_detalle_callback("new")

    st.markdown("---")

    # =========================================================================
    # LISTA DE TARJETAS
    # =========================================================================
    if not medicamentos:
        st.info('No records yet. Press "➕ Add medication" to create one.')
        return

    for med, estado in zip(medicamentos, estados):
        c_card, c_edit, c_del = st.columns([8, 1, 1])
        with c_card:
            st.markdown(tarjeta_html(med, estado), unsafe_allow_html=True)
        if c_edit.button("✏️", key=f"edit_{med.id}"):
            ir_a_detalle_callback(med.id)
        if c_del.button("🗑️", key=f"del_{med.id}"):
            confirmar_borrado(med)

    with st.expander("📋 Summary table"):
        st.dataframe(_tabla_resumen(medicamentos), use_container_width=True, hide_index=True)
