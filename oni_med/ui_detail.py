"""
================================================================================
UI_DETAIL.PY - Alta y Edición de Medicamentos
================================================================================

Formulario para crear un medicamento nuevo o editar uno existente.

SECCIONES DEL FORMULARIO:
1. Identificación: Nombre, cantidad en stock, fecha de caducidad
2. Pauta (opcional): Intervalo en horas, hora de inicio, dosis por toma
3. Notas
4. Documentos: Fotos/PDFs adjuntos (se guardan en <data_dir>/documents)

FLUJO:
1. Desde la lista se pulsa "➕" (ID "new") o "✏️" (ID del registro)
2. Se rellenan los campos
3. "💾 Save" -> agregar_medicamento() o actualizar_medicamento()
4. Se vuelve a la lista
================================================================================
"""

import uuid
from datetime import date, datetime, time

import streamlit as st

from oni_med import config
from oni_med.data_manager import actualizar_medicamento, agregar_medicamento, obtener_medicamento
from oni_med.expiry import parsear_fecha
from oni_med.models import DocumentoAsociado


def _fecha_inicial(med):
    if med is None:
        return date.today()
    try:
        fecha = parsear_fecha(med.expiry_date)
    except ValueError:
        return date.today()
    return fecha.date() if isinstance(fecha, datetime) else fecha


def _hora_inicial(med):
    if med is None or not med.start_time:
        return time(8, 0)
    try:
        return datetime.strptime(med.start_time, "%H:%M").time()
    except ValueError:
        return time(8, 0)


def parametros_cantidad(med):
    """
    Valor y paso del campo de cantidad.

    Un stock fraccionario (ej: 2.5 frascos importados) se edita como decimal
    para no truncarlo.
    """
    if med is None:
        return {"min_value": 0, "step": 1, "value": 0}
    cantidad = med.total_quantity
    if float(cantidad).is_integer():
        return {"min_value": 0, "step": 1, "value": int(cantidad)}
    return {"min_value": 0.0, "step": 0.5, "value": float(cantidad)}


def _guardar_adjunto(archivo) -> DocumentoAsociado:
    """Copia el fichero subido a la carpeta de documentos y devuelve su referencia."""
    carpeta = config.directorio_documentos()
    carpeta.mkdir(parents=True, exist_ok=True)
    ruta = carpeta / f"{uuid.uuid4().hex[:8]}_{archivo.name}"
    with open(ruta, "wb") as f:
        f.write(archivo.getbuffer())
    return DocumentoAsociado(
        name=archivo.name,
        uri=ruta.resolve().as_uri(),
        mime_type=archivo.type or "application/octet-stream",
    )


def render_detalle(id_medicamento, volver_callback):
    """
    Renderiza el formulario de detalle.

    Args:
        id_medicamento: ID del registro a editar, o "new" para crear
        volver_callback: Función para regresar a la lista
    """
    es_nuevo = id_medicamento == "new"
    med = None if es_nuevo else obtener_medicamento(id_medicamento)

    if not es_nuevo and med is None:
        st.warning("⚠️ This medication no longer exists.")
        if st.button("⬅️ Back to inventory"):
            volver_callback()
        return

    # Los adjuntos se editan en sesión hasta pulsar "Save"
    clave_docs = f"docs_{id_medicamento}"
    if clave_docs not in st.session_state:
        st.session_state[clave_docs] = list(med.documents or []) if med else []

    st.title("New medication" if es_nuevo else f"Edit: {med.name}")

    with st.container(border=True):
        # =====================================================================
        # 1. IDENTIFICACIÓN
        # =====================================================================
        nombre = st.text_input("Name", value=med.name if med else "")
        c1, c2 = st.columns(2)
        cantidad = c1.number_input("Total quantity", **parametros_cantidad(med))
        fecha_original = _fecha_inicial(med)
        fecha = c2.date_input("Expiry date", value=fecha_original)

        st.markdown("---")

        # =====================================================================
        # 2. PAUTA
        # =====================================================================
        st.markdown("##### ⏰ Dosing schedule")
        con_pauta = st.toggle("Has a dosing schedule", value=bool(med and med.interval_hours))
        intervalo = hora_inicio = dosis = None
        if con_pauta:
            p1, p2, p3 = st.columns(3)
            intervalo = p1.number_input(
                "Every (hours)", min_value=1, max_value=168, step=1,
                value=int(med.interval_hours) if med and med.interval_hours else 8,
            )
            hora_inicio = p2.time_input("First dose", value=_hora_inicial(med))
            dosis = p3.number_input(
                "Units per dose", min_value=1, step=1,
                value=int(med.dose_per_intake) if med and med.dose_per_intake else 1,
            )

        st.markdown("---")

        # =====================================================================
        # 3. NOTAS Y DOCUMENTOS
        # =====================================================================
        notas = st.text_area("Notes", value=(med.notes or "") if med else "")

        st.markdown("##### 📎 Documents")
        documentos = st.session_state[clave_docs]
        for i, doc in enumerate(documentos):
            d1, d2 = st.columns([6, 1])
            d1.markdown(f"[{doc.name}]({doc.uri}) · `{doc.mime_type}`")
            if d2.button("❌", key=f"rm_doc_{id_medicamento}_{i}"):
                documentos.pop(i)
                st.rerun()

        subido = st.file_uploader("Attach a photo or document", type=["jpg", "jpeg", "png", "pdf"])
        if subido and st.button("📎 Attach"):
            documentos.append(_guardar_adjunto(subido))
            st.rerun()

    # =========================================================================
    # GUARDAR
    # =========================================================================
    c_save, c_back = st.columns(2)
    if c_save.button("💾 Save", type="primary", use_container_width=True):
        if not nombre.strip():
            st.error("Missing medication name.")
            return

        # Si la fecha no cambia se conserva el texto original (puede llevar hora)
        if med and fecha == fecha_original:
            fecha_iso = med.expiry_date
        else:
            fecha_iso = fecha.isoformat()

        campos = med.a_dict() if med else {}
        campos.update({
            "name": nombre.strip(),
            "expiryDate": fecha_iso,
            "totalQuantity": cantidad,
            "notes": notas or None,
            "documents": [d.model_dump(by_alias=True) for d in documentos] or None,
        })
        if con_pauta:
            campos.update({
                "intervalHours": intervalo,
                "startTime": hora_inicio.strftime("%H:%M"),
                "dosePerIntake": dosis,
            })
        else:
            for clave in ("intervalHours", "startTime", "dosePerIntake"):
                campos.pop(clave, None)

        if es_nuevo:
            agregar_medicamento(campos)
            st.toast(f"✅ {nombre} added to the inventory.")
        else:
            resultado = actualizar_medicamento(campos)
            if not resultado.encontrado:
                st.warning("⚠️ The record was deleted meanwhile; nothing was saved.")
                return
            st.toast(f"✅ {nombre} updated.")

        del st.session_state[clave_docs]
        volver_callback()

    if c_back.button("⬅️ Back", use_container_width=True):
        st.session_state.pop(clave_docs, None)
        volver_callback()
