"""
================================================================================
UI_SETTINGS.PY - Configuración: Exportar e Importar Datos
================================================================================

EXPORTAR:
- Escribe una copia JSON del inventario en la carpeta de exportaciones
- Ofrece además la descarga directa del fichero generado

IMPORTAR:
- El usuario sube un fichero .json
- Elige "Merge" (solo se añaden los IDs nuevos) u "Overwrite" (reemplaza todo)
- Cualquier error de lectura o de formato se muestra como mensaje
================================================================================
"""

import logging
import tempfile
from pathlib import Path

import streamlit as st

from oni_med.data_manager import ErrorDatos, exportar_datos, importar_datos

logger = logging.getLogger(__name__)


def _importar_subido(subido, overwrite: bool):
    """Guarda el fichero subido en un temporal e importa desde él."""
    with tempfile.TemporaryDirectory() as carpeta:
        ruta = Path(carpeta) / subido.name
        with open(ruta, "wb") as f:
            f.write(subido.getbuffer())
        return importar_datos(ruta, overwrite=overwrite)


def render_configuracion():
    """Renderiza la pantalla de configuración."""
    st.title("Settings")

    # =========================================================================
    # EXPORTAR
    # =========================================================================
    with st.container(border=True):
        st.markdown("##### 📤 Export data")
        st.caption("Saves a JSON copy of the whole inventory. Each export creates a new file.")

        if st.button("Export data", type="primary", use_container_width=True):
            try:
                ruta = exportar_datos()
            except (OSError, ErrorDatos) as e:
                logger.error("Error al exportar los datos: %s", e)
                st.error("Could not export the data.")
            else:
                st.success(f"✅ Export saved to: {ruta}")
                st.session_state.ultima_exportacion = str(ruta)

        ultima = st.session_state.get("ultima_exportacion")
        if ultima and Path(ultima).exists():
            st.download_button(
                "⬇️ Download last export",
                data=Path(ultima).read_bytes(),
                file_name=Path(ultima).name,
                mime="application/json",
                use_container_width=True,
            )

    # =========================================================================
    # IMPORTAR
    # =========================================================================
    with st.container(border=True):
        st.markdown("##### 📥 Import data")
        subido = st.file_uploader("JSON file", type=["json"], key="fichero_importacion")

        if subido:
            modo = st.radio(
                "Do you want to overwrite all existing data or merge with the new data?",
                ["Merge", "Overwrite"],
                horizontal=True,
            )
            if modo == "Overwrite":
                st.warning("⚠️ Overwrite replaces the whole inventory.")

            if st.button("Import", type="primary", use_container_width=True):
                overwrite = modo == "Overwrite"
                try:
                    lista = _importar_subido(subido, overwrite)
                except (OSError, ErrorDatos) as e:
                    logger.error("Error al importar %s: %s", subido.name, e)
                    st.error(f"An error occurred while importing {subido.name}.")
                else:
                    accion = "overwritten" if overwrite else "merged"
                    st.success(f"✅ Data {accion} from {subido.name} ({len(lista)} records).")
