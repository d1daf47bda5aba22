"""
🎨 Estilos personalizados para ONI-MED
Inyecta CSS para dar a Streamlit la identidad visual de la app
"""

import streamlit as st

from oni_med.expiry import EstadoCaducidad
from oni_med.notifications import COLORES_CADUCIDAD


def inject_custom_css():
    """Inyecta CSS personalizado en la app."""

    st.markdown("""
    <style>
    /* ============================================
       🎨 ONI-MED - ESTILOS PERSONALIZADOS
       Paleta: Negro profundo + Azul cobalto + Verde HUD
    ============================================ */

    /* --- VARIABLES CSS --- */
    :root {
        --primary-bg: #0A0A0A;
        --secondary-bg: #1F1F1F;
        --secondary-text: #4A4A4A;
        --accent: #0078D4;
        --success: #00FF88;
        --danger: #FF3B3B;
        --radius: 10px;
    }

    @import url('https://fonts.googleapis.com/css2?family=Exo+2:wght@400;700&family=Orbitron:wght@700&display=swap');

    .stMarkdown p, .stTextInput label, .stNumberInput label,
    .stTextArea label, input, textarea {
        font-family: 'Exo 2', -apple-system, BlinkMacSystemFont, sans-serif;
    }

    h1, h2, h3 {
        font-family: 'Orbitron', sans-serif !important;
        font-weight: 700 !important;
    }

    /* --- TARJETAS DEL INVENTARIO --- */
    .oni-card {
        background: var(--secondary-bg);
        border: 1px solid var(--secondary-text);
        border-radius: var(--radius);
        padding: 12px 15px;
        margin: 4px 0;
    }

    .oni-card h4 {
        color: white;
        margin: 0 0 6px 0;
    }

    .oni-card p {
        color: #9A9A9A;
        margin: 2px 0;
    }

    /* --- BOTONES --- */
    .stButton > button {
        border-radius: 8px !important;
        font-weight: 500 !important;
        transition: all 0.2s ease !important;
    }

    .stButton > button[kind="primary"] {
        background: var(--accent) !important;
        color: white !important;
        border: none !important;
    }

    .stButton > button:hover {
        transform: translateY(-1px) !important;
    }

    /* --- MÉTRICAS --- */
    [data-testid="stMetric"] {
        background: var(--secondary-bg) !important;
        padding: 1rem 1.25rem !important;
        border-radius: var(--radius) !important;
        border-left: 4px solid var(--accent) !important;
    }
    </style>
    """, unsafe_allow_html=True)


def estilo_caducidad(estado: EstadoCaducidad) -> str:
    """Estilo en línea del texto de caducidad de una tarjeta."""
    color = COLORES_CADUCIDAD[estado]
    if estado == EstadoCaducidad.CADUCADO:
        return f"color: {color}; font-weight: bold;"
    if estado == EstadoCaducidad.NORMAL:
        return "color: #9A9A9A;"
    return f"color: {color};"
