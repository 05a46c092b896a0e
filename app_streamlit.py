from datetime import datetime

import pandas as pd
import streamlit as st

from infra.config import load_config
from infra.export import registros_a_dataframe, resultado_a_excel_bytes, resultado_a_tablas
from infra.loader import leer_archivo
from infra.logger import diagnostico_logger, get_logger
from logic.conciliacion import conciliar
from logic.lectura import cargar_registros
from logic.resultado import mensaje_resumen

logger = get_logger()


# =========================
# Helper para carga de archivos
# =========================
def cargar_archivo(archivo, origen: str):
    """Lee, valida y normaliza un archivo subido. Devuelve la lista de registros o None."""
    try:
        filas = leer_archivo(archivo, lectura=cfg.lectura)
    except ValueError as e:
        st.error(f"{origen}: {e}")
        return None

    validacion, registros = cargar_registros(filas)
    if not validacion.valido:
        st.error(f"{origen}: {validacion.mensaje}")
        return None

    esquema = validacion.esquema
    tipo = "formato fijo" if esquema.conocido else "detección automática"
    st.caption(f"{origen}: {len(registros)} registros cargados ({esquema.nombre}, {tipo})")
    with st.expander(f"Vista previa {origen}"):
        st.markdown("**Original**")
        st.dataframe(pd.DataFrame(filas[:3]), use_container_width=True)
        st.markdown("**Normalizado**")
        st.dataframe(registros_a_dataframe(registros[:3]), use_container_width=True)
    return registros


# =========================
# Configuración inicial
# =========================
cfg = load_config("config.yaml")
st.set_page_config(page_title=cfg.app.title, layout=cfg.app.page_layout)
st.title(cfg.app.title)

with st.expander("ℹ️ Cómo usar la conciliación"):
    st.markdown("""
    ### 📂 Paso 1: Cargar archivos
    - **Sistema**: exportación contable (Navision/Dynamics u otro CSV/Excel).
    - **Banco**: estado de cuenta (BHD u otro CSV/Excel).
    - Se detectan columnas de **Fecha, Referencia, Descripción, Débito y Crédito**.

    ### 🎚️ Paso 2: Margen de tolerancia
    - Diferencia máxima aceptada para una coincidencia aproximada.

    ### 🔎 Paso 3: Resultados
    - **Exactas**: mismo importe (débito del sistema contra crédito del banco y viceversa).
    - **Aproximadas**: diferencia dentro del margen.
    - **Sin coincidencia** y **banco no utilizados**.
    - Descarga del reporte en Excel.
    """)

# =========================
# Upload de archivos
# =========================
col_up1, col_up2 = st.columns(2)
extensiones = [e.lstrip(".") for e in cfg.lectura.extensiones]

with col_up1:
    archivo_sistema = st.file_uploader("Archivo del Sistema", type=extensiones, key="archivo_sistema")
    registros_sistema = cargar_archivo(archivo_sistema, "Sistema") if archivo_sistema else None

with col_up2:
    archivo_banco = st.file_uploader("Archivo del Banco", type=extensiones, key="archivo_banco")
    registros_banco = cargar_archivo(archivo_banco, "Banco") if archivo_banco else None

if registros_sistema is None or registros_banco is None:
    st.info("Debe cargar ambos archivos para realizar la conciliación")
    st.stop()

# =========================
# Margen de tolerancia
# =========================
st.subheader("Margen de tolerancia")
colm1, colm2 = st.columns(2)
opciones = cfg.conciliacion.opciones_tolerancia
with colm1:
    preset = st.selectbox(
        "Valores predefinidos",
        opciones,
        index=opciones.index(cfg.conciliacion.margen_tolerancia_default)
        if cfg.conciliacion.margen_tolerancia_default in opciones else 0,
        format_func=lambda v: f"{v:,.2f}",
    )
with colm2:
    margen = st.number_input("Margen (±)", value=float(preset), min_value=0.0, step=0.01, format="%.2f")

# =========================
# Conciliación
# =========================
resultado = conciliar(registros_sistema, registros_banco, margen, diagnostico=diagnostico_logger(logger))
st.success(mensaje_resumen(resultado))

m1, m2, m3, m4 = st.columns(4)
m1.metric("Coincidencias exactas", len(resultado.coincidencias_exactas))
m2.metric("Coincidencias aproximadas", len(resultado.coincidencias_aproximadas))
m3.metric("Sin coincidencia", len(resultado.sin_coincidencia))
m4.metric("Banco no utilizados", len(resultado.banco_no_utilizados))

tablas = resultado_a_tablas(resultado)
titulos = {
    "Exactas": "Coincidencias Exactas",
    "Aproximadas": "Coincidencias Aproximadas",
    "SinCoincidencia": "Registros sin Coincidencia",
    "BancoNoUsados": "Registros del Banco No Utilizados",
}
tabs = st.tabs([f"{titulos[k]} ({len(tablas[k])})" for k in titulos])
for tab, clave in zip(tabs, titulos):
    with tab:
        st.dataframe(tablas[clave], use_container_width=True)

# ---- Exportar a Excel ----
fecha_hora = datetime.now().strftime("%Y-%m-%dT%H-%M-%S")
st.download_button(
    "Descargar reporte (xlsx)",
    data=resultado_a_excel_bytes(resultado),
    file_name=f"reporte_conciliacion_{fecha_hora}.xlsx",
)
