from __future__ import annotations
import io
import pandas as pd
from openpyxl.utils import get_column_letter

from logic.modelos import CAMPOS_CANONICOS, RegistroCanonico, ResultadoConciliacion


COLUMNAS_REGISTRO = list(CAMPOS_CANONICOS)
COLUMNAS_BANCO = [f"banco_{c}" for c in COLUMNAS_REGISTRO]

# Anchos (en caracteres) de las columnas del registro
ANCHOS = {"fecha": 12, "referencia": 15, "descripcion": 30, "debito": 12, "credito": 12, "diferencia": 12}

# Las diferencias aproximadas pueden ser de milésimas
FORMATO_DIFERENCIA = "#,##0.000"


def _fila_par(sistema: RegistroCanonico, banco: RegistroCanonico) -> dict:
    fila = sistema.como_dict()
    fila.update({f"banco_{c}": v for c, v in banco.como_dict().items()})
    return fila


def registros_a_dataframe(registros) -> pd.DataFrame:
    return pd.DataFrame(
        [r.como_dict() for r in registros],
        columns=COLUMNAS_REGISTRO,
    )


def resultado_a_tablas(resultado: ResultadoConciliacion) -> dict[str, pd.DataFrame]:
    """Tablas de presentación, una por hoja del reporte. No modifica el resultado."""
    exactas = pd.DataFrame(
        [_fila_par(m.sistema, m.banco) for m in resultado.coincidencias_exactas],
        columns=COLUMNAS_REGISTRO + COLUMNAS_BANCO,
    )
    aproximadas = pd.DataFrame(
        [{**_fila_par(m.sistema, m.banco), "diferencia": m.diferencia}
         for m in resultado.coincidencias_aproximadas],
        columns=COLUMNAS_REGISTRO + COLUMNAS_BANCO + ["diferencia"],
    )
    resumen = pd.DataFrame([
        {"categoria": "Coincidencias Exactas", "cantidad": len(resultado.coincidencias_exactas)},
        {"categoria": "Coincidencias Aproximadas", "cantidad": len(resultado.coincidencias_aproximadas)},
        {"categoria": "Sin Coincidencia", "cantidad": len(resultado.sin_coincidencia)},
        {"categoria": "Registros del Banco No Utilizados", "cantidad": len(resultado.banco_no_utilizados)},
    ])
    return {
        "Exactas": exactas,
        "Aproximadas": aproximadas,
        "SinCoincidencia": registros_a_dataframe(resultado.sin_coincidencia),
        "BancoNoUsados": registros_a_dataframe(resultado.banco_no_utilizados),
        "Resumen": resumen,
    }


def resultado_a_excel_bytes(resultado: ResultadoConciliacion) -> bytes:
    """Exporta el resultado a un libro Excel con una hoja por categoría."""
    buff = io.BytesIO()
    with pd.ExcelWriter(buff, engine="openpyxl") as writer:
        for sheet_name, df in resultado_a_tablas(resultado).items():
            df.to_excel(writer, index=False, sheet_name=sheet_name)
            ws = writer.sheets[sheet_name]
            for idx, col in enumerate(df.columns, start=1):
                base = str(col).removeprefix("banco_")
                ws.column_dimensions[get_column_letter(idx)].width = ANCHOS.get(base, 15)
                if col == "diferencia":
                    for (celda,) in ws.iter_rows(min_row=2, min_col=idx, max_col=idx):
                        celda.number_format = FORMATO_DIFERENCIA
    return buff.getvalue()
