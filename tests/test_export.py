import io

import pandas as pd
import pytest
from openpyxl import load_workbook

from infra.export import resultado_a_excel_bytes, resultado_a_tablas
from logic.conciliacion import conciliar
from logic.modelos import CAMPOS_CANONICOS, RegistroCanonico


def reg(referencia, debito="0", credito="0"):
    return RegistroCanonico("10/05/2024", referencia, f"Mov {referencia}", debito, credito)


def _resultado():
    sistema = [reg("S1", debito="1,000.00"), reg("S2", debito="55.00"), reg("S3", credito="7")]
    banco = [reg("B1", credito="1,000.00"), reg("B2", credito="55.05"), reg("B3", debito="12")]
    return conciliar(sistema, banco, 0.10)


def test_tablas_por_categoria():
    tablas = resultado_a_tablas(_resultado())
    assert list(tablas) == ["Exactas", "Aproximadas", "SinCoincidencia", "BancoNoUsados", "Resumen"]
    exactas = tablas["Exactas"]
    assert exactas.loc[0, "referencia"] == "S1"
    assert exactas.loc[0, "banco_referencia"] == "B1"
    assert exactas.loc[0, "debito"] == "1,000.00"
    assert tablas["Aproximadas"].loc[0, "diferencia"] == pytest.approx(0.05)
    assert tablas["SinCoincidencia"]["referencia"].tolist() == ["S3"]
    assert tablas["BancoNoUsados"]["referencia"].tolist() == ["B3"]
    assert tablas["Resumen"]["cantidad"].tolist() == [1, 1, 1, 1]


def test_tablas_vacias_conservan_columnas():
    tablas = resultado_a_tablas(conciliar([], []))
    assert tablas["Exactas"].empty
    assert "banco_credito" in tablas["Exactas"].columns
    assert "diferencia" in tablas["Aproximadas"].columns


def test_excel_una_hoja_por_tabla():
    contenido = resultado_a_excel_bytes(_resultado())
    hojas = pd.read_excel(io.BytesIO(contenido), sheet_name=None, dtype=str)
    assert list(hojas) == ["Exactas", "Aproximadas", "SinCoincidencia", "BancoNoUsados", "Resumen"]
    assert hojas["Exactas"].loc[0, "debito"] == "1,000.00"


def test_columnas_en_orden_canonico():
    tablas = resultado_a_tablas(_resultado())
    assert list(tablas["SinCoincidencia"].columns) == list(CAMPOS_CANONICOS)
    assert list(tablas["Exactas"].columns) == (
        list(CAMPOS_CANONICOS) + [f"banco_{c}" for c in CAMPOS_CANONICOS]
    )
    registro = _resultado().sin_coincidencia[0]
    assert tablas["SinCoincidencia"].iloc[0].to_dict() == registro.como_dict()


def test_diferencia_de_milesimas_no_se_redondea():
    resultado = conciliar([reg("S1", debito="100.003")], [reg("B1", credito="100.000")], 0.01)
    tablas = resultado_a_tablas(resultado)
    diferencia = tablas["Aproximadas"].loc[0, "diferencia"]
    assert diferencia == pytest.approx(0.003)
    assert diferencia > 0

    wb = load_workbook(io.BytesIO(resultado_a_excel_bytes(resultado)))
    ws = wb["Aproximadas"]
    encabezados = [c.value for c in ws[1]]
    celda = ws.cell(row=2, column=encabezados.index("diferencia") + 1)
    assert celda.value == pytest.approx(0.003)
    assert celda.number_format == "#,##0.000"
