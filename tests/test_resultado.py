from logic.modelos import CoincidenciaAproximada, CoincidenciaExacta, RegistroCanonico
from logic.resultado import armar_resultado, mensaje_resumen


def reg(debito="0", credito="0"):
    return RegistroCanonico("01/01/2024", "N/A", "N/A", debito, credito)


def _resultado():
    s = [reg(debito="10"), reg(debito="20"), reg(debito="30"), reg(debito="40")]
    b = [reg(credito="10"), reg(credito="20.5"), reg(credito="99")]
    return armar_resultado(
        [CoincidenciaExacta(s[0], b[0], 0, 0)],
        [CoincidenciaAproximada(s[1], b[1], 1, 1, 0.5), CoincidenciaAproximada(s[2], b[2], 2, 2, 69.0)],
        [s[3]],
        [],
        100.0,
    )


def test_totales_deducidos_de_las_colecciones():
    r = _resultado()
    assert r.total_sistema == 4
    assert r.total_banco == 3
    assert r.total_coincidencias == 3
    assert r.tasa_coincidencia == 75.0


def test_colecciones_inmutables():
    r = _resultado()
    assert isinstance(r.coincidencias_exactas, tuple)
    assert isinstance(r.sin_coincidencia, tuple)


def test_resumen():
    resumen = _resultado().resumen()
    assert resumen["coincidencias_exactas"] == 1
    assert resumen["coincidencias_aproximadas"] == 2
    assert resumen["sin_coincidencia"] == 1
    assert resumen["banco_no_utilizados"] == 0
    assert resumen["margen_tolerancia"] == 100.0


def test_tasa_sin_registros_es_cero():
    r = armar_resultado([], [], [], [reg(credito="1")], 0.01)
    assert r.tasa_coincidencia == 0.0
    assert r.total_banco == 1


def test_totales_explicitos():
    r = armar_resultado([], [], [], [], 0.01, total_sistema=5, total_banco=2)
    assert r.total_sistema == 5 and r.total_banco == 2


def test_mensaje_resumen():
    assert mensaje_resumen(_resultado()) == (
        "Conciliación completada con margen de 100.00. Coincidencias: 3/4 (75%)"
    )
