import logging

from infra.logger import diagnostico_logger, get_logger
from logic.conciliacion import conciliar
from logic.modelos import RegistroCanonico


def test_get_logger_es_unico():
    assert get_logger() is get_logger()
    assert len(get_logger().handlers) == 1


def test_hook_registra_eventos(caplog):
    logger = logging.getLogger("diagnostico.test")
    hook = diagnostico_logger(logger)
    r = RegistroCanonico("01/01/2024", "R1", "Pago", "10.00", "0")
    b = RegistroCanonico("01/01/2024", "B1", "Pago", "0", "10.00")
    with caplog.at_level(logging.INFO, logger="diagnostico.test"):
        conciliar([r], [b], 0.01, diagnostico=hook)
    mensajes = [rec.getMessage() for rec in caplog.records]
    assert any("[inicio]" in m and "registros_sistema=1" in m for m in mensajes)
    assert any("[fin]" in m and "coincidencias_exactas=1" in m for m in mensajes)
