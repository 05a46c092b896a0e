import logging
from typing import Callable, Optional


_logger: Optional[logging.Logger] = None


def get_logger(name: str = "conciliador", level: int = logging.INFO) -> logging.Logger:
    global _logger
    if _logger is not None:
        return _logger

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    ch = logging.StreamHandler()
    ch.setLevel(level)
    ch.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(ch)

    _logger = logger
    return logger


def diagnostico_logger(logger: Optional[logging.Logger] = None) -> Callable[[str, dict], None]:
    """Hook de diagnóstico para `conciliar` que escribe cada evento en el log."""
    log = logger or get_logger()

    def _hook(evento: str, datos: dict) -> None:
        detalle = ", ".join(f"{k}={v}" for k, v in datos.items())
        log.info("Conciliación [%s] %s", evento, detalle)

    return _hook
