from __future__ import annotations

import re
from numbers import Real


_NO_NUMERICO = re.compile(r"[^\d.\-]")
_PREFIJO_NUMERICO = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


def limpiar_y_convertir(valor) -> float:
    """Extrae el valor numérico de un importe mostrado como texto.

    Solo se usa para comparar importes, nunca para mostrarlos. Elimina todo lo
    que no sea dígito, punto o signo menos (incluidos separadores de miles) y
    lee el número inicial. Si no queda nada legible devuelve 0.

    >>> limpiar_y_convertir("RD$ 1,250.75")
    1250.75
    >>> limpiar_y_convertir("abc")
    0.0
    """
    if valor is None:
        return 0.0
    if isinstance(valor, Real) and not isinstance(valor, bool):
        return valor
    limpio = _NO_NUMERICO.sub("", str(valor))
    if not limpio:
        return 0.0
    m = _PREFIJO_NUMERICO.match(limpio)
    if m is None:
        return 0.0
    return float(m.group(0))
