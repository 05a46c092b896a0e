from __future__ import annotations
from typing import Iterable

from logic.modelos import (
    CoincidenciaAproximada,
    CoincidenciaExacta,
    RegistroCanonico,
    ResultadoConciliacion,
)


def armar_resultado(
    exactas: Iterable[CoincidenciaExacta],
    aproximadas: Iterable[CoincidenciaAproximada],
    sin_coincidencia: Iterable[RegistroCanonico],
    no_utilizados: Iterable[RegistroCanonico],
    margen_tolerancia: float,
    total_sistema: int | None = None,
    total_banco: int | None = None,
) -> ResultadoConciliacion:
    """Congela las cuatro colecciones en un ResultadoConciliacion.

    Si no se indican los totales se deducen de las colecciones: cada registro
    del sistema está en exactas, aproximadas o sin coincidencia, y cada
    registro del banco en exactas, aproximadas o no utilizados.
    """
    exactas = tuple(exactas)
    aproximadas = tuple(aproximadas)
    sin_coincidencia = tuple(sin_coincidencia)
    no_utilizados = tuple(no_utilizados)
    emparejados = len(exactas) + len(aproximadas)

    return ResultadoConciliacion(
        coincidencias_exactas=exactas,
        coincidencias_aproximadas=aproximadas,
        sin_coincidencia=sin_coincidencia,
        banco_no_utilizados=no_utilizados,
        margen_tolerancia=margen_tolerancia,
        total_sistema=total_sistema if total_sistema is not None else emparejados + len(sin_coincidencia),
        total_banco=total_banco if total_banco is not None else emparejados + len(no_utilizados),
    )


def mensaje_resumen(resultado: ResultadoConciliacion) -> str:
    return (
        f"Conciliación completada con margen de {resultado.margen_tolerancia:.2f}. "
        f"Coincidencias: {resultado.total_coincidencias}/{resultado.total_sistema} "
        f"({int(resultado.tasa_coincidencia + 0.5)}%)"
    )
