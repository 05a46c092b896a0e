from __future__ import annotations
from typing import Callable, Sequence

from logic.modelos import (
    CoincidenciaAproximada,
    CoincidenciaExacta,
    RegistroCanonico,
    ResultadoConciliacion,
)
from logic.resultado import armar_resultado


MARGEN_TOLERANCIA_DEFAULT = 0.01
EPSILON_EXACTO = 0.001

Diagnostico = Callable[[str, dict], None]


def _buscar_exacta(
    objetivo: float,
    lado: str,
    banco: Sequence[RegistroCanonico],
    usados: list[bool],
) -> int | None:
    """Índice del primer registro del banco libre con importe opuesto igual (no el más cercano)."""
    for j, reg in enumerate(banco):
        if usados[j]:
            continue
        if abs(reg.importe_opuesto(lado) - objetivo) < EPSILON_EXACTO:
            return j
    return None


def _buscar_aproximada(
    objetivo: float,
    lado: str,
    banco: Sequence[RegistroCanonico],
    usados: list[bool],
    margen_tolerancia: float,
) -> tuple[int | None, float]:
    """Mejor candidato dentro del margen; ante empate gana el primero encontrado."""
    mejor, menor_diferencia = None, float("inf")
    for j, reg in enumerate(banco):
        if usados[j]:
            continue
        diferencia = abs(reg.importe_opuesto(lado) - objetivo)
        if diferencia <= margen_tolerancia and diferencia < menor_diferencia:
            mejor, menor_diferencia = j, diferencia
    return mejor, menor_diferencia


def conciliar(
    sistema: Sequence[RegistroCanonico],
    banco: Sequence[RegistroCanonico],
    margen_tolerancia: float = MARGEN_TOLERANCIA_DEFAULT,
    diagnostico: Diagnostico | None = None,
) -> ResultadoConciliacion:
    """Empareja registros del sistema con registros del banco.

    Algoritmo voraz en dos pasadas, dependiente del orden de entrada:

    1. Exactas: por cada registro del sistema (en orden) se toma el primer
       registro del banco libre cuyo importe del lado opuesto difiere en menos
       de `EPSILON_EXACTO`. Se usa el débito si es positivo, si no el crédito.
    2. Aproximadas: los registros sin exacta toman, entre los registros del
       banco aún libres, el de menor diferencia siempre que sea
       `<= margen_tolerancia`. Ante diferencias iguales gana el de menor índice.

    Los registros del banco nunca consumidos quedan como no utilizados.
    No se mantiene estado entre llamadas.
    """
    if margen_tolerancia < 0:
        raise ValueError("El margen de tolerancia debe ser positivo")

    sistema = list(sistema)
    banco = list(banco)
    if diagnostico:
        diagnostico("inicio", {
            "registros_sistema": len(sistema),
            "registros_banco": len(banco),
            "margen_tolerancia": margen_tolerancia,
        })

    if not sistema or not banco:
        resultado = armar_resultado([], [], sistema, banco, margen_tolerancia)
        if diagnostico:
            diagnostico("fin", resultado.resumen())
        return resultado

    exactas: list[CoincidenciaExacta] = []
    aproximadas: list[CoincidenciaAproximada] = []
    sin_coincidencia: list[RegistroCanonico] = []
    usados = [False] * len(banco)
    pendientes: list[int] = []

    # --- Paso 1: coincidencias exactas ---
    for i, reg in enumerate(sistema):
        if reg.importe_objetivo == 0:
            # sin importe en ningún lado: nunca concilia
            pendientes.append(i)
            continue
        j = _buscar_exacta(reg.importe_objetivo, reg.lado, banco, usados)
        if j is None:
            pendientes.append(i)
            continue
        usados[j] = True
        exactas.append(CoincidenciaExacta(sistema=reg, banco=banco[j], indice_sistema=i, indice_banco=j))

    # --- Paso 2: coincidencias aproximadas entre los restantes ---
    for i in pendientes:
        reg = sistema[i]
        if reg.importe_objetivo == 0:
            sin_coincidencia.append(reg)
            continue
        j, diferencia = _buscar_aproximada(reg.importe_objetivo, reg.lado, banco, usados, margen_tolerancia)
        if j is None:
            sin_coincidencia.append(reg)
            continue
        usados[j] = True
        aproximadas.append(CoincidenciaAproximada(
            sistema=reg,
            banco=banco[j],
            indice_sistema=i,
            indice_banco=j,
            diferencia=diferencia,
        ))

    # --- Paso 3: registros del banco no utilizados ---
    no_utilizados = [reg for j, reg in enumerate(banco) if not usados[j]]

    resultado = armar_resultado(exactas, aproximadas, sin_coincidencia, no_utilizados, margen_tolerancia)
    if diagnostico:
        diagnostico("fin", resultado.resumen())
    return resultado
