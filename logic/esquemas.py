from __future__ import annotations

from typing import Iterable, Sequence

from logic.modelos import Esquema, MapeoColumnas, ResultadoValidacion


MENSAJE_SIN_DATOS = "El archivo no contiene datos válidos."
MENSAJE_SIN_COLUMNAS = (
    "No se pudieron identificar las columnas necesarias para la conciliación. "
    "Se requieren columnas para fecha y débito/crédito."
)

# Patrones por categoría, en orden de prioridad
PATRONES_FECHA = ["fecha", "date", "posting date", "posting"]
PATRONES_DEBITO = ["déb", "deb", "cargo", "debe", "debit"]
PATRONES_CREDITO = ["créd", "cred", "abono", "haber", "credit"]
PATRONES_REFERENCIA = ["ref", "no.", "num", "document", "ncf"]
PATRONES_DESCRIPCION = ["desc", "concept", "detalle", "mov"]


def _primera_que_contiene(columnas: Sequence[str], fragmentos: Iterable[str]) -> str | None:
    """Primera columna (en orden original) que contiene alguno de los fragmentos, sensible a mayúsculas."""
    fragmentos = list(fragmentos)
    for col in columnas:
        if any(f in col for f in fragmentos):
            return col
    return None


class EsquemaNavision:
    """Exportación contable de Navision / Dynamics (columnas en inglés fijas)."""

    nombre = "navision"
    conocido = True

    def detectar(self, columnas: Sequence[str]) -> MapeoColumnas | None:
        requeridas = ("Posting Date", "Document No.", "Debit")
        if not all(c in columnas for c in requeridas):
            return None
        return MapeoColumnas(
            fecha="Posting Date",
            debito="Debit",
            credito="Credit",
            referencia="Document No.",
            descripcion="Description",
        )


class EsquemaBHD:
    """Estado de cuenta del Banco BHD."""

    nombre = "bhd"
    conocido = True

    def detectar(self, columnas: Sequence[str]) -> MapeoColumnas | None:
        if "Fecha" not in columnas:
            return None
        if "Débito" not in columnas and " Débito " not in columnas:
            return None
        referencia = next((c for c in columnas if c in ("Referencia", "NCF")), None)
        return MapeoColumnas(
            fecha="Fecha",
            debito=_primera_que_contiene(columnas, ["Débito", "Debito"]),
            credito=_primera_que_contiene(columnas, ["Crédito", "Credito"]),
            referencia=referencia,
            descripcion=_primera_que_contiene(columnas, ["Desc", "Movimiento"]),
            codigo_movimiento=_primera_que_contiene(columnas, ["Cód", "Cod", "Código"]),
        )


class EsquemaGenerico:
    """Inferencia por palabras clave cuando no se reconoce ningún formato fijo."""

    nombre = "generico"
    conocido = False

    def detectar(self, columnas: Sequence[str]) -> MapeoColumnas | None:
        mapeo = generar_mapeador_columnas(columnas)
        if mapeo.fecha and (mapeo.debito or mapeo.credito):
            return mapeo
        return None


# Se prueban en orden; el primero que reconoce las columnas gana
ESTRATEGIAS = [EsquemaNavision(), EsquemaBHD(), EsquemaGenerico()]


def generar_mapeador_columnas(columnas: Sequence[str]) -> MapeoColumnas:
    cols = [str(c) for c in columnas]
    limpias = [c.lower().strip() for c in cols]

    def pick(patrones):
        # El primer patrón con alguna coincidencia elige la primera columna que lo contiene
        for patron in patrones:
            for original, limpia in zip(cols, limpias):
                if patron in limpia:
                    return original
        return None

    return MapeoColumnas(
        fecha=pick(PATRONES_FECHA),
        debito=pick(PATRONES_DEBITO),
        credito=pick(PATRONES_CREDITO),
        referencia=pick(PATRONES_REFERENCIA),
        descripcion=pick(PATRONES_DESCRIPCION),
    )


def detectar_esquema(columnas: Sequence[str], estrategias=None) -> Esquema | None:
    """Devuelve el esquema del primer detector que reconoce las columnas, o None."""
    cols = [str(c) for c in columnas]
    for estrategia in (estrategias if estrategias is not None else ESTRATEGIAS):
        mapeo = estrategia.detectar(cols)
        if mapeo is not None:
            return Esquema(
                nombre=estrategia.nombre,
                conocido=estrategia.conocido,
                mapeo=mapeo,
            )
    return None


def validar_formato_archivo(filas) -> ResultadoValidacion:
    """Valida que las filas crudas tengan columnas de fecha y de débito/crédito.

    Nunca lanza excepciones: el resultado indica si es válido y, si no, el motivo.
    """
    if not isinstance(filas, (list, tuple)) or len(filas) == 0:
        return ResultadoValidacion(valido=False, mensaje=MENSAJE_SIN_DATOS)

    primera = filas[0]
    if not isinstance(primera, dict):
        return ResultadoValidacion(valido=False, mensaje=MENSAJE_SIN_DATOS)

    esquema = detectar_esquema(list(primera.keys()))
    if esquema is None:
        return ResultadoValidacion(valido=False, mensaje=MENSAJE_SIN_COLUMNAS)
    return ResultadoValidacion(valido=True, esquema=esquema)
