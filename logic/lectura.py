from __future__ import annotations

import math
from numbers import Integral, Real

import pandas as pd

from infra.logger import get_logger
from logic.esquemas import detectar_esquema, validar_formato_archivo, MENSAJE_SIN_COLUMNAS
from logic.modelos import Esquema, RegistroCanonico, ResultadoValidacion


SIN_TEXTO = "N/A"
SIN_IMPORTE = "0"


def _texto_celda(valor) -> str:
    """Devuelve el texto de la celda tal cual; "" si está vacía.

    Los números enteros que llegan como float se muestran sin el sufijo `.0`.
    """
    if valor is None:
        return ""
    if isinstance(valor, str):
        return valor
    if isinstance(valor, bool):
        return str(valor)
    if isinstance(valor, Integral):
        return str(int(valor))
    if isinstance(valor, Real):
        numero = float(valor)
        if math.isnan(numero):
            return ""
        if math.isfinite(numero) and numero.is_integer():
            return str(int(numero))
        return str(valor)
    if pd.api.types.is_scalar(valor) and pd.isna(valor):
        return ""
    return str(valor)


def _valor(fila: dict, columna: str | None, defecto: str) -> str:
    if not columna:
        return defecto
    texto = _texto_celda(fila.get(columna))
    return texto if texto != "" else defecto


def _descripcion_bhd(fila: dict, esquema: Esquema) -> str:
    desc = _texto_celda(fila.get(esquema.mapeo.descripcion)) if esquema.mapeo.descripcion else ""
    codigo = _texto_celda(fila.get(esquema.mapeo.codigo_movimiento)) if esquema.mapeo.codigo_movimiento else ""
    if codigo and desc and codigo not in desc:
        return f"{codigo} - {desc}"
    return desc or codigo or SIN_TEXTO


def normalizar_fila(fila: dict, esquema: Esquema) -> RegistroCanonico:
    m = esquema.mapeo
    if esquema.nombre == "bhd":
        descripcion = _descripcion_bhd(fila, esquema)
    else:
        descripcion = _valor(fila, m.descripcion, SIN_TEXTO)
    return RegistroCanonico(
        fecha=_valor(fila, m.fecha, SIN_TEXTO),
        referencia=_valor(fila, m.referencia, SIN_TEXTO),
        descripcion=descripcion,
        debito=_valor(fila, m.debito, SIN_IMPORTE),
        credito=_valor(fila, m.credito, SIN_IMPORTE),
    )


def normalizar_datos(filas: list[dict], esquema: Esquema | None = None) -> list[RegistroCanonico]:
    """Convierte filas crudas en registros canónicos, en el mismo orden.

    Si no se indica el esquema se detecta a partir de las columnas de la primera
    fila. Lanza ValueError si las columnas no permiten conciliar; para obtener el
    motivo sin excepción usar `validar_formato_archivo`.
    """
    if not filas:
        return []
    if esquema is None:
        esquema = detectar_esquema(list(filas[0].keys()))
        if esquema is None:
            raise ValueError(MENSAJE_SIN_COLUMNAS)

    registros = [normalizar_fila(fila, esquema) for fila in filas]
    get_logger().info(
        "Esquema '%s' (%s): %d registros normalizados",
        esquema.nombre, "fijo" if esquema.conocido else "inferido", len(registros),
    )
    return registros


def cargar_registros(filas) -> tuple[ResultadoValidacion, list[RegistroCanonico]]:
    """Valida las filas y, si son válidas, las normaliza."""
    validacion = validar_formato_archivo(filas)
    if not validacion.valido:
        get_logger().warning("Archivo rechazado: %s", validacion.mensaje)
        return validacion, []
    return validacion, normalizar_datos(filas, validacion.esquema)
