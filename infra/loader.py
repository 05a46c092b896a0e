from __future__ import annotations

import io
import math
import re
from datetime import date, datetime, time
from pathlib import Path
from typing import BinaryIO, Union

import pandas as pd
from openpyxl import load_workbook

from infra.config import LecturaConfig
from infra.logger import get_logger


LECTURA_DEFAULT = LecturaConfig(
    csv_encodings=["utf-8-sig", "latin1", "cp1252"],
    csv_separadores=[";", ",", "\t"],
    extensiones=[".csv", ".xlsx", ".xls", ".xlsm"],
)

Archivo = Union[str, Path, BinaryIO]

# [Red], [$-409], [$RD$-1C0A], ...
_CORCHETES = re.compile(r"\[[^\]]*\]")
_PATRON_NUMERO = re.compile(r"[#0?][#0?,]*(?:\.[#0?]*)?(?:[Ee][+-][#0]+)?")
_TOKENS_FECHA = re.compile(r"am/pm|yyyy|yy|mmmm|mmm|mm|m|dddd|ddd|dd|d|hh|h|ss|s", re.IGNORECASE)


def _leer_bytes(archivo: Archivo) -> bytes:
    if isinstance(archivo, (str, Path)):
        return Path(archivo).read_bytes()
    if hasattr(archivo, "getvalue"):
        return archivo.getvalue()
    try:
        archivo.seek(0)
    except Exception:
        pass
    return archivo.read()


def _limpiar(df: pd.DataFrame) -> pd.DataFrame:
    """Quita columnas sin nombre vacías (separador final) y filas en blanco."""
    df = df.fillna("")
    if df.empty:
        return df
    to_drop = [
        col for col in df.columns
        if str(col).startswith("Unnamed") and (df[col].astype(str).str.strip() == "").all()
    ]
    if to_drop:
        df = df.drop(columns=to_drop)
    vacias = (df.astype(str).apply(lambda s: s.str.strip()) == "").all(axis=1)
    return df[~vacias].reset_index(drop=True)


def leer_csv_seguro(data: bytes, nombre: str, lectura: LecturaConfig = LECTURA_DEFAULT) -> pd.DataFrame:
    """Intenta leer un CSV probando encodings y separadores comunes."""
    for enc in lectura.csv_encodings:
        for sep in lectura.csv_separadores:
            try:
                df = pd.read_csv(
                    io.BytesIO(data),
                    encoding=enc,
                    sep=sep,
                    engine="python",
                    dtype=str,
                    keep_default_na=False,
                    skip_blank_lines=True,
                )
            except (UnicodeDecodeError, pd.errors.ParserError, pd.errors.EmptyDataError):
                continue
            if df.shape[1] > 1:
                get_logger().info("CSV %s leído con encoding=%s sep=%r", nombre, enc, sep)
                return df
    raise ValueError(f"No se pudo leer {nombre} con encoding/separador común.")


def _texto_general(valor) -> str:
    """Formato General de Excel: los números enteros se muestran sin decimales."""
    if isinstance(valor, bool):
        return "VERDADERO" if valor else "FALSO"
    if isinstance(valor, float):
        if math.isnan(valor):
            return ""
        if valor.is_integer():
            return str(int(valor))
        return repr(valor)
    return str(valor)


def _literal(texto: str) -> str:
    # relleno (_x, *x), comillas y escapes no se muestran tal cual
    texto = re.sub(r"[_*].", "", texto)
    return texto.replace('"', "").replace("\\", "")


def _formatear_numero(valor: float, formato: str) -> str:
    secciones = formato.split(";")
    seccion = secciones[0]
    if valor < 0 and len(secciones) > 1 and secciones[1]:
        seccion, valor = secciones[1], abs(valor)
    seccion = _CORCHETES.sub("", seccion)
    if seccion.strip().lower() in ("", "general", "@"):
        return _texto_general(valor)

    m = _PATRON_NUMERO.search(seccion)
    if not m:
        return _texto_general(valor)
    patron = m.group(0)
    prefijo, sufijo = _literal(seccion[: m.start()]), _literal(seccion[m.end():])

    exponente = bool(re.search(r"[Ee]", patron))
    enteros, _, decimales = re.sub(r"[Ee][+-]?[0#]*", "", patron).partition(".")
    minimo, maximo = decimales.count("0"), len(decimales)
    if "%" in sufijo:
        valor *= 100

    if exponente:
        texto = f"{valor:.{maximo}E}"
    else:
        miles = "," if "," in enteros else ""
        texto = f"{valor:{miles}.{maximo}f}"
        if maximo > minimo:
            # los '#' decimales son opcionales
            entero, _, frac = texto.partition(".")
            frac = frac[:minimo] + frac[minimo:].rstrip("0")
            texto = f"{entero}.{frac}" if frac else entero
    return f"{prefijo}{texto}{sufijo}"


def _formatear_fecha(valor, formato: str) -> str:
    formato = _CORCHETES.sub("", formato.split(";")[0]).replace('"', "").replace("\\", "")
    if formato.strip().lower() in ("", "general"):
        return _texto_fecha(valor)

    doce_horas = "am/pm" in formato.lower()
    tokens = list(_TOKENS_FECHA.finditer(formato))
    partes, pos, anterior = [], 0, ""
    for k, t in enumerate(tokens):
        partes.append(formato[pos:t.start()])
        tok = t.group(0).lower()
        siguiente = tokens[k + 1].group(0).lower() if k + 1 < len(tokens) else ""
        if tok in ("m", "mm") and (anterior.startswith("h") or siguiente.startswith("s")):
            tok = "min" if tok == "m" else "mmin"
        partes.append(_componente_fecha(valor, tok, doce_horas))
        anterior, pos = tok, t.end()
    partes.append(formato[pos:])
    return "".join(partes)


def _componente_fecha(valor, tok: str, doce_horas: bool) -> str:
    hora = getattr(valor, "hour", 0)
    if doce_horas:
        hora = hora % 12 or 12
    componentes = {
        "yyyy": lambda: f"{valor.year:04d}",
        "yy": lambda: f"{valor.year % 100:02d}",
        "mmmm": lambda: valor.strftime("%B"),
        "mmm": lambda: valor.strftime("%b"),
        "mm": lambda: f"{valor.month:02d}",
        "m": lambda: str(valor.month),
        "dddd": lambda: valor.strftime("%A"),
        "ddd": lambda: valor.strftime("%a"),
        "dd": lambda: f"{valor.day:02d}",
        "d": lambda: str(valor.day),
        "hh": lambda: f"{hora:02d}",
        "h": lambda: str(hora),
        "mmin": lambda: f"{getattr(valor, 'minute', 0):02d}",
        "min": lambda: str(getattr(valor, "minute", 0)),
        "ss": lambda: f"{getattr(valor, 'second', 0):02d}",
        "s": lambda: str(getattr(valor, "second", 0)),
        "am/pm": lambda: "AM" if getattr(valor, "hour", 0) < 12 else "PM",
    }
    return componentes[tok]()


def _texto_fecha(valor) -> str:
    if isinstance(valor, datetime):
        if valor.time() == time(0, 0):
            return valor.strftime("%Y-%m-%d")
        return valor.strftime("%Y-%m-%d %H:%M:%S")
    return valor.isoformat()


def texto_mostrado(celda) -> str:
    """Texto que Excel muestra para la celda, según su `number_format`."""
    valor = celda.value
    if valor is None:
        return ""
    if isinstance(valor, str):
        return valor
    if isinstance(valor, (datetime, date, time)):
        return _formatear_fecha(valor, celda.number_format or "General")
    if isinstance(valor, bool):
        return _texto_general(valor)
    if isinstance(valor, (int, float)):
        return _formatear_numero(valor, celda.number_format or "General")
    return str(valor)


def _encabezados(celdas) -> list[str]:
    vistos: dict[str, int] = {}
    columnas = []
    for i, celda in enumerate(celdas):
        nombre = texto_mostrado(celda) or f"Unnamed: {i}"
        if nombre in vistos:
            vistos[nombre] += 1
            nombre = f"{nombre}.{vistos[nombre]}"
        else:
            vistos[nombre] = 0
        columnas.append(nombre)
    return columnas


def _leer_xlsx(data: bytes, nombre: str) -> pd.DataFrame:
    wb = load_workbook(io.BytesIO(data), data_only=True)
    if not wb.worksheets:
        raise ValueError(f"El archivo Excel {nombre} no contiene hojas de cálculo.")
    ws = wb.worksheets[0]
    filas = [[texto_mostrado(c) for c in fila] for fila in ws.iter_rows()]
    encabezado = next(ws.iter_rows(max_row=1), None)
    if not filas or encabezado is None:
        return pd.DataFrame()
    return pd.DataFrame(filas[1:], columns=_encabezados(encabezado), dtype=str)


def _leer_xls(data: bytes) -> pd.DataFrame:
    # xlrd entrega valores, no formatos: fechas como datetime y números como float
    df = pd.read_excel(io.BytesIO(data), sheet_name=0, engine="xlrd", dtype=object)
    df.columns = [_texto_valor(c) for c in df.columns]
    return df.apply(lambda s: s.map(_texto_valor))


def _texto_valor(valor) -> str:
    if valor is None or (pd.api.types.is_scalar(valor) and pd.isna(valor)):
        return ""
    if isinstance(valor, pd.Timestamp):
        valor = valor.to_pydatetime()
    if isinstance(valor, (datetime, date, time)):
        return _texto_fecha(valor)
    return _texto_general(valor)


def leer_excel(data: bytes, nombre: str) -> pd.DataFrame:
    """Lee la primera hoja con el texto que muestra cada celda."""
    if Path(nombre).suffix.lower() == ".xls":
        return _leer_xls(data)
    return _leer_xlsx(data, nombre)


def leer_archivo(
    archivo: Archivo,
    nombre: str | None = None,
    lectura: LecturaConfig = LECTURA_DEFAULT,
) -> list[dict]:
    """Lee un CSV o Excel y devuelve sus filas como diccionarios columna -> texto.

    Los nombres de columnas y los valores se conservan tal cual vienen en el archivo.
    """
    nombre = nombre or getattr(archivo, "name", None) or str(archivo)
    ext = Path(nombre).suffix.lower()
    if ext not in lectura.extensiones:
        raise ValueError(
            "Formato de archivo no soportado. Por favor, use archivos Excel (.xlsx, .xls, .xlsm) o CSV."
        )

    data = _leer_bytes(archivo)
    if ext == ".csv":
        df = leer_csv_seguro(data, nombre, lectura)
    else:
        df = leer_excel(data, nombre)

    df = _limpiar(df)
    if df.empty:
        raise ValueError("No se encontraron datos en el archivo o el formato no es reconocible.")

    get_logger().info("Archivo %s: %d filas, columnas %s", nombre, len(df), list(df.columns))
    return df.to_dict(orient="records")
