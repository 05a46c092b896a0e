from __future__ import annotations
from dataclasses import dataclass, field
from typing import Literal

from logic.importes import limpiar_y_convertir


Lado = Literal["debito", "credito"]

CAMPOS_CANONICOS = ("fecha", "referencia", "descripcion", "debito", "credito")


@dataclass(frozen=True)
class RegistroCanonico:
    fecha: str           # texto tal cual viene del archivo
    referencia: str
    descripcion: str
    debito: str          # importe mostrado, sin reformatear
    credito: str
    debito_num: float = field(init=False, repr=False, compare=False)
    credito_num: float = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "debito_num", limpiar_y_convertir(self.debito))
        object.__setattr__(self, "credito_num", limpiar_y_convertir(self.credito))

    @property
    def lado(self) -> Lado:
        """Lado usado para conciliar: débito si es positivo, si no crédito."""
        return "debito" if self.debito_num > 0 else "credito"

    @property
    def importe_objetivo(self) -> float:
        return self.debito_num if self.debito_num > 0 else self.credito_num

    def importe_opuesto(self, lado: Lado) -> float:
        return self.credito_num if lado == "debito" else self.debito_num

    def como_dict(self) -> dict[str, str]:
        return {campo: getattr(self, campo) for campo in CAMPOS_CANONICOS}


@dataclass(frozen=True)
class MapeoColumnas:
    fecha: str | None
    debito: str | None
    credito: str | None
    referencia: str | None = None
    descripcion: str | None = None
    codigo_movimiento: str | None = None   # solo BHD


@dataclass(frozen=True)
class Esquema:
    nombre: str          # "navision", "bhd" o "generico"
    conocido: bool       # True = formato de proveedor fijo
    mapeo: MapeoColumnas


@dataclass(frozen=True)
class ResultadoValidacion:
    valido: bool
    mensaje: str = ""
    esquema: Esquema | None = None


@dataclass(frozen=True)
class CoincidenciaExacta:
    sistema: RegistroCanonico
    banco: RegistroCanonico
    indice_sistema: int
    indice_banco: int


@dataclass(frozen=True)
class CoincidenciaAproximada:
    sistema: RegistroCanonico
    banco: RegistroCanonico
    indice_sistema: int
    indice_banco: int
    diferencia: float


@dataclass(frozen=True)
class ResultadoConciliacion:
    coincidencias_exactas: tuple[CoincidenciaExacta, ...]
    coincidencias_aproximadas: tuple[CoincidenciaAproximada, ...]
    sin_coincidencia: tuple[RegistroCanonico, ...]
    banco_no_utilizados: tuple[RegistroCanonico, ...]
    margen_tolerancia: float
    total_sistema: int
    total_banco: int

    @property
    def total_coincidencias(self) -> int:
        return len(self.coincidencias_exactas) + len(self.coincidencias_aproximadas)

    @property
    def tasa_coincidencia(self) -> float:
        """Porcentaje de registros del sistema conciliados (0 si no hay registros)."""
        if not self.total_sistema:
            return 0.0
        return self.total_coincidencias / self.total_sistema * 100

    def resumen(self) -> dict[str, float]:
        return {
            "coincidencias_exactas": len(self.coincidencias_exactas),
            "coincidencias_aproximadas": len(self.coincidencias_aproximadas),
            "sin_coincidencia": len(self.sin_coincidencia),
            "banco_no_utilizados": len(self.banco_no_utilizados),
            "total_sistema": self.total_sistema,
            "total_banco": self.total_banco,
            "total_coincidencias": self.total_coincidencias,
            "tasa_coincidencia": self.tasa_coincidencia,
            "margen_tolerancia": self.margen_tolerancia,
        }
