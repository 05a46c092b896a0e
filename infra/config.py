from __future__ import annotations
import yaml
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class AppConfig:
    title: str
    page_layout: str


@dataclass(frozen=True)
class ConciliacionConfig:
    margen_tolerancia_default: float
    opciones_tolerancia: list[float]


@dataclass(frozen=True)
class LecturaConfig:
    csv_encodings: list[str]
    csv_separadores: list[str]
    extensiones: list[str]


@dataclass(frozen=True)
class Config:
    app: AppConfig
    conciliacion: ConciliacionConfig
    lectura: LecturaConfig


def load_config(path: str | Path = "config.yaml") -> Config:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    app = AppConfig(**data["app"])
    conc = ConciliacionConfig(**data["conciliacion"])
    lec = LecturaConfig(**data["lectura"])

    if conc.margen_tolerancia_default < 0:
        raise ValueError("conciliacion.margen_tolerancia_default debe ser positivo")

    return Config(app=app, conciliacion=conc, lectura=lec)
