# makerchip/errors.py
from __future__ import annotations

from typing import Iterable, Tuple


class MakerchipError(Exception):
    """Base de todos los errores del generador."""


class ConfigurationError(MakerchipError, ValueError):
    """Parámetros inválidos: se reporta al llamante, sin salida parcial."""


class UnknownPatternError(ConfigurationError, KeyError):
    def __init__(self, name: str, available: Iterable[str]):
        self.name = name
        self.available: Tuple[str, ...] = tuple(available)
        super().__init__(
            f"Unknown shape: {name}. Available shapes: {', '.join(self.available)}"
        )

    # KeyError envuelve el mensaje en comillas; queremos el texto tal cual
    def __str__(self) -> str:
        return self.args[0] if self.args else ""


class GenerationError(MakerchipError):
    """Fallo de un sub-generador opcional (QR / imagen)."""

    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"{source}: {message}")


class SvgSamplingError(MakerchipError, ValueError):
    """El documento SVG no se puede leer."""


__all__ = [
    "MakerchipError",
    "ConfigurationError",
    "UnknownPatternError",
    "GenerationError",
    "SvgSamplingError",
]
