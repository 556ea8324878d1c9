"""
makerchip: generador paramétrico de "maker chips" imprimibles.

Disco con canto redondeado, patrón de marcado, círculo central y, opcionalmente,
QR e imagen extruida. Exporta GLB (preview) o 3MF multi-pieza (multicolor).
"""
from .errors import ConfigurationError, GenerationError, MakerchipError, UnknownPatternError
from .models import (
    ChipParams,
    EmbeddedSettings,
    ShapeSet,
    assemble_makerchip_shapes,
    available_patterns,
    make_model,
    three_mf_export,
)

__version__ = "0.3.0"

__all__ = [
    "ChipParams",
    "EmbeddedSettings",
    "ShapeSet",
    "assemble_makerchip_shapes",
    "available_patterns",
    "make_model",
    "three_mf_export",
    "MakerchipError",
    "ConfigurationError",
    "GenerationError",
    "UnknownPatternError",
    "__version__",
]
