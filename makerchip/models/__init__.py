"""
Registro de builders del generador.

Cada builder recibe un dict de parámetros y devuelve un `manifold3d.Manifold`:

- `makerchip`: el chip completo, compuesto según su `assembly_type`.
- `qr_code` / `image_extrude`: las sub-formas embebidas por separado.

Se crean alias snake <-> kebab automáticamente.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Optional

from manifold3d import Manifold

from .assembly import ShapeSet, assemble_makerchip_shapes, make_model
from .image_extrude import ImageExtrudeGenerator
from .params import ChipParams, EmbeddedSettings
from .patterns import PATTERN_IDS, PatternResolver, available_patterns
from .qr_code import QRCodeGenerator
from .threemf_export import ExportResult, three_mf_export

Builder = Callable[[Mapping[str, Any]], Manifold]

REGISTRY: Dict[str, Builder] = {}
ALIASES: Dict[str, str] = {}


def _register(name_snake: str, fn: Builder, *aliases: str) -> None:
    key = name_snake.lower()
    REGISTRY[key] = fn
    ALIASES.setdefault(key, key)
    ALIASES.setdefault(key.replace("_", "-"), key)
    for a in aliases:
        raw = a.strip().lower()
        ALIASES.setdefault(raw, key)
        ALIASES.setdefault(raw.replace("_", "-"), key)
        ALIASES.setdefault(raw.replace("-", "_"), key)


_register("makerchip", make_model, "maker_chip", "maker-chips", "chip")
_register("qr_code", QRCodeGenerator().generate, "qr", "qrcode")
_register("image_extrude", ImageExtrudeGenerator().generate, "image", "image-extrude")


def get_builder(slug_or_name: str) -> Optional[Builder]:
    """Resuelve un slug (snake, kebab o alias) y devuelve el callable."""
    if not slug_or_name:
        return None
    raw = slug_or_name.strip().lower()
    snake = ALIASES.get(raw, ALIASES.get(raw.replace("-", "_"), raw.replace("-", "_")))
    return REGISTRY.get(snake)


def normalize_slug(slug_or_name: str) -> str:
    raw = (slug_or_name or "").strip().lower()
    return ALIASES.get(raw, ALIASES.get(raw.replace("-", "_"), raw.replace("-", "_")))


__all__ = [
    "REGISTRY",
    "ALIASES",
    "get_builder",
    "normalize_slug",
    "ChipParams",
    "EmbeddedSettings",
    "ShapeSet",
    "ExportResult",
    "PATTERN_IDS",
    "PatternResolver",
    "available_patterns",
    "assemble_makerchip_shapes",
    "make_model",
    "three_mf_export",
]
