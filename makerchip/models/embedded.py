# makerchip/models/embedded.py
"""
Sub-formas embebidas (QR, imagen extruida).

Cada sub-generador implementa `Generator.generate(params) -> Manifold`. El
ensamblador no llama a los generadores directamente: pasa por
`generate_embedded`, que devuelve un `Generated` (ok o error). Un QR o una
imagen rotos se registran y se omiten; nunca bloquean el chip base.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Protocol, runtime_checkable

from manifold3d import Manifold

from ..errors import GenerationError
from .params import EmbeddedSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class Generator(Protocol):
    name: str

    def generate(self, params: Mapping[str, Any]) -> Manifold:
        ...


@dataclass(frozen=True)
class Generated:
    solid: Optional[Manifold] = None
    error: Optional[GenerationError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.solid is not None


def generate_embedded(generator: Generator, settings: EmbeddedSettings) -> Optional[Generated]:
    """None si está desactivado; si no, Generated con el sólido o el error."""
    if not settings.enabled:
        return None

    source = getattr(generator, "name", type(generator).__name__)
    try:
        solid = generator.generate(settings.params)
    except GenerationError as e:
        logger.warning("[makerchip] %s omitted: %s", source, e)
        return Generated(error=e)
    except Exception as e:
        logger.warning("[makerchip] %s generation failed, omitted", source, exc_info=True)
        return Generated(error=GenerationError(source, str(e) or type(e).__name__))

    if solid is None or solid.is_empty():
        err = GenerationError(source, "generator returned an empty solid")
        logger.warning("[makerchip] %s omitted: %s", source, err)
        return Generated(error=err)
    return Generated(solid=solid)


__all__ = ["Generator", "Generated", "generate_embedded"]
