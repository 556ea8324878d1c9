# makerchip/models/assembly.py
"""
Composición del chip: disco base, patrón de marcado, círculo central y
sub-formas opcionales (QR, imagen) en una de dos disposiciones:

- "flat": piezas separadas en el plano para inspección/preview.
- "printable": piezas superpuestas en su posición final, una por extrusor.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from manifold3d import Manifold

from ..errors import ConfigurationError
from ._helpers import bbox, extents, num, pick
from .disk import center_disk, marking_shape, rounded_disk
from .embedded import Generated, Generator, generate_embedded
from .image_extrude import ImageExtrudeGenerator
from .params import ASSEMBLY_TYPES, AssemblyType, ChipParams
from .patterns import PatternResolver
from .qr_code import DEFAULTS as QR_DEFAULTS
from .qr_code import QRCodeGenerator

logger = logging.getLogger(__name__)

NAME = "makerchip"

FLAT_GAP = 1.0  # mm entre piezas en la disposición plana


@dataclass(frozen=True)
class Part:
    solid: Manifold
    label: str


@dataclass(frozen=True)
class ShapeSet:
    """Secuencia ordenada de piezas; el orden fija la numeración del 3MF."""

    parts: Tuple[Part, ...]

    def __len__(self) -> int:
        return len(self.parts)

    def __iter__(self) -> Iterator[Part]:
        return iter(self.parts)

    def __getitem__(self, i: int) -> Part:
        return self.parts[i]

    @property
    def solids(self) -> List[Manifold]:
        return [p.solid for p in self.parts]

    @property
    def labels(self) -> List[str]:
        return [p.label for p in self.parts]

    def get(self, label: str) -> Optional[Manifold]:
        for p in self.parts:
            if p.label == label:
                return p.solid
        return None

    def compose(self) -> Manifold:
        return Manifold.compose(self.solids)


@dataclass(frozen=True)
class _Pieces:
    disk: Manifold
    marking: Manifold
    center: Manifold
    qr: Optional[Generated]
    image: Optional[Generated]


# ------------------------ disposiciones ------------------------ #

def _layout_flat(params: ChipParams, pc: _Pieces) -> List[Part]:
    offset = 2.0 * params.radius + FLAT_GAP
    parts = [
        Part(pc.disk, "base"),
        Part(pc.marking.translate((offset, 0.0, 0.0)), "marking"),
        Part(pc.center.translate((0.0, offset, 0.0)), "center"),
    ]
    if pc.qr is not None and pc.qr.ok:
        qr_size = num(pick(params.qr_code_settings.params, "size"), QR_DEFAULTS["size"])
        dx = -(params.radius + qr_size / 2.0 + FLAT_GAP)
        parts.append(Part(pc.qr.solid.translate((dx, 0.0, 0.0)), "qr"))
    if pc.image is not None and pc.image.ok:
        image_h = float(extents(pc.image.solid)[1])
        dy = -(params.radius + image_h / 2.0 + FLAT_GAP)
        parts.append(Part(pc.image.solid.translate((0.0, dy, 0.0)), "image"))
    return parts


def _layout_printable(params: ChipParams, pc: _Pieces) -> List[Part]:
    parts = [
        Part(pc.disk, "base"),
        Part(pc.center, "center"),
        Part(pc.marking, "marking"),
    ]
    if pc.qr is not None and pc.qr.ok:
        # cara superior del QR enrasada con la del chip
        _, mx = bbox(pc.qr.solid)
        parts.append(Part(pc.qr.solid.translate((0.0, 0.0, params.height - float(mx[2]))), "qr"))
    if pc.image is not None and pc.image.ok:
        # marcado inferior: espejo para que se lea desde abajo
        parts.append(Part(pc.image.solid.mirror((0.0, 1.0, 0.0)), "image"))
    return parts


_LAYOUTS: Dict[str, Callable[[ChipParams, _Pieces], List[Part]]] = {
    "flat": _layout_flat,
    "printable": _layout_printable,
}


# ------------------------ API ------------------------ #

def assemble_makerchip_shapes(
    params: ChipParams,
    assembly_type: Optional[AssemblyType] = None,
    *,
    resolver: Optional[PatternResolver] = None,
    qr_generator: Optional[Generator] = None,
    image_generator: Optional[Generator] = None,
) -> ShapeSet:
    kind = assembly_type or params.assembly_type
    layout = _LAYOUTS.get(kind)
    if layout is None:
        raise ConfigurationError(
            f"Unknown assembly type: {kind}. Valid options: {', '.join(ASSEMBLY_TYPES)}"
        )

    r, rr, h = params.radius, params.rounding_radius, params.height
    logger.debug("[makerchip] assembling %s chip r=%s h=%s round=%s pattern=%s",
                 kind, r, h, rr, params.markings)

    pieces = _Pieces(
        disk=rounded_disk(r, rr, h),
        marking=marking_shape(params.markings, r, rr, h, resolver=resolver),
        center=center_disk(params.center_circle_radius, h),
        qr=generate_embedded(qr_generator or QRCodeGenerator(), params.qr_code_settings),
        image=generate_embedded(image_generator or ImageExtrudeGenerator(), params.image_extrude_settings),
    )

    shapes = ShapeSet(tuple(layout(params, pieces)))
    logger.debug("[makerchip] %d parts: %s", len(shapes), ", ".join(shapes.labels))
    return shapes


def make_model(params: Union[ChipParams, Mapping[str, Any], None] = None) -> Manifold:
    """Builder del servicio: params -> un único sólido compuesto."""
    chip = params if isinstance(params, ChipParams) else ChipParams.from_dict(params)
    return assemble_makerchip_shapes(chip, chip.assembly_type).compose()


__all__ = ["Part", "ShapeSet", "assemble_makerchip_shapes", "make_model", "FLAT_GAP"]
