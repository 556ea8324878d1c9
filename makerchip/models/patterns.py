# makerchip/models/patterns.py
"""
Patrones de marcado del chip (makerChipV1 .. makerChipV20).

Cada patrón es un documento SVG de 100x100 con el centro del chip en (50, 50).
El contorno exterior de todos los motivos toca el círculo de radio 50 en los
cuatro puntos cardinales, de modo que escalar-y-centrar por bbox deja el motivo
concéntrico con el disco.
"""
from __future__ import annotations

import math
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional, Sequence, Tuple

from manifold3d import CrossSection

from ..config import SVG_MAX_ERROR
from ..errors import UnknownPatternError
from ..utils.svg_sampler import flip_y, svg_to_polygons
from ._helpers import cross_section_from_polygons

NAME = "patterns"

C = 50.0       # centro del view box
R_OUT = 50.0   # radio exterior del motivo


# ------------------------ primitivas SVG ------------------------ #

def _fmt(v: float) -> str:
    return f"{v:.4f}".rstrip("0").rstrip(".")


def _pt(r: float, deg: float) -> Tuple[float, float]:
    a = math.radians(deg)
    return (C + r * math.cos(a), C + r * math.sin(a))


def _xy(p: Tuple[float, float]) -> str:
    return f"{_fmt(p[0])} {_fmt(p[1])}"


def _circle_d(r: float, cx: float = C, cy: float = C) -> str:
    # dos medias vueltas: un arco de 360º no es representable en SVG
    rr = _fmt(r)
    return (
        f"M {_fmt(cx + r)} {_fmt(cy)} "
        f"A {rr} {rr} 0 1 1 {_fmt(cx - r)} {_fmt(cy)} "
        f"A {rr} {rr} 0 1 1 {_fmt(cx + r)} {_fmt(cy)} Z"
    )


def ring(r_in: float, r_out: float = R_OUT) -> List[str]:
    return [_circle_d(r_out), _circle_d(r_in)]


def wedge(r_in: float, r_out: float, a0: float, a1: float) -> str:
    large = 1 if (a1 - a0) > 180.0 else 0
    ro, ri = _fmt(r_out), _fmt(r_in)
    return (
        f"M {_xy(_pt(r_out, a0))} "
        f"A {ro} {ro} 0 {large} 1 {_xy(_pt(r_out, a1))} "
        f"L {_xy(_pt(r_in, a1))} "
        f"A {ri} {ri} 0 {large} 0 {_xy(_pt(r_in, a0))} Z"
    )


def wedges(n: int, r_in: float, r_out: float, span: float, phase: float = 0.0) -> List[str]:
    step = 360.0 / n
    return [
        wedge(r_in, r_out, phase + i * step - span / 2.0, phase + i * step + span / 2.0)
        for i in range(n)
    ]


def _poly_d(points: Sequence[Tuple[float, float]]) -> str:
    head, *rest = points
    return "M " + _xy(head) + "".join(" L " + _xy(p) for p in rest) + " Z"


def notches(n: int, r_in: float, r_out: float, width: float, phase: float = 0.0) -> List[str]:
    out = []
    for i in range(n):
        a = math.radians(phase + i * 360.0 / n)
        ux, uy = math.cos(a), math.sin(a)
        vx, vy = -uy * width / 2.0, ux * width / 2.0
        pts = [
            (C + ux * r_in + vx, C + uy * r_in + vy),
            (C + ux * r_out + vx, C + uy * r_out + vy),
            (C + ux * r_out - vx, C + uy * r_out - vy),
            (C + ux * r_in - vx, C + uy * r_in - vy),
        ]
        out.append(_poly_d(pts))
    return out


def chevrons(n: int, r_base: float, r_tip: float, half_angle: float, phase: float = 0.0) -> List[str]:
    out = []
    for i in range(n):
        a = phase + i * 360.0 / n
        out.append(_poly_d([_pt(r_base, a - half_angle), _pt(r_tip, a), _pt(r_base, a + half_angle)]))
    return out


def dots(n: int, r_center: float, radius: float, phase: float = 0.0) -> List[str]:
    out = []
    for i in range(n):
        x, y = _pt(r_center, phase + i * 360.0 / n)
        out.append(f'<circle cx="{_fmt(x)}" cy="{_fmt(y)}" r="{_fmt(radius)}"/>')
    return out


def svg_document(parts: Sequence[str]) -> str:
    paths = [p for p in parts if not p.startswith("<")]
    shapes = [p for p in parts if p.startswith("<")]
    body = ""
    if paths:
        body += f'<path fill="#000" fill-rule="evenodd" d="{" ".join(paths)}"/>'
    body += "".join(shapes)
    return (
        '<svg xmlns="http://www.w3.org/2000/svg" width="100" height="100" '
        f'viewBox="0 0 100 100">{body}</svg>'
    )


# ------------------------ catálogo ------------------------ #

_MOTIFS: Tuple[Tuple[str, Callable[[], List[str]]], ...] = (
    ("makerChipV1", lambda: wedges(8, 34, 50, 22.5)),
    ("makerChipV2", lambda: wedges(12, 34, 50, 15)),
    ("makerChipV3", lambda: wedges(16, 38, 50, 11.25)),
    ("makerChipV4", lambda: ring(46) + wedges(6, 34, 45, 30, phase=30)),
    ("makerChipV5", lambda: wedges(4, 34, 50, 45)),
    ("makerChipV6", lambda: ring(46) + dots(24, 40, 2.5)),
    ("makerChipV7", lambda: dots(8, 42, 8)),
    ("makerChipV8", lambda: notches(12, 34, 50, 6)),
    ("makerChipV9", lambda: ring(47) + chevrons(8, 46, 34, 10)),
    ("makerChipV10", lambda: ring(46) + ring(36, 40)),
    ("makerChipV11", lambda: wedges(8, 42, 50, 22.5) + wedges(8, 34, 40, 22.5)),
    ("makerChipV12", lambda: notches(16, 36, 50, 4)),
    ("makerChipV13", lambda: wedges(8, 30, 50, 15) + wedges(8, 40, 50, 15, phase=22.5)),
    ("makerChipV14", lambda: ring(46) + dots(6, 40, 4) + dots(6, 40, 2, phase=30)),
    ("makerChipV15", lambda: wedges(4, 36, 50, 60)),
    ("makerChipV16", lambda: wedges(20, 40, 50, 9)),
    ("makerChipV17", lambda: ring(47) + chevrons(8, 34, 46, 12)),
    ("makerChipV18", lambda: notches(8, 34, 50, 8) + dots(8, 28, 3)),
    ("makerChipV19", lambda: notches(24, 38, 50, 2.5)),
    ("makerChipV20", lambda: ring(46) + wedges(8, 38, 42, 37.5, phase=22.5)),
)


def build_registry() -> Mapping[str, str]:
    """Mapa inmutable id -> documento SVG, en orden V1..V20."""
    return MappingProxyType({name: svg_document(fn()) for name, fn in _MOTIFS})


PATTERN_IDS: Tuple[str, ...] = tuple(name for name, _ in _MOTIFS)


# ------------------------ resolución ------------------------ #

def parse_svg_to_cross_section(svg: str, max_error: float = SVG_MAX_ERROR) -> CrossSection:
    """
    SVG -> CrossSection: muestreo, inversión de Y (SVG es Y-abajo), regla
    par-impar y simplify con la misma tolerancia.
    """
    polygons = flip_y(svg_to_polygons(svg, max_error=max_error))
    return cross_section_from_polygons(polygons, max_error=max_error)


class PatternResolver:
    def __init__(self, registry: Optional[Mapping[str, str]] = None, max_error: float = SVG_MAX_ERROR):
        self._registry: Mapping[str, str] = registry if registry is not None else build_registry()
        self.max_error = float(max_error)

    def names(self) -> List[str]:
        return list(self._registry.keys())

    def lookup(self, name: str) -> Optional[str]:
        return self._registry.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def resolve(self, name: str) -> CrossSection:
        svg = self.lookup(name)
        if not svg:
            raise UnknownPatternError(name, self.names())
        return parse_svg_to_cross_section(svg, max_error=self.max_error)


def available_patterns() -> List[str]:
    return list(PATTERN_IDS)


__all__ = [
    "PATTERN_IDS",
    "PatternResolver",
    "build_registry",
    "available_patterns",
    "parse_svg_to_cross_section",
    "svg_document",
]
