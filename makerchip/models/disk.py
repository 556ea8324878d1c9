# makerchip/models/disk.py
from __future__ import annotations

from typing import Optional

from manifold3d import CrossSection, Manifold

from ._helpers import scale_to_size_and_center
from .patterns import PatternResolver

NAME = "disk"

REVOLVE_SEGMENTS = 180   # resolución angular del disco (fija: paridad geométrica)
CORNER_SEGMENTS = 24     # círculos de redondeo del perfil
CENTER_SEGMENTS = 64     # círculo central
EDGE_MARGIN = 10.0       # margen del disco sobredimensionado en round_disk_edges
MARKING_OVERSIZE = 0.1   # solape con el corte redondeado (sin rendija tras recortar)


def clamp_rounding(rounding_radius: float, height: float) -> float:
    """El redondeo nunca supera media altura (ni baja de 0)."""
    return max(0.0, min(float(rounding_radius), float(height) / 2.0))


def disk_profile(radius: float, rounding_radius: float, height: float) -> CrossSection:
    """
    Medio perfil (x = radio, y = altura) del disco con canto redondeado:
    dos círculos en las esquinas exteriores + rectángulo entre ellos +
    rectángulo desde el eje hasta la zona redondeada.
    Con redondeo 0 queda solo el rectángulo (canto vivo).
    """
    r = clamp_rounding(rounding_radius, height)
    radius = float(radius)
    height = float(height)

    # del eje al inicio del redondeo
    profile = CrossSection.square((radius - r, height))
    if r <= 0:
        return profile

    c1 = CrossSection.circle(r, CORNER_SEGMENTS).translate((radius - r, r))
    c2 = CrossSection.circle(r, CORNER_SEGMENTS).translate((radius - r, height - r))
    profile = profile + c1 + c2

    # hueco entre los dos círculos (vacío si r == height/2)
    gap = height - 2.0 * r
    if gap > 0:
        fill = CrossSection.square((r, gap), center=True).translate((radius - r / 2.0, height / 2.0))
        profile = profile + fill
    return profile


def rounded_disk(radius: float, rounding_radius: float, height: float) -> Manifold:
    profile = disk_profile(radius, rounding_radius, height)
    return Manifold.revolve(profile, REVOLVE_SEGMENTS)


def round_disk_edges(original: Manifold, radius: float, rounding_radius: float, height: float) -> Manifold:
    """
    Recorta `original` al canto redondeado del disco: disco plano
    sobredimensionado (radio+10, altura+10) menos el disco redondeado da una
    "cáscara" de corte, que se resta del original.
    """
    larger = Manifold.revolve(
        CrossSection.square((float(radius) + EDGE_MARGIN, float(height) + EDGE_MARGIN)),
        REVOLVE_SEGMENTS,
    )
    shell = larger - rounded_disk(radius, rounding_radius, height)
    return original - shell


def marking_shape(
    shape_name: str,
    radius: float,
    rounding_radius: float,
    height: float,
    resolver: Optional[PatternResolver] = None,
) -> Manifold:
    resolver = resolver or PatternResolver()
    shape = resolver.resolve(shape_name)

    # un poco más grande para solapar con el corte del canto
    side = float(radius) * 2.0 + MARKING_OVERSIZE
    sized = scale_to_size_and_center(shape, side, side)

    extruded = Manifold.extrude(sized, float(height))
    return round_disk_edges(extruded, radius, rounding_radius, height)


def center_disk(center_circle_radius: float, height: float) -> Manifold:
    circle = CrossSection.circle(float(center_circle_radius), CENTER_SEGMENTS)
    return Manifold.extrude(circle, float(height))


__all__ = [
    "REVOLVE_SEGMENTS",
    "clamp_rounding",
    "disk_profile",
    "rounded_disk",
    "round_disk_edges",
    "marking_shape",
    "center_disk",
]
