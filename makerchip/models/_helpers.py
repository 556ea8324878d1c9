from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import trimesh
from manifold3d import CrossSection, FillRule, Manifold


# ---------------------- Utilidades numéricas ----------------------

def num(x: Any, default: Optional[float] = None) -> Optional[float]:
    if x is None:
        return default
    if isinstance(x, bool):
        return default
    if isinstance(x, (int, float)):
        return float(x)
    try:
        return float(str(x).replace(",", "."))
    except Exception:
        return default


def flag(x: Any, default: bool = False) -> bool:
    """Booleano tolerante: True/'1'/'true'/'on'/'yes'."""
    if x is None:
        return default
    if isinstance(x, bool):
        return x
    if isinstance(x, (int, float)):
        return x != 0
    return str(x).strip().lower() in {"1", "true", "on", "yes", "si", "sí"}


def pick(params: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    """Primer valor no nulo entre varias claves (snake/camel/alias)."""
    for k in keys:
        if k in params and params[k] is not None:
            return params[k]
    return default


# ---------------------- CrossSection ----------------------

def cross_section_from_polygons(
    polygons: Iterable[Sequence[Sequence[float]]],
    max_error: float = 0.0,
) -> CrossSection:
    """Contornos -> CrossSection con regla par-impar (+ simplify opcional)."""
    contours = [np.asarray(p, dtype=np.float64).reshape(-1, 2) for p in polygons]
    contours = [c for c in contours if len(c) >= 3]
    if not contours:
        return CrossSection()
    cs = CrossSection(contours, fillrule=FillRule.EvenOdd)
    if max_error > 0:
        cs = cs.simplify(max_error)
    return cs


def cs_size(cs: CrossSection) -> Tuple[float, float]:
    min_x, min_y, max_x, max_y = cs.bounds()
    return (max_x - min_x, max_y - min_y)


def scale_to_size_and_center(cs: CrossSection, target_w: float, target_h: float) -> CrossSection:
    """
    Escala manteniendo proporción para caber en target_w x target_h y centra
    el bbox en el origen. Bbox degenerado (ancho o alto 0) -> sin cambios.
    """
    w, h = cs_size(cs)
    # vacío -> bounds infinitos; también sin escalar
    if not (w > 0 and h > 0):
        return cs

    s = min(target_w / w, target_h / h)
    scaled = cs.scale((s, s))

    min_x, min_y, max_x, max_y = scaled.bounds()
    off_x = -min_x - (max_x - min_x) / 2.0
    off_y = -min_y - (max_y - min_y) / 2.0
    return scaled.translate((off_x, off_y))


# ---------------------- Manifold ----------------------

def bbox(solid: Manifold) -> Tuple[np.ndarray, np.ndarray]:
    """(min, max) como arrays xyz."""
    b = np.asarray(solid.bounding_box(), dtype=float)
    return b[:3], b[3:]


def extents(solid: Manifold) -> np.ndarray:
    mn, mx = bbox(solid)
    return mx - mn


def mesh_arrays(solid: Manifold) -> Tuple[np.ndarray, np.ndarray]:
    """(vertices Nx3 float, triángulos Mx3 int) del sólido."""
    mesh = solid.to_mesh()
    v = np.asarray(mesh.vert_properties, dtype=np.float64)[:, :3]
    f = np.asarray(mesh.tri_verts, dtype=np.int64)
    return v, f


# ---------------------- trimesh bridges ----------------------

def to_trimesh(solid: Manifold) -> trimesh.Trimesh:
    v, f = mesh_arrays(solid)
    if v.size == 0 or f.size == 0:
        return trimesh.Trimesh()
    return trimesh.Trimesh(vertices=v, faces=f, process=False)


__all__: List[str] = [
    "num",
    "flag",
    "pick",
    "cross_section_from_polygons",
    "cs_size",
    "scale_to_size_and_center",
    "bbox",
    "extents",
    "mesh_arrays",
    "to_trimesh",
]
