# makerchip/utils/svg_sampler.py
# SVG -> polígonos (lista de arrays Nx2) con error de cuerda acotado.
from __future__ import annotations

import math
import re
import xml.etree.ElementTree as ET
from typing import Iterable, List, Union

import numpy as np
from svg.path import Close, Line, Move, parse_path
from trimesh.path.exchange.svg_io import transform_to_matrices

from ..errors import SvgSamplingError

MIN_DEPTH = 2    # subdivisiones mínimas por curva (evita falsos "planos" en curvas en S)
MAX_DEPTH = 14

_NUM = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _f(el: ET.Element, name: str, default: float = 0.0) -> float:
    raw = el.get(name)
    if raw is None:
        return default
    m = _NUM.search(raw)
    return float(m.group(0)) if m else default


# ------------------------ curvas ------------------------ #

def _subdivide(seg, t0: float, t1: float, p0: complex, p1: complex,
               max_error: float, depth: int, out: List[complex]) -> None:
    tm = (t0 + t1) * 0.5
    pm = seg.point(tm)
    flat = abs(pm - (p0 + p1) * 0.5) <= max_error
    if depth >= MAX_DEPTH or (depth >= MIN_DEPTH and flat):
        out.append(p1)
        return
    _subdivide(seg, t0, tm, p0, pm, max_error, depth + 1, out)
    _subdivide(seg, tm, t1, pm, p1, max_error, depth + 1, out)


def _sample_segment(seg, max_error: float) -> List[complex]:
    """Puntos del segmento sin el inicial."""
    if isinstance(seg, (Line, Close)):
        return [seg.end]
    out: List[complex] = []
    _subdivide(seg, 0.0, 1.0, seg.start, seg.end, max_error, 0, out)
    return out


def _close_ring(points: List[complex]) -> np.ndarray:
    while len(points) > 1 and abs(points[0] - points[-1]) < 1e-12:
        points = points[:-1]
    return np.array([[p.real, p.imag] for p in points], dtype=np.float64)


def path_to_polygons(d: str, max_error: float) -> List[np.ndarray]:
    """Un polígono cerrado por subtrayecto del atributo `d`."""
    rings: List[np.ndarray] = []
    current: List[complex] = []
    for seg in parse_path(d):
        if isinstance(seg, Move):
            if len(current) >= 3:
                rings.append(_close_ring(current))
            current = [seg.end]
            continue
        if not current:
            current = [seg.start]
        current.extend(_sample_segment(seg, max_error))
    if len(current) >= 3:
        rings.append(_close_ring(current))
    return rings


def circle_polygon(cx: float, cy: float, r: float, max_error: float) -> np.ndarray:
    if r <= max_error:
        n = 8
    else:
        n = int(math.ceil(math.pi / math.acos(1.0 - max_error / r)))
    n = max(8, min(n, 2048))
    a = np.linspace(0.0, 2.0 * math.pi, n, endpoint=False)
    return np.column_stack((cx + r * np.cos(a), cy + r * np.sin(a)))


def ellipse_polygon(cx: float, cy: float, rx: float, ry: float, max_error: float) -> np.ndarray:
    ring = circle_polygon(0.0, 0.0, 1.0, max_error / max(rx, ry))
    return np.column_stack((cx + rx * ring[:, 0], cy + ry * ring[:, 1]))


def _points(el: ET.Element) -> np.ndarray:
    vals = [float(v) for v in _NUM.findall(el.get("points") or "")]
    return np.array(vals[: len(vals) // 2 * 2], dtype=np.float64).reshape(-1, 2)


# ------------------------ transformaciones ------------------------ #

# contenido no dibujado directamente
_SKIP = {"defs", "clipPath", "mask", "symbol", "marker", "pattern", "style", "metadata", "title", "desc"}


def element_matrix(el: ET.Element) -> np.ndarray:
    """Atributo `transform` -> matriz homogénea 3x3 (identidad si no hay)."""
    raw = (el.get("transform") or "").strip()
    if not raw:
        return np.eye(3)
    try:
        matrices = transform_to_matrices(raw)
    except (ValueError, IndexError) as e:
        raise SvgSamplingError(f"Invalid transform '{raw}': {e}") from e
    out = np.eye(3)
    for m in matrices:
        out = out @ np.asarray(m, dtype=np.float64)
    return out


def _apply(matrix: np.ndarray, pts: np.ndarray) -> np.ndarray:
    return pts @ matrix[:2, :2].T + matrix[:2, 2]


def _scale_of(matrix: np.ndarray) -> float:
    return float(np.linalg.norm(matrix[:2, :2], 2))


def _element_polygons(el: ET.Element, tag: str, max_error: float) -> List[np.ndarray]:
    if tag == "path":
        d = el.get("d") or ""
        return path_to_polygons(d, max_error) if d.strip() else []
    if tag == "circle":
        r = _f(el, "r")
        return [circle_polygon(_f(el, "cx"), _f(el, "cy"), r, max_error)] if r > 0 else []
    if tag == "ellipse":
        rx, ry = _f(el, "rx"), _f(el, "ry")
        if rx > 0 and ry > 0:
            return [ellipse_polygon(_f(el, "cx"), _f(el, "cy"), rx, ry, max_error)]
        return []
    if tag == "rect":
        x, y = _f(el, "x"), _f(el, "y")
        w, h = _f(el, "width"), _f(el, "height")
        if w > 0 and h > 0:
            return [np.array([[x, y], [x + w, y], [x + w, y + h], [x, y + h]], dtype=np.float64)]
        return []
    if tag in ("polygon", "polyline"):
        # el relleno de una polilínea la cierra implícitamente
        pts = _points(el)
        return [pts] if len(pts) >= 3 else []
    return []


def _walk(el: ET.Element, parent: np.ndarray, max_error: float, out: List[np.ndarray]) -> None:
    tag = _local(el.tag)
    if tag in _SKIP:
        return
    matrix = parent @ element_matrix(el)
    local_error = max_error / max(_scale_of(matrix), 1e-9)
    for poly in _element_polygons(el, tag, local_error):
        out.append(_apply(matrix, poly))
    for child in el:
        _walk(child, matrix, max_error, out)


# ------------------------ API ------------------------ #

def svg_to_polygons(svg: Union[str, bytes], max_error: float = 0.01) -> List[np.ndarray]:
    """
    Muestrea un documento SVG en polígonos (coordenadas SVG, Y hacia abajo).
    Soporta <path>, <circle>, <ellipse>, <rect>, <polygon> y <polyline>, con
    los `transform` de cada elemento y de sus grupos aplicados.
    """
    try:
        root = ET.fromstring(svg)
    except ET.ParseError as e:
        raise SvgSamplingError(f"Invalid SVG document: {e}") from e

    polygons: List[np.ndarray] = []
    _walk(root, np.eye(3), max(float(max_error), 1e-6), polygons)
    return polygons


def flip_y(polygons: Iterable[np.ndarray]) -> List[np.ndarray]:
    """SVG (Y abajo) -> espacio de modelado (Y arriba)."""
    out = []
    for p in polygons:
        q = np.array(p, dtype=np.float64, copy=True)
        q[:, 1] = -q[:, 1]
        out.append(q)
    return out


__all__ = [
    "svg_to_polygons", "path_to_polygons", "circle_polygon", "ellipse_polygon",
    "element_matrix", "flip_y",
]
