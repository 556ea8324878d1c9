# makerchip/models/image_extrude.py
from __future__ import annotations

import base64
import binascii
import io
import mimetypes
import os
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import unquote_to_bytes

import numpy as np
from manifold3d import CrossSection, Manifold
from PIL import Image, UnidentifiedImageError
from shapely.geometry import MultiPolygon, Polygon, box
from shapely.ops import unary_union

from ..config import SVG_MAX_ERROR
from ..errors import GenerationError
from ._helpers import cross_section_from_polygons, flag, num, pick, scale_to_size_and_center
from .patterns import parse_svg_to_cross_section
from .qr_code import matrix_cross_section

NAME = "image_extrude"

TYPES: Dict[str, str] = {
    "imageFile": "{dataUrl, fileType, fileName}",
    "mode": "sample|trace",
    "height": "float",       # altura de extrusión (mm)
    "maxWidth": "float",     # el resultado cabe en maxWidth x maxWidth (mm)
    "threshold": "int",      # 0..255, píxeles más oscuros = relleno
    "invert": "bool",
    "maxPixels": "int",      # lado largo tras reducir el raster
}

DEFAULTS: Dict[str, Any] = {
    "imageFile": None,
    "mode": "sample",
    "height": 1.0,
    "maxWidth": 18.0,
    "threshold": 128,
    "invert": False,
    "maxPixels": 96,
}

MODES = ("sample", "trace")
TRACE_SIMPLIFY_PX = 0.35


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """'data:<mime>[;base64],<payload>' -> (mime, bytes)."""
    if not data_url or not data_url.startswith("data:") or "," not in data_url:
        raise GenerationError(NAME, "imageFile.dataUrl is not a data URL")
    header, payload = data_url[5:].split(",", 1)
    parts = header.split(";")
    mime = (parts[0] or "text/plain").lower()
    if "base64" in parts[1:]:
        try:
            return mime, base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise GenerationError(NAME, f"invalid base64 payload: {e}") from e
    return mime, unquote_to_bytes(payload)


def _image_source(p: Mapping[str, Any]) -> Tuple[str, bytes]:
    src = pick(p, "imageFile", "image_file", "image")
    if isinstance(src, Mapping):
        data_url = src.get("dataUrl") or src.get("data_url")
        file_type = (src.get("fileType") or src.get("file_type") or "").lower()
    else:
        data_url, file_type = src, ""
    if not data_url:
        raise GenerationError(NAME, "no image provided")
    mime, data = decode_data_url(str(data_url))
    return (file_type or mime), data


# ------------------------ raster ------------------------ #

def raster_mask(data: bytes, threshold: int = 128, invert: bool = False, max_pixels: int = 96) -> np.ndarray:
    """Máscara booleana (fila 0 arriba) de los píxeles a extruir."""
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError) as e:
        raise GenerationError(NAME, f"cannot decode image: {e}") from e

    # transparencia -> blanco
    if img.mode in ("RGBA", "LA", "P"):
        rgba = img.convert("RGBA")
        bg = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        img = Image.alpha_composite(bg, rgba)
    gray = img.convert("L")

    max_pixels = max(4, int(max_pixels))
    if max(gray.size) > max_pixels:
        gray.thumbnail((max_pixels, max_pixels), Image.LANCZOS)

    arr = np.asarray(gray, dtype=np.uint8)
    mask = arr < int(threshold)
    return ~mask if invert else mask


def _shapely_to_contours(geom) -> List[np.ndarray]:
    polys: List[Polygon]
    if isinstance(geom, Polygon):
        polys = [geom]
    elif isinstance(geom, MultiPolygon):
        polys = list(geom.geoms)
    else:
        polys = [g for g in getattr(geom, "geoms", []) if isinstance(g, Polygon)]
    out: List[np.ndarray] = []
    for poly in polys:
        if poly.is_empty:
            continue
        out.append(np.asarray(poly.exterior.coords, dtype=np.float64)[:-1])
        for hole in poly.interiors:
            out.append(np.asarray(hole.coords, dtype=np.float64)[:-1])
    return out


def trace_mask(mask: np.ndarray) -> CrossSection:
    """Contorno suavizado: unión de píxeles (shapely) + simplify."""
    h = mask.shape[0]
    boxes = [box(i, h - 1 - j, i + 1, h - j) for j, i in zip(*np.nonzero(mask))]
    if not boxes:
        return CrossSection()
    geom = unary_union(boxes).simplify(TRACE_SIMPLIFY_PX, preserve_topology=True)
    if not geom.is_valid:
        geom = geom.buffer(0)
    return cross_section_from_polygons(_shapely_to_contours(geom))


# ------------------------ generador ------------------------ #

class ImageExtrudeGenerator:
    name = NAME

    def __init__(self, svg_max_error: float = SVG_MAX_ERROR):
        self.svg_max_error = svg_max_error

    def outline(self, p: Mapping[str, Any]) -> CrossSection:
        file_type, data = _image_source(p)
        if "svg" in file_type:
            return parse_svg_to_cross_section(data.decode("utf-8", errors="replace"), self.svg_max_error)

        mode = str(pick(p, "mode", default=DEFAULTS["mode"]) or DEFAULTS["mode"]).lower()
        if mode not in MODES:
            raise GenerationError(self.name, f"unknown mode '{mode}' (use {' | '.join(MODES)})")
        mask = raster_mask(
            data,
            threshold=int(num(pick(p, "threshold", default=DEFAULTS["threshold"]), DEFAULTS["threshold"])),
            invert=flag(p.get("invert")),
            max_pixels=int(num(pick(p, "maxPixels", "max_pixels", default=DEFAULTS["maxPixels"]), DEFAULTS["maxPixels"])),
        )
        if mode == "trace":
            return trace_mask(mask)
        return matrix_cross_section(mask.tolist())

    def generate(self, params: Mapping[str, Any]) -> Manifold:
        p = dict(params or {})
        height = num(pick(p, "height", default=DEFAULTS["height"]))
        max_width = num(pick(p, "maxWidth", "max_width", default=DEFAULTS["maxWidth"]))
        if not height or height <= 0 or not max_width or max_width <= 0:
            raise GenerationError(self.name, f"invalid height/maxWidth ({height}, {max_width})")

        cs = self.outline(p)
        if cs.is_empty():
            raise GenerationError(self.name, "image produced no filled area")
        cs = scale_to_size_and_center(cs, max_width, max_width)
        return Manifold.extrude(cs, height)


def load_image_file(path: str) -> Optional[Dict[str, str]]:
    """Fichero local -> {dataUrl, fileType, fileName} (para el CLI)."""
    if not os.path.isfile(path):
        return None
    mime = mimetypes.guess_type(path)[0] or "application/octet-stream"
    with open(path, "rb") as f:
        b64 = base64.b64encode(f.read()).decode("ascii")
    return {
        "dataUrl": f"data:{mime};base64,{b64}",
        "fileType": mime,
        "fileName": os.path.basename(path),
    }


__all__ = [
    "NAME", "TYPES", "DEFAULTS", "ImageExtrudeGenerator",
    "decode_data_url", "raster_mask", "trace_mask", "load_image_file",
]
