from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel, Field

from . import __version__
from .config import MAX_RADIUS, ORIGINS, configure_logging
from .errors import ConfigurationError
from .models import ALIASES, REGISTRY, PATTERN_IDS, get_builder, normalize_slug
from .models import image_extrude, params as chip_params, qr_code
from .models.assembly import Part, ShapeSet, assemble_makerchip_shapes
from .models.params import ChipParams
from .models.threemf_export import FILE_NAME, shapes_to_3mf, three_mf_export
from .utils.scene_export import MIME_GLB, export_glb
from .utils.threemf_writer import MIME_3MF

configure_logging()
logger = logging.getLogger(__name__)

FORMATS = ("glb", "3mf")

app = FastAPI(title="CADit Makerchip Service", version=__version__)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -------------------------- Schemas --------------------------

class GenerateBody(BaseModel):
    slug: str = "makerchip"       # makerchip | qr_code | image_extrude (snake o kebab)
    params: Dict[str, Any] = Field(default_factory=dict)

# -------------------------- Helpers --------------------------

def _chip_params(params: Dict[str, Any]) -> ChipParams:
    chip = ChipParams.from_dict(params)
    if chip.radius > MAX_RADIUS:
        raise ConfigurationError(f"radius must be <= {MAX_RADIUS:g} (got {chip.radius:g})")
    return chip


def _binary(data: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=data,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _build_chip(params: Dict[str, Any], fmt: str) -> Response:
    chip = _chip_params(params)
    if fmt == "3mf":
        res = three_mf_export(chip)
        return _binary(res.data, res.mime_type, res.file_name)
    shapes = assemble_makerchip_shapes(chip)
    glb = export_glb((p.label, p.solid) for p in shapes)
    return _binary(glb, MIME_GLB, "makerchip-preview.glb")


def _build_single(slug: str, params: Dict[str, Any], fmt: str) -> Response:
    builder = get_builder(slug)
    if builder is None:
        raise HTTPException(status_code=404, detail=f"Model '{slug}' not found")
    solid = builder(params)
    if solid.is_empty():
        raise HTTPException(status_code=400, detail=f"Model build error: '{slug}' produced no geometry")
    if fmt == "3mf":
        data = shapes_to_3mf(ShapeSet((Part(solid, slug),)))
        return _binary(data, MIME_3MF, FILE_NAME.replace("makerchip", slug))
    return _binary(export_glb([(slug, solid)]), MIME_GLB, f"{slug}-preview.glb")

# -------------------------- Endpoints --------------------------

@app.get("/health")
def health():
    return {
        "ok": True,
        "service": "makerchip",
        "version": __version__,
        "origins": ORIGINS,
        "loaded_models": sorted(REGISTRY.keys()),
        "aliases_count": len(ALIASES),
        "patterns": len(PATTERN_IDS),
    }


@app.get("/patterns")
def patterns():
    return {"patterns": list(PATTERN_IDS)}


@app.get("/schema")
def schema():
    """Tipos y valores por defecto de cada builder (para formularios)."""
    return {
        "makerchip": {"types": chip_params.TYPES, "defaults": chip_params.DEFAULTS},
        qr_code.NAME: {"types": qr_code.TYPES, "defaults": qr_code.DEFAULTS},
        image_extrude.NAME: {"types": image_extrude.TYPES, "defaults": image_extrude.DEFAULTS},
    }


@app.post("/generate")
def generate(body: GenerateBody, fmt: Optional[str] = Query(default="glb")):
    fmt = (fmt or "glb").strip().lower()
    if fmt not in FORMATS:
        raise HTTPException(status_code=400, detail=f"Unsupported format '{fmt}' (use {' | '.join(FORMATS)})")

    slug = normalize_slug(body.slug) or "makerchip"
    params = dict(body.params or {})
    logger.info("[makerchip] generate slug=%s fmt=%s", slug, fmt)

    try:
        if slug == "makerchip":
            return _build_chip(params, fmt)
        return _build_single(slug, params, fmt)
    except HTTPException:
        raise
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.exception("[makerchip] build failed (slug=%s)", slug)
        raise HTTPException(status_code=400, detail=f"Model build error: {e}")
