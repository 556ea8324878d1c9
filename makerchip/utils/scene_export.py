# makerchip/utils/scene_export.py
# Preview GLB (trimesh.Scene) a partir de las piezas del chip.
from __future__ import annotations

import io
from typing import Iterable, Optional, Sequence, Tuple

import trimesh
from manifold3d import Manifold
from trimesh.visual import ColorVisuals

from ..models._helpers import to_trimesh

MIME_GLB = "model/gltf-binary"

# gris claro, azul, naranja, negro, rojo (se repite)
PALETTE: Tuple[Tuple[int, int, int, int], ...] = (
    (210, 210, 210, 255),
    (0, 120, 255, 255),
    (255, 140, 0, 255),
    (30, 30, 30, 255),
    (200, 30, 30, 255),
)


def manifold_to_trimesh(solid: Manifold, color: Optional[Sequence[int]] = None) -> trimesh.Trimesh:
    mesh = to_trimesh(solid)
    if color is not None and len(mesh.faces):
        mesh.visual = ColorVisuals(mesh, face_colors=list(color))
    return mesh


def build_scene(parts: Iterable[Tuple[str, Manifold]]) -> trimesh.Scene:
    scene = trimesh.Scene()
    for i, (label, solid) in enumerate(parts):
        mesh = manifold_to_trimesh(solid, PALETTE[i % len(PALETTE)])
        if len(mesh.faces) == 0:
            continue
        scene.add_geometry(mesh, node_name=f"{label}_{i}", geom_name=f"{label}_{i}")
    return scene


def export_glb(parts: Iterable[Tuple[str, Manifold]]) -> bytes:
    buf = io.BytesIO()
    build_scene(parts).export(file_obj=buf, file_type="glb")
    return buf.getvalue()


__all__ = ["MIME_GLB", "manifold_to_trimesh", "build_scene", "export_glb"]
