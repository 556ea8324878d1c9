# makerchip/models/threemf_export.py
"""
Exportación 3MF multi-pieza para impresión multicolor.

Siempre usa la disposición "printable": cada pieza es un objeto malla, todas
agrupadas como hijos de un objeto componente, y Metadata/model_settings.config
asigna un extrusor por pieza (1..4, repitiendo el 4 a partir de la quinta).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Union

from ..utils.threemf_writer import MIME_3MF, ComponentObject, MeshObject, package_3mf, to_3dmodel
from ._helpers import mesh_arrays
from .assembly import ShapeSet, assemble_makerchip_shapes
from .params import ChipParams

logger = logging.getLogger(__name__)

FILE_NAME = "makerchip.3mf"
MODEL_SETTINGS_PATH = "Metadata/model_settings.config"
ASSEMBLY_NAME = "Makerchip-Assembly"
MAX_EXTRUDERS = 4
PRECISION = 7

HEADER = {
    "Title": "CADit Makerchip",
    "Description": "Makerchip 3MF export",
    "Application": "CADit",
}


@dataclass(frozen=True)
class ExportResult:
    data: bytes
    mime_type: str = MIME_3MF
    file_name: str = FILE_NAME


def extruder_for_part(index: int) -> int:
    """Índice 0-based -> extrusor: 1,2,3,4,4,4..."""
    return index + 1 if index < MAX_EXTRUDERS else MAX_EXTRUDERS


def model_settings_config(parts_count: int) -> str:
    parts_xml = ""
    for i in range(parts_count):
        parts_xml += f"""
    <part id="{i + 1}" subtype="normal_part">
      <metadata key="name" value="{ASSEMBLY_NAME}_{i + 1}"/>
      <metadata key="extruder" value="{extruder_for_part(i)}"/>
    </part>"""

    return f"""<?xml version="1.0" encoding="UTF-8"?>
<config>
  <object id="{parts_count + 1}">
    <metadata key="name" value="{ASSEMBLY_NAME}"/>
    <metadata key="extruder" value="1"/>
    {parts_xml}
  </object>
</config>
"""


def shapes_to_3mf(shapes: ShapeSet) -> bytes:
    meshes: List[MeshObject] = []
    for i, part in enumerate(shapes):
        v, f = mesh_arrays(part.solid)
        meshes.append(MeshObject(id=i + 1, vertices=v, triangles=f, name=f"Makerchip-Part-{i + 1}"))

    # un componente con todas las mallas como hijos, en orden
    component = ComponentObject(id=len(meshes) + 1, children=[m.id for m in meshes], name=ASSEMBLY_NAME)

    model = to_3dmodel(meshes, [component], items=[component.id], header=HEADER, precision=PRECISION)
    return package_3mf(model, {MODEL_SETTINGS_PATH: model_settings_config(len(meshes))})


def three_mf_export(params: Union[ChipParams, Mapping[str, Any], None] = None, **kwargs: Any) -> ExportResult:
    if isinstance(params, ChipParams):
        chip = params.with_assembly("printable")
    else:
        chip = ChipParams.from_dict({**dict(params or {}), "assembly_type": "printable"})
    # el 3MF multi-pieza solo tiene sentido apilado
    shapes = assemble_makerchip_shapes(chip, "printable", **kwargs)
    data = shapes_to_3mf(shapes)
    logger.info("[makerchip] 3MF: %d parts, %d bytes", len(shapes), len(data))
    return ExportResult(data=data)


__all__ = ["ExportResult", "extruder_for_part", "model_settings_config", "shapes_to_3mf", "three_mf_export"]
