# makerchip/utils/threemf_writer.py
# Escritura mínima de 3MF: modelo XML (mallas + componentes + build) y
# empaquetado zip con content-types y relaciones.
from __future__ import annotations

import io
import xml.etree.ElementTree as ET
import zipfile
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

import numpy as np

NS_3MF = "http://schemas.microsoft.com/3dmanufacturing/core/2015/02"
MODEL_PATH = "3D/3dmodel.model"
CONTENT_TYPES_PATH = "[Content_Types].xml"
RELS_PATH = "_rels/.rels"
MIME_3MF = "model/3mf"

CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">\n'
    '  <Default Extension="rels" ContentType="application/vnd.openxmlformats-package.relationships+xml"/>\n'
    '  <Default Extension="model" ContentType="application/vnd.ms-package.3dmanufacturing-3dmodel+xml"/>\n'
    '</Types>\n'
)


def rels_xml(model_path: str = MODEL_PATH) -> str:
    return "\n".join([
        '<?xml version="1.0" encoding="UTF-8"?>',
        '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">',
        f'  <Relationship Target="/{model_path}" Id="rel0" '
        'Type="http://schemas.microsoft.com/3dmanufacturing/2013/01/3dmodel"/>',
        "</Relationships>",
    ]) + "\n"


@dataclass
class MeshObject:
    id: int
    vertices: np.ndarray   # (N, 3)
    triangles: np.ndarray  # (M, 3)
    name: str = ""


@dataclass
class ComponentObject:
    id: int
    children: List[int] = field(default_factory=list)
    name: str = ""


def fmt(v: float, precision: int = 7) -> str:
    """`precision` dígitos significativos; sin '-0'."""
    s = f"{float(v):.{precision}g}"
    return "0" if s in ("-0", "0") else s


def to_3dmodel(
    meshes: Sequence[MeshObject],
    components: Sequence[ComponentObject] = (),
    items: Sequence[int] = (),
    header: Optional[Mapping[str, str]] = None,
    precision: int = 7,
    unit: str = "millimeter",
) -> str:
    """Documento 3D/3dmodel.model como texto."""
    model = ET.Element("model", {"unit": unit, "xml:lang": "en-US", "xmlns": NS_3MF})

    for key, value in (header or {}).items():
        ET.SubElement(model, "metadata", name=key).text = str(value)

    resources = ET.SubElement(model, "resources")
    for m in meshes:
        attrs = {"id": str(m.id), "type": "model"}
        if m.name:
            attrs["name"] = m.name
        obj = ET.SubElement(resources, "object", attrs)
        mesh = ET.SubElement(obj, "mesh")
        verts = ET.SubElement(mesh, "vertices")
        for x, y, z in np.asarray(m.vertices, dtype=float).reshape(-1, 3):
            ET.SubElement(verts, "vertex", x=fmt(x, precision), y=fmt(y, precision), z=fmt(z, precision))
        tris = ET.SubElement(mesh, "triangles")
        for a, b, c in np.asarray(m.triangles, dtype=np.int64).reshape(-1, 3):
            ET.SubElement(tris, "triangle", v1=str(a), v2=str(b), v3=str(c))

    for comp in components:
        attrs = {"id": str(comp.id), "type": "model"}
        if comp.name:
            attrs["name"] = comp.name
        obj = ET.SubElement(resources, "object", attrs)
        children = ET.SubElement(obj, "components")
        for child in comp.children:
            ET.SubElement(children, "component", objectid=str(child))

    build = ET.SubElement(model, "build")
    for object_id in items:
        ET.SubElement(build, "item", objectid=str(object_id))

    body = ET.tostring(model, encoding="unicode")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + body + "\n"


def package_3mf(model_xml: str, extra: Optional[Dict[str, str]] = None) -> bytes:
    """Zip 3MF: content types + relaciones + modelo (+ ficheros extra)."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(CONTENT_TYPES_PATH, CONTENT_TYPES)
        zf.writestr(RELS_PATH, rels_xml())
        zf.writestr(MODEL_PATH, model_xml)
        for name, content in (extra or {}).items():
            zf.writestr(name, content)
    return buf.getvalue()


__all__ = [
    "NS_3MF", "MODEL_PATH", "MIME_3MF",
    "MeshObject", "ComponentObject",
    "fmt", "to_3dmodel", "rels_xml", "package_3mf",
]
