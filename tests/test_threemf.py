import io
import xml.etree.ElementTree as ET
import zipfile

import numpy as np
import pytest

from makerchip.models.params import ChipParams
from makerchip.models.threemf_export import (
    MODEL_SETTINGS_PATH,
    extruder_for_part,
    model_settings_config,
    three_mf_export,
)
from makerchip.utils.threemf_writer import NS_3MF, MeshObject, fmt, to_3dmodel

NS = {"m": NS_3MF}


def _open(data: bytes) -> zipfile.ZipFile:
    return zipfile.ZipFile(io.BytesIO(data))


def _model(data: bytes) -> ET.Element:
    with _open(data) as zf:
        return ET.fromstring(zf.read("3D/3dmodel.model"))


def _extruders(config: str):
    root = ET.fromstring(config)
    return [
        int(p.find("metadata[@key='extruder']").get("value"))
        for p in root.iter("part")
    ]


@pytest.fixture(scope="module")
def default_export():
    return three_mf_export(ChipParams())


def test_result_metadata(default_export):
    assert default_export.mime_type == "model/3mf"
    assert default_export.file_name == "makerchip.3mf"
    assert default_export.data[:2] == b"PK"


def test_archive_members(default_export):
    with _open(default_export.data) as zf:
        assert sorted(zf.namelist()) == sorted([
            "[Content_Types].xml",
            "_rels/.rels",
            "3D/3dmodel.model",
            MODEL_SETTINGS_PATH,
        ])
        rels = zf.read("_rels/.rels").decode("utf-8")
    assert 'Target="/3D/3dmodel.model"' in rels


def test_model_structure(default_export):
    root = _model(default_export.data)
    assert root.tag == f"{{{NS_3MF}}}model"
    assert root.get("unit") == "millimeter"

    meta = {m.get("name"): m.text for m in root.findall("m:metadata", NS)}
    assert meta == {
        "Title": "CADit Makerchip",
        "Description": "Makerchip 3MF export",
        "Application": "CADit",
    }

    objects = root.findall("m:resources/m:object", NS)
    assert [o.get("id") for o in objects] == ["1", "2", "3", "4"]
    assert [o.get("name") for o in objects[:3]] == [f"Makerchip-Part-{i}" for i in (1, 2, 3)]
    assert all(o.find("m:mesh", NS) is not None for o in objects[:3])

    assembly = objects[3]
    assert assembly.get("name") == "Makerchip-Assembly"
    assert [c.get("objectid") for c in assembly.findall("m:components/m:component", NS)] == ["1", "2", "3"]

    items = root.findall("m:build/m:item", NS)
    assert [i.get("objectid") for i in items] == ["4"]


def test_vertices_and_triangles_are_consistent(default_export):
    root = _model(default_export.data)
    for obj in root.findall("m:resources/m:object[m:mesh]", NS):
        n = len(obj.findall("m:mesh/m:vertices/m:vertex", NS))
        tris = obj.findall("m:mesh/m:triangles/m:triangle", NS)
        assert n > 0 and tris
        idx = np.array([[int(t.get(k)) for k in ("v1", "v2", "v3")] for t in tris])
        assert idx.min() >= 0 and idx.max() < n


def test_export_is_always_printable():
    data = three_mf_export({"assemblyType": "flat"}).data
    root = _model(data)
    # pieza 2 en orden printable = círculo central, sin desplazar
    center = root.find("m:resources/m:object[@id='2']", NS)
    xs = [float(v.get("x")) for v in center.findall("m:mesh/m:vertices/m:vertex", NS)]
    assert max(xs) == pytest.approx(14.0, abs=1e-4)


def test_settings_follow_part_count():
    chip = ChipParams.from_dict({"qrCodeSettings": {"enabled": True, "params": {"text": "x"}}})
    with _open(three_mf_export(chip).data) as zf:
        config = zf.read(MODEL_SETTINGS_PATH).decode("utf-8")
    root = ET.fromstring(config)
    obj = root.find("object")
    assert obj.get("id") == "5"
    assert _extruders(config) == [1, 2, 3, 4]


def test_model_settings_config_five_parts():
    config = model_settings_config(5)
    root = ET.fromstring(config)
    obj = root.find("object")
    assert obj.get("id") == "6"
    assert obj.find("metadata[@key='name']").get("value") == "Makerchip-Assembly"
    assert obj.find("metadata[@key='extruder']").get("value") == "1"
    parts = obj.findall("part")
    assert [p.get("id") for p in parts] == ["1", "2", "3", "4", "5"]
    assert all(p.get("subtype") == "normal_part" for p in parts)
    assert [p.find("metadata[@key='name']").get("value") for p in parts] == [
        f"Makerchip-Assembly_{i}" for i in range(1, 6)
    ]
    assert _extruders(config) == [1, 2, 3, 4, 4]


@pytest.mark.parametrize("index,extruder", [(0, 1), (1, 2), (2, 3), (3, 4), (4, 4), (9, 4)])
def test_extruder_for_part(index, extruder):
    assert extruder_for_part(index) == extruder


@pytest.mark.parametrize(
    "value,text",
    [(1.23456789, "1.234568"), (20.0, "20"), (-0.0, "0"), (1e-9, "1e-09"), (-3.5, "-3.5")],
)
def test_fmt_seven_significant_digits(value, text):
    assert fmt(value) == text


def test_to_3dmodel_precision():
    mesh = MeshObject(id=1, vertices=np.array([[1 / 3, 2 / 3, 10 / 3]]), triangles=np.zeros((0, 3), int))
    root = ET.fromstring(to_3dmodel([mesh], items=[1]))
    v = root.find("m:resources/m:object/m:mesh/m:vertices/m:vertex", NS)
    assert (v.get("x"), v.get("y"), v.get("z")) == ("0.3333333", "0.6666667", "3.333333")


def test_rels_points_only_at_model(default_export):
    with _open(default_export.data) as zf:
        rels = ET.fromstring(zf.read("_rels/.rels"))
    targets = [r.get("Target") for r in rels]
    assert targets == ["/3D/3dmodel.model"]
    with _open(default_export.data) as zf:
        assert "png" not in zf.read("[Content_Types].xml").decode("utf-8")
