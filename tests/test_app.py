import io
import zipfile

import pytest
from fastapi.testclient import TestClient

from makerchip.app import app


@pytest.fixture(scope="module")
def client():
    return TestClient(app)


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["ok"] is True
    assert body["service"] == "makerchip"
    assert body["patterns"] == 20
    assert "makerchip" in body["loaded_models"]


def test_patterns(client):
    r = client.get("/patterns")
    assert r.status_code == 200
    assert r.json()["patterns"][0] == "makerChipV1"
    assert len(r.json()["patterns"]) == 20


def test_generate_3mf(client):
    r = client.post("/generate?fmt=3mf", json={"params": {"radius": 15, "markings": "makerChipV4"}})
    assert r.status_code == 200
    assert r.headers["content-type"] == "model/3mf"
    assert 'filename="makerchip.3mf"' in r.headers["content-disposition"]
    with zipfile.ZipFile(io.BytesIO(r.content)) as zf:
        assert "3D/3dmodel.model" in zf.namelist()


def test_generate_glb_is_default(client):
    r = client.post("/generate", json={"params": {}})
    assert r.status_code == 200
    assert r.headers["content-type"] == "model/gltf-binary"
    assert r.content[:4] == b"glTF"


def test_generate_qr_only(client):
    r = client.post("/generate?fmt=glb", json={"slug": "qr-code", "params": {"text": "hola"}})
    assert r.status_code == 200
    assert r.content[:4] == b"glTF"


def test_unknown_pattern_is_400(client):
    r = client.post("/generate", json={"params": {"markings": "makerChipV42"}})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Unknown shape: makerChipV42.")


def test_radius_limit(client):
    r = client.post("/generate", json={"params": {"radius": 500}})
    assert r.status_code == 400
    assert "radius must be <=" in r.json()["detail"]


def test_unknown_assembly_is_400(client):
    r = client.post("/generate", json={"params": {"assemblyType": "stacked"}})
    assert r.status_code == 400
    assert "Unknown assembly type" in r.json()["detail"]


def test_unsupported_format(client):
    r = client.post("/generate?fmt=stl", json={"params": {}})
    assert r.status_code == 400


def test_unknown_slug(client):
    r = client.post("/generate", json={"slug": "teapot", "params": {}})
    assert r.status_code == 404


def test_subshape_error_is_build_error(client):
    r = client.post("/generate", json={"slug": "qr_code", "params": {"text": ""}})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Model build error:")


def test_schema(client):
    r = client.get("/schema")
    assert r.status_code == 200
    body = r.json()
    assert body["makerchip"]["defaults"]["markings"] == "makerChipV1"
    assert body["qr_code"]["defaults"]["size"] == 18.0
    assert body["image_extrude"]["types"]["mode"] == "sample|trace"
