import base64
import io

import pytest
from manifold3d import CrossSection, Manifold
from PIL import Image

from makerchip.errors import GenerationError
from makerchip.models.params import ChipParams


def _png_data_url(img: Image.Image) -> str:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


@pytest.fixture
def rect_png():
    """10x10 blanco con un rectángulo negro de 6x4 píxeles."""
    img = Image.new("RGB", (10, 10), (255, 255, 255))
    for x in range(2, 8):
        for y in range(3, 7):
            img.putpixel((x, y), (0, 0, 0))
    return {"dataUrl": _png_data_url(img), "fileType": "image/png", "fileName": "rect.png"}


@pytest.fixture
def rect_svg():
    svg = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 20 10"><rect x="0" y="0" width="20" height="10"/></svg>'
    data = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return {"dataUrl": f"data:image/svg+xml;base64,{data}", "fileType": "image/svg+xml", "fileName": "rect.svg"}


@pytest.fixture
def chip():
    return ChipParams()


class BoxGenerator:
    """Sub-generador de prueba: caja de w x w x h."""

    name = "box"

    def __init__(self, w=10.0, h=1.0):
        self.w, self.h = w, h

    def generate(self, params):
        return Manifold.extrude(CrossSection.square((self.w, self.w), center=True), self.h)


class FailingGenerator:
    name = "broken"

    def __init__(self, exc=None):
        self.exc = exc or RuntimeError("boom")

    def generate(self, params):
        raise self.exc


@pytest.fixture
def box_generator():
    return BoxGenerator()


@pytest.fixture
def failing_generator():
    return FailingGenerator()


@pytest.fixture
def generation_error_generator():
    return FailingGenerator(GenerationError("broken", "no data"))
