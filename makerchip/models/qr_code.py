# makerchip/models/qr_code.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping

import qrcode
from manifold3d import CrossSection, Manifold, OpType

from ..errors import GenerationError
from ._helpers import num, pick, scale_to_size_and_center

NAME = "qr_code"

TYPES: Dict[str, str] = {
    "text": "str",              # contenido del QR
    "size": "float",            # lado del QR (mm)
    "extrudeDepth": "float",    # altura de los módulos (mm)
    "border": "int",            # módulos de margen (no se extruyen)
    "errorCorrection": "L|M|Q|H",
}

DEFAULTS: Dict[str, Any] = {
    "text": "https://cadit.app",
    "size": 18.0,
    "extrudeDepth": 1.0,
    "border": 1,
    "errorCorrection": "M",
}

_EC = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


def qr_matrix(text: str, border: int = 1, error_correction: str = "M") -> List[List[bool]]:
    qr = qrcode.QRCode(
        border=max(0, int(border)),
        box_size=1,
        error_correction=_EC.get(str(error_correction).upper(), qrcode.constants.ERROR_CORRECT_M),
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr.get_matrix()  # bool matrix, fila 0 arriba


def matrix_cross_section(matrix: List[List[bool]], pixel: float = 1.0) -> CrossSection:
    """
    Módulos oscuros -> CrossSection. Cada tramo horizontal de módulos
    contiguos es un rectángulo; la fila 0 queda arriba (Y positiva).
    """
    h = len(matrix)
    rects: List[CrossSection] = []
    for j, row in enumerate(matrix):
        y = (h - 1 - j) * pixel
        i, w = 0, len(row)
        while i < w:
            if not row[i]:
                i += 1
                continue
            start = i
            while i < w and row[i]:
                i += 1
            rects.append(CrossSection.square(((i - start) * pixel, pixel)).translate((start * pixel, y)))
    if not rects:
        return CrossSection()
    return CrossSection.batch_boolean(rects, OpType.Add)


class QRCodeGenerator:
    name = NAME

    def generate(self, params: Mapping[str, Any]) -> Manifold:
        p = dict(params or {})
        text = str(pick(p, "text", "content", default=DEFAULTS["text"]) or "").strip()
        if not text:
            raise GenerationError(self.name, "QR text is empty")

        size = num(pick(p, "size", default=DEFAULTS["size"]))
        depth = num(pick(p, "extrudeDepth", "extrude_depth", "height", default=DEFAULTS["extrudeDepth"]))
        if not size or size <= 0 or not depth or depth <= 0:
            raise GenerationError(self.name, f"invalid size/depth ({size}, {depth})")

        border = int(num(pick(p, "border", default=DEFAULTS["border"])) or 0)
        ec = str(pick(p, "errorCorrection", "error_correction", default=DEFAULTS["errorCorrection"]))
        matrix = qr_matrix(text, border=border, error_correction=ec)

        cs = scale_to_size_and_center(matrix_cross_section(matrix), size, size)
        if cs.is_empty():
            raise GenerationError(self.name, "QR matrix has no dark modules")
        return Manifold.extrude(cs, depth)


__all__ = ["NAME", "TYPES", "DEFAULTS", "QRCodeGenerator", "qr_matrix", "matrix_cross_section"]
