# makerchip/config.py
from __future__ import annotations

import logging
import os
from typing import List, Optional

os.environ.setdefault("TRIMESH_NO_NETWORK", "1")


def _split_origins(s: Optional[str]) -> List[str]:
    if not s:
        return []
    return [x.strip() for x in s.split(",") if x.strip()]


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name, "") or "").strip()
    if not raw:
        return default
    try:
        return float(raw.replace(",", "."))
    except ValueError:
        return default


CORS_ALLOW = os.getenv("CORS_ALLOW_ORIGINS", "")
ORIGINS = _split_origins(CORS_ALLOW) or ["*"]

DEBUG = os.getenv("MAKERCHIP_DEBUG", "0") == "1"

# tolerancia (mm) al muestrear los SVG de los patrones
SVG_MAX_ERROR = _env_float("MAKERCHIP_SVG_MAX_ERROR", 0.01)

# límite del radio aceptado por la API (el esquema original: 10..100)
MAX_RADIUS = _env_float("MAKERCHIP_MAX_RADIUS", 100.0)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(debug: Optional[bool] = None) -> None:
    """Handler básico para CLI/servicio. Idempotente."""
    level = logging.DEBUG if (DEBUG if debug is None else debug) else logging.INFO
    root = logging.getLogger("makerchip")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
