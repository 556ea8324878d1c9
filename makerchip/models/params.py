# makerchip/models/params.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Dict, Literal, Mapping, Optional

from ..errors import ConfigurationError
from ._helpers import flag, num, pick

AssemblyType = Literal["flat", "printable"]
ASSEMBLY_TYPES = ("flat", "printable")

TYPES: Dict[str, str] = {
    "radius": "float",                 # radio del chip (mm)
    "height": "float",                 # altura de extrusión (mm)
    "rounding_radius": "float",        # redondeo del canto (mm), <= height/2 al usarse
    "center_circle_radius": "float",   # círculo central (mm)
    "assembly_type": "flat|printable",
    "markings": "str",                 # id de patrón (makerChipV1..V20)
    "qr_code_settings": "{enabled, params}",
    "image_extrude_settings": "{enabled, params}",
}

DEFAULTS: Dict[str, Any] = {
    "radius": 20.0,
    "height": 3.0,
    "rounding_radius": 1.0,
    "center_circle_radius": 14.0,
    "assembly_type": "flat",
    "markings": "makerChipV1",
}

_EMPTY: Mapping[str, Any] = MappingProxyType({})


@dataclass(frozen=True)
class EmbeddedSettings:
    enabled: bool = False
    params: Mapping[str, Any] = field(default_factory=lambda: _EMPTY)

    @classmethod
    def from_value(cls, value: Any) -> "EmbeddedSettings":
        if isinstance(value, EmbeddedSettings):
            return value
        if not isinstance(value, Mapping):
            return cls()
        params = value.get("params") or {}
        if not isinstance(params, Mapping):
            params = {}
        return cls(enabled=flag(value.get("enabled")), params=MappingProxyType(dict(params)))

    def to_dict(self) -> Dict[str, Any]:
        return {"enabled": self.enabled, "params": dict(self.params)}


@dataclass(frozen=True)
class ChipParams:
    radius: float = DEFAULTS["radius"]
    height: float = DEFAULTS["height"]
    rounding_radius: float = DEFAULTS["rounding_radius"]
    center_circle_radius: float = DEFAULTS["center_circle_radius"]
    assembly_type: AssemblyType = DEFAULTS["assembly_type"]
    markings: str = DEFAULTS["markings"]
    qr_code_settings: EmbeddedSettings = field(default_factory=EmbeddedSettings)
    image_extrude_settings: EmbeddedSettings = field(default_factory=EmbeddedSettings)

    def __post_init__(self) -> None:
        if not self.radius > 0:
            raise ConfigurationError(f"radius must be > 0 (got {self.radius})")
        if not self.height > 0:
            raise ConfigurationError(f"height must be > 0 (got {self.height})")
        if self.rounding_radius < 0:
            raise ConfigurationError(f"roundingRadius must be >= 0 (got {self.rounding_radius})")
        # el círculo central va dentro del disco; 0 dejaría una pieza vacía
        if not 0 < self.center_circle_radius < self.radius:
            raise ConfigurationError(
                f"centerCircleRadius must be > 0 and < radius "
                f"(got {self.center_circle_radius}, radius {self.radius})"
            )
        if self.assembly_type not in ASSEMBLY_TYPES:
            raise ConfigurationError(
                f"Unknown assembly type: {self.assembly_type}. "
                f"Valid options: {', '.join(ASSEMBLY_TYPES)}"
            )

    @classmethod
    def from_dict(cls, p: Optional[Mapping[str, Any]] = None) -> "ChipParams":
        """Acepta claves snake_case y las camelCase del esquema original."""
        p = p or {}

        def _float(*keys: str, default: float) -> float:
            raw = pick(p, *keys)
            val = num(raw)
            if raw is not None and val is None:
                raise ConfigurationError(f"{keys[0]} must be a number (got {raw!r})")
            return default if val is None else val

        assembly = str(pick(p, "assembly_type", "assemblyType", "assembly",
                            default=DEFAULTS["assembly_type"])).strip().lower()
        markings = str(pick(p, "markings", "pattern", default=DEFAULTS["markings"])).strip()

        return cls(
            radius=_float("radius", "radius_mm", default=DEFAULTS["radius"]),
            height=_float("height", "height_mm", default=DEFAULTS["height"]),
            rounding_radius=_float("rounding_radius", "roundingRadius", "rounding",
                                   default=DEFAULTS["rounding_radius"]),
            center_circle_radius=_float("center_circle_radius", "centerCircleRadius", "center_radius",
                                        default=DEFAULTS["center_circle_radius"]),
            assembly_type=assembly,  # type: ignore[arg-type]
            markings=markings,
            qr_code_settings=EmbeddedSettings.from_value(
                pick(p, "qr_code_settings", "qrCodeSettings")),
            image_extrude_settings=EmbeddedSettings.from_value(
                pick(p, "image_extrude_settings", "imageExtrudeSettings")),
        )

    def with_assembly(self, assembly_type: AssemblyType) -> "ChipParams":
        return replace(self, assembly_type=assembly_type)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "radius": self.radius,
            "height": self.height,
            "rounding_radius": self.rounding_radius,
            "center_circle_radius": self.center_circle_radius,
            "assembly_type": self.assembly_type,
            "markings": self.markings,
            "qr_code_settings": self.qr_code_settings.to_dict(),
            "image_extrude_settings": self.image_extrude_settings.to_dict(),
        }


__all__ = ["AssemblyType", "ASSEMBLY_TYPES", "ChipParams", "EmbeddedSettings", "DEFAULTS", "TYPES"]
