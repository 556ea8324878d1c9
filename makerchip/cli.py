"""
CLI del generador de maker chips.

Uso:
    makerchip chip.glb
    makerchip chip.3mf --markings makerChipV5 --radius 25
    makerchip chip.glb -m makerChipV10 -a printable
    makerchip chip.glb --qr-enabled --qr-content "Hello World"
    makerchip chip.glb --image-enabled --image-file logo.svg
"""
from __future__ import annotations

import argparse
import os
import sys
from typing import Any, Dict, List, Optional

from .config import configure_logging
from .models.assembly import assemble_makerchip_shapes
from .models.image_extrude import DEFAULTS as IMAGE_DEFAULTS
from .models.image_extrude import MODES, load_image_file
from .models.params import ASSEMBLY_TYPES, DEFAULTS, ChipParams
from .models.patterns import PATTERN_IDS
from .models.qr_code import DEFAULTS as QR_DEFAULTS
from .models.threemf_export import three_mf_export
from .utils.scene_export import export_glb

SUPPORTED_FORMATS = (".glb", ".3mf")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="makerchip",
        description="Generate Makerchip models (.glb preview or multi-color .3mf)",
        epilog=f"Available patterns: {PATTERN_IDS[0]} through {PATTERN_IDS[-1]}",
    )
    parser.add_argument("output", nargs="?", help="Output file (.glb or .3mf)")

    chip = parser.add_argument_group("chip options")
    chip.add_argument("-r", "--radius", type=float, default=DEFAULTS["radius"],
                      help="Chip radius in mm (default: %(default)s)")
    chip.add_argument("-H", "--height", type=float, default=DEFAULTS["height"],
                      help="Extrusion height in mm (default: %(default)s)")
    chip.add_argument("--rounding", type=float, default=DEFAULTS["rounding_radius"],
                      help="Edge rounding radius in mm (default: %(default)s)")
    chip.add_argument("--center-radius", type=float, default=DEFAULTS["center_circle_radius"],
                      help="Center circle radius in mm (default: %(default)s)")
    chip.add_argument("-a", "--assembly", default=DEFAULTS["assembly_type"],
                      help=f"Assembly type: {' or '.join(ASSEMBLY_TYPES)} (default: %(default)s)")
    chip.add_argument("-m", "--markings", default=DEFAULTS["markings"],
                      help="Pattern style (default: %(default)s)")

    qr = parser.add_argument_group("QR code options")
    qr.add_argument("--qr-enabled", action="store_true", help="Enable QR code generation")
    qr.add_argument("--qr-content", default=QR_DEFAULTS["text"],
                    help="QR code content (default: %(default)s)")
    qr.add_argument("--qr-size", type=float, default=QR_DEFAULTS["size"],
                    help="QR code size in mm (default: %(default)s)")
    qr.add_argument("--qr-height", type=float, default=QR_DEFAULTS["extrudeDepth"],
                    help="QR code extrusion height in mm (default: %(default)s)")

    img = parser.add_argument_group("image extrude options")
    img.add_argument("--image-enabled", action="store_true", help="Enable image extrusion")
    img.add_argument("--image-file", help="Path to image file (SVG, PNG, JPG)")
    img.add_argument("--image-mode", choices=MODES, default=IMAGE_DEFAULTS["mode"],
                     help="Processing mode (default: %(default)s)")
    img.add_argument("--image-height", type=float, default=IMAGE_DEFAULTS["height"],
                     help="Extrusion height in mm (default: %(default)s)")
    img.add_argument("--image-max-width", type=float, default=IMAGE_DEFAULTS["maxWidth"],
                     help="Maximum width in mm (default: %(default)s)")

    parser.add_argument("--list-patterns", action="store_true", help="List pattern ids and exit")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def params_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    qr_params = {
        **QR_DEFAULTS,
        "text": args.qr_content or QR_DEFAULTS["text"],
        "size": args.qr_size,
        "extrudeDepth": args.qr_height,
    }
    image_params: Dict[str, Any] = {
        **IMAGE_DEFAULTS,
        "mode": args.image_mode,
        "height": args.image_height,
        "maxWidth": args.image_max_width,
    }

    if args.image_enabled and args.image_file:
        image_file = load_image_file(args.image_file)
        if image_file is None:
            print(f"Warning: Image file not found: {args.image_file}", file=sys.stderr)
        else:
            image_params["imageFile"] = image_file
            print(f"Loaded image: {args.image_file}")

    return {
        "radius": args.radius,
        "height": args.height,
        "roundingRadius": args.rounding,
        "centerCircleRadius": args.center_radius,
        "assemblyType": args.assembly,
        "markings": args.markings,
        "qrCodeSettings": {"enabled": args.qr_enabled, "params": qr_params},
        "imageExtrudeSettings": {"enabled": args.image_enabled, "params": image_params},
    }


def _write(path: str, data: bytes) -> None:
    folder = os.path.dirname(os.path.abspath(path))
    os.makedirs(folder, exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)


def run(output: str, params: Dict[str, Any]) -> None:
    chip = ChipParams.from_dict(params)
    print(
        f"Generating Makerchip: radius={chip.radius:g} height={chip.height:g} "
        f"rounding={chip.rounding_radius:g} center={chip.center_circle_radius:g} "
        f"assembly={chip.assembly_type} markings={chip.markings} "
        f"qr={chip.qr_code_settings.enabled} image={chip.image_extrude_settings.enabled}"
    )

    ext = os.path.splitext(output)[1].lower()
    if ext == ".3mf":
        _write(output, three_mf_export(chip).data)
    else:
        shapes = assemble_makerchip_shapes(chip)
        print(f"Exporting {len(shapes)} parts to {output}...")
        _write(output, export_glb((p.label, p.solid) for p in shapes))
    print(f"✓ Generated {output}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(debug=True if args.verbose else None)

    if args.list_patterns:
        for name in PATTERN_IDS:
            print(name)
        return 0

    if not args.output:
        parser.print_usage(sys.stderr)
        print("Error: missing output file (.glb or .3mf)", file=sys.stderr)
        return 1

    ext = os.path.splitext(args.output)[1].lower()
    if ext not in SUPPORTED_FORMATS:
        print(
            f"Error: Output file must have one of these extensions: {', '.join(SUPPORTED_FORMATS)}",
            file=sys.stderr,
        )
        print(f"Got: {ext or '(none)'}", file=sys.stderr)
        return 1

    try:
        run(args.output, params_from_args(args))
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
