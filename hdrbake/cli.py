"""
Command line interface for baking LDR previews from scene-linear HDR images.

    hdr-bake input.exr output.png [colorspace] [resize]

e.g. `hdr-bake test.exr test_sRGB_ACES.png 3 1` writes an ACES RRT+ODT preview
suitable for viewing on an sRGB display.
"""

import argparse
import math
import sys

from tone import DisplayTransform

from .encoder import ROUNDING_MODES
from .pipeline import BakeConfig, BakeError, run_bake


def _colorspace(value: str) -> DisplayTransform:
    try:
        return DisplayTransform.from_index(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _resize_factor(value: str) -> float:
    try:
        factor = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Resize factor must be a number, got {value!r}")
    if not math.isfinite(factor) or factor <= 0:
        raise argparse.ArgumentTypeError(f"Resize factor must be a positive number, got {value}")
    return factor


def _transform_table() -> str:
    return "\n".join(f"  {mode.label:<14}= {int(mode)}" for mode in DisplayTransform)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='hdr-bake',
        description='Bake display transforms into LDR previews of scene-linear HDR images',
        epilog=f"Colorspace (default 1):\n{_transform_table()}\n\n"
               "Resize (default 1): reduction factor, 2 produces a half-sized image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument('input', nargs='?', help='Scene-linear input (.exr, .hdr, .tif)')
    parser.add_argument('output', nargs='?', help='Output preview path (.png recommended)')
    parser.add_argument('colorspace', nargs='?', type=_colorspace, default=DisplayTransform.SRGB,
                        help='Display transform selector 0-5')
    parser.add_argument('resize', nargs='?', type=_resize_factor, default=1.0,
                        help='Downscale factor')

    # Quantization
    parser.add_argument('--round', dest='rounding', choices=ROUNDING_MODES, default='truncate',
                        help='8-bit quantization: truncate (default) or nearest')

    # Behavior
    parser.add_argument('--verbose', '-v', action='store_true', help='Verbose output')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only report errors')
    parser.add_argument('--check-deps', action='store_true', help='Check dependencies')
    parser.add_argument('--list-transforms', action='store_true', help='List colorspace selectors')
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.check_deps:
        return 0 if _check_dependencies() else 1

    if args.list_transforms:
        print(_transform_table())
        return 0

    if not args.input or not args.output:
        parser.error('input and output paths are required')

    config = BakeConfig(
        colorspace=args.colorspace,
        resize_factor=args.resize,
        rounding=args.rounding,
        verbose=args.verbose,
        quiet=args.quiet,
    )

    if args.verbose:
        print(f"Colorspace: {config.colorspace.label} ({int(config.colorspace)})")
        print(f"Resize factor: {config.resize_factor}")

    try:
        run_bake(args.input, args.output, config)
    except BakeError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"💥 Unexpected error: {e}", file=sys.stderr)
        return 1
    return 0


def _check_dependencies() -> bool:
    """Check decoder/encoder dependencies"""
    print("🔍 Checking dependencies...")
    all_good = True

    try:
        import numpy as np
        import PIL
        print(f"✅ NumPy {np.__version__}, Pillow {PIL.__version__}")
    except ImportError as e:
        print(f"❌ Missing: {e}")
        all_good = False

    try:
        import cv2
        print(f"✅ OpenCV {cv2.__version__} (EXR / Radiance HDR input, resampling)")
    except ImportError as e:
        print(f"❌ Missing: {e}")
        all_good = False

    try:
        import tifffile
        print(f"✅ tifffile {tifffile.__version__} (float TIFF input)")
    except ImportError as e:
        print(f"⚠️  tifffile unavailable, TIFF input disabled: {e}")

    return all_good


if __name__ == '__main__':
    sys.exit(main())
