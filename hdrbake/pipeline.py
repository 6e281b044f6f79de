"""
Bake pipeline: scene-linear HDR image -> display-referred LDR preview.

Loads the input, optionally downscales it, bakes the selected display
transform into 8-bit RGBA and writes the result. The output file is only
written once the whole frame has been encoded.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from tone import DisplayTransform

from .encoder import ROUNDING_MODES, encode_frame
from .image_io import (
    ImageDecodeError,
    ImageWriteError,
    load_linear_image,
    resample,
    target_size,
    write_image,
)


@dataclass
class BakeConfig:
    """Configuration for a single bake run"""
    colorspace: Union[DisplayTransform, int] = DisplayTransform.SRGB
    resize_factor: float = 1.0  # 2.0 produces a half-size preview
    rounding: str = "truncate"  # "truncate" | "nearest"

    # Output control
    verbose: bool = False
    quiet: bool = False

    def validate(self) -> None:
        """Reject bad settings before any pixel work starts"""
        self.colorspace = DisplayTransform.from_index(self.colorspace)
        try:
            self.resize_factor = float(self.resize_factor)
        except (TypeError, ValueError):
            raise ValueError(f"Resize factor must be a number, got {self.resize_factor!r}") from None
        if not math.isfinite(self.resize_factor) or self.resize_factor <= 0:
            raise ValueError(f"Resize factor must be a positive number, got {self.resize_factor}")
        if self.rounding not in ROUNDING_MODES:
            raise ValueError(f"Unknown rounding mode: {self.rounding!r} (expected one of {ROUNDING_MODES})")


@dataclass
class BakeOutputs:
    """Results from a bake run"""
    output_path: str
    source_size: Tuple[int, int]  # (width, height)
    output_size: Tuple[int, int]  # (width, height)
    colorspace: DisplayTransform


class BakeError(Exception):
    """Raised when the bake pipeline fails"""
    pass


def run_bake(
    input_path: str,
    output_path: str,
    config: Optional[BakeConfig] = None,
) -> BakeOutputs:
    """
    Bake a display transform into an LDR preview of a scene-linear image.

    Args:
        input_path: Scene-linear input (.exr, .hdr, .tif, ...)
        output_path: Preview path; format follows the extension
        config: Bake configuration

    Returns:
        BakeOutputs describing what was written

    Raises:
        ValueError: If the configuration is invalid
        BakeError: If decoding, resizing or writing fails
    """
    config = config or BakeConfig()
    config.validate()
    mode = config.colorspace

    def report(msg: str) -> None:
        if not config.quiet:
            print(msg)

    report("[1/3] Loading scene-linear input...")
    try:
        width, height, frame = load_linear_image(input_path)
    except ImageDecodeError as e:
        raise BakeError(f"Failed to load {input_path}: {e}") from e

    if config.verbose:
        report(f"Source resolution: {width} x {height}")

    try:
        dst_w, dst_h = target_size(width, height, config.resize_factor)
        report(f">>> Output resolution will be = {dst_w} x {dst_h}")
        if (dst_w, dst_h) != (width, height):
            frame = resample(frame, width, height, dst_w, dst_h)
    except (ValueError, MemoryError) as e:
        raise BakeError(f"Failed to resize {input_path}: {e}") from e

    report(f"[2/3] Baking {mode.label} transform...")
    if config.verbose:
        report(f"Quantization: {config.rounding}")
    display = encode_frame(frame, mode, dst_w, dst_h, rounding=config.rounding)

    report("[3/3] Writing preview...")
    try:
        write_image(output_path, display)
    except ImageWriteError as e:
        raise BakeError(str(e)) from e

    report(f"✅ Preview written: {output_path}")
    return BakeOutputs(
        output_path=output_path,
        source_size=(width, height),
        output_size=(dst_w, dst_h),
        colorspace=mode,
    )
