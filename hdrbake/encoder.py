"""
Frame encoder: scene-linear RGBA float frame -> display RGBA 8-bit frame.

Every pixel is independent, so the whole frame is transformed as a single
vectorized numpy map. The input frame is never modified.
"""

from typing import Union

import numpy as np

from tone import DisplayTransform, apply_transform

ROUNDING_MODES = ("truncate", "nearest")


def quantize(x, rounding: str = "truncate") -> np.ndarray:
    """
    Map float channel values to uint8 in [0, 255].

    "truncate" mirrors an integer cast of 255*x (values are biased slightly
    low); "nearest" rounds half up. NaN becomes 0, infinities clamp.
    """
    if rounding not in ROUNDING_MODES:
        raise ValueError(f"Unknown rounding mode: {rounding!r} (expected one of {ROUNDING_MODES})")

    scaled = np.asarray(x, dtype=np.float64) * 255.0
    scaled = np.nan_to_num(scaled, nan=0.0, posinf=255.0, neginf=0.0)
    if rounding == "nearest":
        scaled = np.floor(scaled + 0.5)
    # Clamp first: a truncating cast of anything in [0, 255] is then well defined.
    return np.clip(scaled, 0.0, 255.0).astype(np.uint8)


def _as_frame(frame: np.ndarray, width: int, height: int) -> np.ndarray:
    if width <= 0 or height <= 0:
        raise ValueError(f"Frame dimensions must be positive, got {width}x{height}")

    arr = np.asarray(frame)
    expected = width * height * 4
    if arr.size != expected:
        raise ValueError(
            f"Frame buffer has {arr.size} samples, expected {expected} "
            f"({width}x{height} RGBA)"
        )
    if arr.ndim == 3 and arr.shape != (height, width, 4):
        raise ValueError(f"Frame shape {arr.shape} does not match ({height}, {width}, 4)")
    return arr.reshape(height, width, 4)


def encode_frame(
    frame: np.ndarray,
    mode: Union[DisplayTransform, int],
    width: int,
    height: int,
    rounding: str = "truncate",
) -> np.ndarray:
    """
    Transform and quantize a full frame.

    Args:
        frame: Row-major RGBA float samples, flat (width*height*4) or
            shaped (height, width, 4). Input alpha is ignored.
        mode: Display transform selector
        width: Frame width in pixels
        height: Frame height in pixels
        rounding: "truncate" (default) or "nearest"

    Returns:
        New uint8 array of shape (height, width, 4) with alpha fixed at 255

    Raises:
        ValueError: On an invalid mode, rounding mode or buffer size
    """
    mode = DisplayTransform.from_index(mode)
    arr = _as_frame(frame, width, height)

    out = np.empty((height, width, 4), dtype=np.uint8)
    out[..., :3] = quantize(apply_transform(mode, arr[..., :3]), rounding)
    out[..., 3] = 255
    return out
