"""
Image I/O for the bake pipeline.

Thin adapters around the decoders, resampler and encoder this tool relies on:
OpenCV for OpenEXR / Radiance HDR input and resampling, tifffile for float
TIFF input, and Pillow for writing the 8-bit preview.
"""

import os
import math
from pathlib import Path
from typing import Tuple

# OpenCV only reads EXR when this is set before cv2 is imported
os.environ.setdefault("OPENCV_IO_ENABLE_OPENEXR", "1")

import cv2
import numpy as np
from PIL import Image


OPENCV_EXTENSIONS = {'.exr', '.hdr', '.pic'}
TIFF_EXTENSIONS = {'.tif', '.tiff'}
SUPPORTED_INPUT_EXTENSIONS = OPENCV_EXTENSIONS | TIFF_EXTENSIONS

# Pillow formats that cannot store an alpha channel
_RGB_ONLY_FORMATS = {'JPEG', 'BMP', 'PPM'}

# Upper bound on enlarged previews (about 4 GB of float RGBA)
MAX_ENLARGED_PIXELS = 1 << 28


class ImageDecodeError(Exception):
    """Raised when a scene-linear input cannot be decoded"""
    pass


class ImageWriteError(Exception):
    """Raised when the preview image cannot be written"""
    pass


def _to_rgba(arr: np.ndarray) -> np.ndarray:
    """Normalize a decoded array to (H, W, 4) float32 RGBA"""
    if arr.ndim == 2:
        arr = arr[..., np.newaxis]
    if arr.ndim != 3:
        raise ImageDecodeError(f"Unsupported image shape {arr.shape}")

    if np.issubdtype(arr.dtype, np.integer):
        arr = arr.astype(np.float32) / float(np.iinfo(arr.dtype).max)
    else:
        arr = arr.astype(np.float32, copy=False)

    h, w, c = arr.shape
    if c == 1:
        rgb = np.repeat(arr, 3, axis=2)
        alpha = np.ones((h, w, 1), dtype=np.float32)
    elif c == 2:
        # grey + alpha
        rgb = np.repeat(arr[..., :1], 3, axis=2)
        alpha = arr[..., 1:2]
    elif c == 3:
        rgb = arr
        alpha = np.ones((h, w, 1), dtype=np.float32)
    else:
        rgb = arr[..., :3]
        alpha = arr[..., 3:4]
    return np.ascontiguousarray(np.concatenate([rgb, alpha], axis=2), dtype=np.float32)


def _read_opencv(path: str) -> np.ndarray:
    arr = cv2.imread(path, cv2.IMREAD_UNCHANGED)
    if arr is None:
        raise ImageDecodeError(f"OpenCV could not decode {path}")
    if arr.ndim == 3:
        if arr.shape[2] == 3:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGR2RGB)
        elif arr.shape[2] == 4:
            arr = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
    return arr


def _read_tiff(path: str) -> np.ndarray:
    import tifffile

    try:
        arr = tifffile.imread(path)
    except Exception as e:
        raise ImageDecodeError(f"tifffile could not decode {path}: {e}")
    # planar (C, H, W) layouts from some writers
    if arr.ndim == 3 and arr.shape[0] in (3, 4) and arr.shape[2] not in (1, 2, 3, 4):
        arr = np.moveaxis(arr, 0, -1)
    return arr


def load_linear_image(path: str) -> Tuple[int, int, np.ndarray]:
    """
    Decode a scene-linear image into a float RGBA frame.

    Args:
        path: Input .exr, .hdr/.pic or .tif/.tiff file

    Returns:
        (width, height, frame) with frame shaped (height, width, 4), float32

    Raises:
        ImageDecodeError: If the file is missing, unsupported or corrupt
    """
    if not os.path.exists(path):
        raise ImageDecodeError(f"Input image not found: {path}")

    ext = Path(path).suffix.lower()
    if ext not in SUPPORTED_INPUT_EXTENSIONS:
        raise ImageDecodeError(
            f"Unsupported input format '{ext or path}'. "
            f"Expected one of: {', '.join(sorted(SUPPORTED_INPUT_EXTENSIONS))}"
        )

    if ext in TIFF_EXTENSIONS:
        arr = _read_tiff(path)
    else:
        arr = _read_opencv(path)

    frame = _to_rgba(arr)
    h, w = frame.shape[:2]
    if w == 0 or h == 0:
        raise ImageDecodeError(f"Decoded image is empty: {path}")
    return w, h, frame


def target_size(width: int, height: int, resize_factor: float) -> Tuple[int, int]:
    """Output size for a reduction factor (2.0 gives a half-size image)"""
    if not math.isfinite(resize_factor) or resize_factor <= 0:
        raise ValueError(f"Resize factor must be a positive number, got {resize_factor}")

    dst_w = int(width / resize_factor)
    dst_h = int(height / resize_factor)
    if dst_w < 1 or dst_h < 1:
        raise ValueError(
            f"Resize factor {resize_factor} reduces {width}x{height} to an empty image"
        )
    if resize_factor < 1 and dst_w * dst_h > MAX_ENLARGED_PIXELS:
        raise ValueError(
            f"Resize factor {resize_factor} enlarges {width}x{height} to {dst_w}x{dst_h}, "
            f"above the {MAX_ENLARGED_PIXELS} pixel limit"
        )
    return dst_w, dst_h


def resample(frame: np.ndarray, src_w: int, src_h: int, dst_w: int, dst_h: int) -> np.ndarray:
    """Resample an RGBA float frame, returning a new (dst_h, dst_w, 4) array"""
    if dst_w < 1 or dst_h < 1:
        raise ValueError(f"Target size must be at least 1x1, got {dst_w}x{dst_h}")

    src = np.ascontiguousarray(np.asarray(frame, dtype=np.float32).reshape(src_h, src_w, 4))
    if (dst_w, dst_h) == (src_w, src_h):
        return src.copy()

    shrinking = dst_w <= src_w and dst_h <= src_h
    interpolation = cv2.INTER_AREA if shrinking else cv2.INTER_CUBIC
    try:
        out = cv2.resize(src, (dst_w, dst_h), interpolation=interpolation)
    except cv2.error as e:
        raise ValueError(f"Failed to resample {src_w}x{src_h} to {dst_w}x{dst_h}: {e}") from e
    # 1xN targets can come back without the channel axis
    return out.reshape(dst_h, dst_w, 4)


def write_image(path: str, rgba: np.ndarray) -> None:
    """
    Write an 8-bit RGBA frame with Pillow.

    The format follows the file extension (PNG when there is none). Formats
    without alpha support are written as RGB.

    Raises:
        ImageWriteError: If the image cannot be encoded or saved
    """
    if rgba.dtype != np.uint8:
        raise ImageWriteError(f"Preview must be uint8, got {rgba.dtype}")
    if rgba.ndim != 3 or rgba.shape[2] != 4:
        raise ImageWriteError(f"Preview must be (H, W, 4), got shape {rgba.shape}")

    out = Path(path)
    try:
        out.parent.mkdir(parents=True, exist_ok=True)
        fmt = Image.registered_extensions().get(out.suffix.lower()) if out.suffix else None
        fmt = fmt or 'PNG'

        im = Image.fromarray(np.ascontiguousarray(rgba))
        if fmt in _RGB_ONLY_FORMATS:
            im = im.convert('RGB')
        if fmt == 'JPEG':
            im.save(out, format=fmt, quality=95, subsampling=0)
        else:
            im.save(out, format=fmt)
    except (OSError, ValueError, KeyError) as e:
        raise ImageWriteError(f"Failed to write {path}: {e}")
