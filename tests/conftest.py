"""Pytest configuration and shared fixtures for bake pipeline tests"""

import tempfile
import shutil
from pathlib import Path
from typing import Generator

import pytest
import numpy as np

from .frame_utils import make_linear_frame, write_float_tiff


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Temporary directory for test outputs, cleaned up after test"""
    temp_path = Path(tempfile.mkdtemp(prefix="bake_test_"))
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path)


@pytest.fixture
def linear_frame() -> np.ndarray:
    """Small (6, 8, 4) float RGBA frame"""
    return make_linear_frame(8, 6)


@pytest.fixture
def linear_tiff(temp_dir: Path) -> Path:
    """Float32 RGB TIFF with a horizontal exposure ramp from black to 8.0"""
    width, height = 64, 32
    ramp = np.linspace(0.0, 8.0, width, dtype=np.float32)
    rgb = np.stack([
        np.tile(ramp, (height, 1)),
        np.tile(ramp * 0.5, (height, 1)),
        np.tile(ramp * 0.25, (height, 1)),
    ], axis=-1)
    return write_float_tiff(temp_dir / "ramp.tif", rgb)


@pytest.fixture
def grey_tiff(temp_dir: Path) -> Path:
    """4x2 float TIFF filled with 18% grey"""
    rgb = np.full((2, 4, 3), 0.18, dtype=np.float32)
    return write_float_tiff(temp_dir / "grey.tif", rgb)
