from pathlib import Path

import numpy as np
import pytest
from PIL import Image as PILImage

from raster_toolbox.models.raster_image import RasterImage


def make_raster(width=8, height=6, bands=1, seed=0, **geo) -> RasterImage:
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(height, width, bands), dtype=np.uint8)
    return RasterImage.from_array(arr, **geo)


def write_rgb(path: Path, width: int, height: int, seed: int = 0, fmt: str = None) -> np.ndarray:
    """Write a random RGB image with Pillow and return its (H, W, 3) pixels."""
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)
    PILImage.fromarray(arr).save(path, format=fmt)
    return arr


@pytest.fixture
def raster_factory():
    return make_raster


@pytest.fixture
def png_100(tmp_path) -> Path:
    path = tmp_path / "scene.png"
    write_rgb(path, 100, 100, seed=1)
    return path


@pytest.fixture
def wide_png(tmp_path) -> Path:
    path = tmp_path / "wide.png"
    write_rgb(path, 100, 50, seed=2)
    return path


@pytest.fixture
def rgb_writer():
    return write_rgb
