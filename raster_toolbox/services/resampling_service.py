"""
Band-by-band raster resampling.

Every destination pixel (x, y) samples the source at
(x * src_w / dst_w, y * src_h / dst_h) and combines neighbouring samples with
one of three kernels: nearest neighbour, bilinear or cubic convolution.
Arithmetic runs in float64 over the whole destination grid of one band at a
time; the result is clamped to [0, 255] and truncated to uint8.
"""
from __future__ import annotations

import logging
from numbers import Integral
from typing import Callable, Dict, Union

import numpy as np

from ..models.enums import ResampleMethod
from ..models.errors import ValidationError
from ..models.raster_image import RasterImage

logger = logging.getLogger(__name__)

_CUBIC_OFFSETS = (-1, 0, 1, 2)


def clamp_to_byte(value: float) -> int:
    """Clamp *value* into [0, 255] and truncate toward zero."""
    return int(min(max(value, 0.0), 255.0))


def clamp_to_bytes(values: np.ndarray) -> np.ndarray:
    """Array form of clamp_to_byte."""
    return np.clip(values, 0.0, 255.0).astype(np.uint8)


def cubic_weight(t: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
    """
    Cubic convolution kernel (a = -0.5).

        |t| <= 1      1.5|t|^3 - 2.5|t|^2 + 1
        1 < |t| < 2  -0.5|t|^3 + 2.5|t|^2 - 4|t| + 2
        |t| >= 2      0
    """
    t = np.abs(np.asarray(t, dtype=np.float64))
    near = 1.5 * t ** 3 - 2.5 * t ** 2 + 1.0
    far = -0.5 * t ** 3 + 2.5 * t ** 2 - 4.0 * t + 2.0
    weight = np.where(t <= 1.0, near, np.where(t < 2.0, far, 0.0))
    return weight if weight.ndim else float(weight)


def _sample_positions(src_size: int, dst_size: int) -> np.ndarray:
    ratio = src_size / dst_size
    return np.arange(dst_size, dtype=np.float64) * ratio


# ─── kernels: (plane (H, W) uint8, src_x (W',), src_y (H',)) -> (H', W') uint8 ───
def _nearest_neighbor(plane: np.ndarray, src_x: np.ndarray, src_y: np.ndarray) -> np.ndarray:
    height, width = plane.shape
    xi = np.minimum(src_x.astype(np.intp), width - 1)
    yi = np.minimum(src_y.astype(np.intp), height - 1)
    return plane[np.ix_(yi, xi)]


def _bilinear(plane: np.ndarray, src_x: np.ndarray, src_y: np.ndarray) -> np.ndarray:
    height, width = plane.shape
    x1 = src_x.astype(np.intp)
    y1 = src_y.astype(np.intp)
    x2 = np.minimum(x1 + 1, width - 1)
    y2 = np.minimum(y1 + 1, height - 1)
    dx = (src_x - x1)[np.newaxis, :]
    dy = (src_y - y1)[:, np.newaxis]

    samples = plane.astype(np.float64)
    v11 = samples[np.ix_(y1, x1)]
    v21 = samples[np.ix_(y1, x2)]
    v12 = samples[np.ix_(y2, x1)]
    v22 = samples[np.ix_(y2, x2)]

    value = (v11 * (1 - dx) * (1 - dy) +
             v21 * dx * (1 - dy) +
             v12 * (1 - dx) * dy +
             v22 * dx * dy)
    return clamp_to_bytes(value)


def _cubic(plane: np.ndarray, src_x: np.ndarray, src_y: np.ndarray) -> np.ndarray:
    height, width = plane.shape
    x0 = src_x.astype(np.intp)
    y0 = src_y.astype(np.intp)
    samples = plane.astype(np.float64)

    total = np.zeros((src_y.size, src_x.size), dtype=np.float64)
    weight_sum = np.zeros_like(total)

    # Normalised convolution over the 4x4 neighbourhood, edges clamped.
    for oy in _CUBIC_OFFSETS:
        iy = np.clip(y0 + oy, 0, height - 1)
        wy = cubic_weight(src_y - (y0 + oy))[:, np.newaxis]
        rows = samples[iy]
        for ox in _CUBIC_OFFSETS:
            ix = np.clip(x0 + ox, 0, width - 1)
            wx = cubic_weight(src_x - (x0 + ox))[np.newaxis, :]
            weight = wx * wy
            total += rows[:, ix] * weight
            weight_sum += weight

    return clamp_to_bytes(total / weight_sum)


KERNELS: Dict[ResampleMethod, Callable[[np.ndarray, np.ndarray, np.ndarray], np.ndarray]] = {
    ResampleMethod.NEAREST_NEIGHBOR: _nearest_neighbor,
    ResampleMethod.BILINEAR: _bilinear,
    ResampleMethod.CUBIC: _cubic,
}


def _scaled_geo_transform(geo_transform, x_ratio: float, y_ratio: float):
    x0, a, b, y0, d, e = geo_transform
    return (x0, a * x_ratio, b * y_ratio, y0, d * x_ratio, e * y_ratio)


def resample(
    image: RasterImage,
    new_width: int,
    new_height: int,
    method: ResampleMethod,
    *,
    keep_georeference: bool = False,
) -> RasterImage:
    """
    Resample every band of *image* to new_width x new_height.

    Args:
        image: Valid source raster.
        new_width, new_height: Positive target dimensions (up- or down-sampling).
        method: Interpolation kernel.
        keep_georeference: Copy projection, no-data and metadata onto the
            result and rescale the geo-transform pixel size.  Off by default,
            in which case the result carries default geo fields.

    Returns:
        RasterImage: New raster with the same band count.

    Raises:
        ValidationError: Non-positive dimensions, malformed source, unknown method.
    """
    for name, value in (("new_width", new_width), ("new_height", new_height)):
        if not isinstance(value, Integral) or isinstance(value, bool) or value <= 0:
            raise ValidationError(f"{name} must be a positive integer, got {value!r}")
    if not isinstance(method, ResampleMethod):
        raise ValidationError(f"Unsupported resample method: {method!r}")

    problems = image.validation_errors()
    if problems:
        raise ValidationError(f"Cannot resample malformed raster: {'; '.join(problems)}")

    kernel = KERNELS[method]
    new_width, new_height = int(new_width), int(new_height)
    src_x = _sample_positions(image.width, new_width)
    src_y = _sample_positions(image.height, new_height)

    planes = tuple(
        np.ascontiguousarray(kernel(image.plane_2d(band), src_x, src_y)).reshape(-1)
        for band in range(image.band_count)
    )
    logger.debug(f"Resampled {image.band_count} band(s) {image.width}x{image.height} → "
                 f"{new_width}x{new_height} ({method.value})")

    if not keep_georeference:
        return RasterImage(width=new_width, height=new_height,
                           band_count=image.band_count, planes=planes)

    x_ratio = image.width / new_width
    y_ratio = image.height / new_height
    return RasterImage(
        width=new_width,
        height=new_height,
        band_count=image.band_count,
        planes=planes,
        geo_transform=_scaled_geo_transform(image.geo_transform, x_ratio, y_ratio),
        projection=image.projection,
        no_data_value=image.no_data_value,
        metadata=dict(image.metadata),
    )


def fit_height(new_width: int, original_width: int, original_height: int) -> int:
    """Height that keeps the original aspect ratio for *new_width*."""
    if original_width <= 0 or original_height <= 0:
        raise ValidationError(f"Invalid original size {original_width}x{original_height}")
    return int(new_width * original_height / original_width)


class ResamplingService:
    """
    Service-layer wrapper around resample(); holds the georeference policy.
    """

    def __init__(self, keep_georeference: bool = False):
        self.keep_georeference = keep_georeference

    def resample(self, image: RasterImage, new_width: int, new_height: int,
                 method: ResampleMethod) -> RasterImage:
        return resample(image, new_width, new_height, method,
                        keep_georeference=self.keep_georeference)
