from __future__ import annotations
from enum import Enum
from pathlib import Path
from typing import Union

from .errors import ValidationError


class RasterFormat(Enum):
    """
    Raster container labels.  GeoTIFF is a label only: it is decoded as a
    generic bitmap and encoded with the PNG writer.
    """
    GEOTIFF = "GeoTIFF"
    PNG = "PNG"
    JPEG = "JPEG"
    BMP = "BMP"

    @property
    def encoder(self) -> str:
        """Pillow format name used when writing this format."""
        return _ENCODERS[self]

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @classmethod
    def parse(cls, value: Union[str, "RasterFormat"]) -> "RasterFormat":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().lstrip(".")
        try:
            return _FORMAT_ALIASES[key]
        except KeyError:
            raise ValidationError(f"Unsupported raster format: {value!r}") from None

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "RasterFormat":
        suffix = Path(path).suffix
        if not suffix:
            raise ValidationError(f"Cannot infer raster format without a file extension: {path}")
        return cls.parse(suffix)


class ResampleMethod(Enum):
    NEAREST_NEIGHBOR = "NearestNeighbor"
    BILINEAR = "Bilinear"
    CUBIC = "Cubic"

    @classmethod
    def parse(cls, value: Union[str, "ResampleMethod"]) -> "ResampleMethod":
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("-", "_")
        try:
            return _METHOD_ALIASES[key]
        except KeyError:
            raise ValidationError(f"Unsupported resample method: {value!r}") from None


_ENCODERS = {
    RasterFormat.GEOTIFF: "PNG",  # no GeoTIFF writer
    RasterFormat.PNG: "PNG",
    RasterFormat.JPEG: "JPEG",
    RasterFormat.BMP: "BMP",
}

_EXTENSIONS = {
    RasterFormat.GEOTIFF: ".tif",
    RasterFormat.PNG: ".png",
    RasterFormat.JPEG: ".jpg",
    RasterFormat.BMP: ".bmp",
}

_FORMAT_ALIASES = {
    "geotiff": RasterFormat.GEOTIFF,
    "tif": RasterFormat.GEOTIFF,
    "tiff": RasterFormat.GEOTIFF,
    "png": RasterFormat.PNG,
    "jpeg": RasterFormat.JPEG,
    "jpg": RasterFormat.JPEG,
    "bmp": RasterFormat.BMP,
}

_METHOD_ALIASES = {
    "nearestneighbor": ResampleMethod.NEAREST_NEIGHBOR,
    "nearest_neighbor": ResampleMethod.NEAREST_NEIGHBOR,
    "nearest": ResampleMethod.NEAREST_NEIGHBOR,
    "bilinear": ResampleMethod.BILINEAR,
    "cubic": ResampleMethod.CUBIC,
}
