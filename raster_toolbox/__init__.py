"""Raster resampling and format-conversion toolbox."""
from .models import (
    DecodeError,
    EncodeError,
    ProcessingResult,
    RasterError,
    RasterFormat,
    RasterImage,
    ResampleMethod,
    UnhandledError,
    ValidationError,
)
from .pipeline import convert_format, resample_raster
from .repositories import RasterRepository
from .services import cubic_weight, resample

__version__ = "1.0.0"


def load_raster(path, fmt=RasterFormat.PNG) -> RasterImage:
    return RasterRepository.load(path, RasterFormat.parse(fmt))


def save_raster(image: RasterImage, path, fmt=RasterFormat.PNG) -> None:
    RasterRepository().save(image, path, RasterFormat.parse(fmt))


__all__ = [
    "RasterImage",
    "RasterFormat",
    "ResampleMethod",
    "ProcessingResult",
    "RasterError",
    "DecodeError",
    "EncodeError",
    "ValidationError",
    "UnhandledError",
    "load_raster",
    "save_raster",
    "resample",
    "cubic_weight",
    "convert_format",
    "resample_raster",
]
