from .raster_service import RasterService
from .resampling_service import (
    ResamplingService,
    clamp_to_byte,
    cubic_weight,
    fit_height,
    resample,
)

__all__ = [
    "RasterService",
    "ResamplingService",
    "resample",
    "cubic_weight",
    "clamp_to_byte",
    "fit_height",
]
