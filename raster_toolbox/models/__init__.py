from .enums import RasterFormat, ResampleMethod
from .errors import (
    DecodeError,
    EncodeError,
    OperationCancelled,
    RasterError,
    UnhandledError,
    ValidationError,
)
from .processing_result import ProcessingResult
from .raster_image import DEFAULT_NO_DATA, RasterImage

__all__ = [
    "RasterFormat",
    "ResampleMethod",
    "RasterError",
    "DecodeError",
    "EncodeError",
    "ValidationError",
    "UnhandledError",
    "OperationCancelled",
    "ProcessingResult",
    "RasterImage",
    "DEFAULT_NO_DATA",
]
