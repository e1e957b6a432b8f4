"""
Exception hierarchy for the raster toolbox.

The codec and the resampler raise these; the conversion pipeline is the only
place that catches them and turns them into a ProcessingResult.
"""


class RasterError(Exception):
    """Base exception for all raster processing errors."""
    pass


class DecodeError(RasterError):
    """Raised when a source file is missing, unreadable or not a valid bitmap."""
    pass


class EncodeError(RasterError):
    """Raised when a raster cannot be written, or is malformed for writing."""
    pass


class ValidationError(RasterError):
    """Raised when input validation fails (bad dimensions, malformed image, unknown option)."""
    pass


class UnhandledError(RasterError):
    """Any other failure surfacing during load, resample or save."""
    pass


class OperationCancelled(RasterError):
    """Raised at a stage boundary when the caller cancelled the operation."""
    pass
