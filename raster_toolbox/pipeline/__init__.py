from .cancellation import CancellationToken
from .conversion_pipeline import PipelineStage, convert_format, resample_raster
from .progress import (
    CallbackProgress,
    LoggingProgress,
    ProgressSink,
    RecordingProgress,
    TqdmProgress,
    report_progress,
)
from .runner import RasterJobRunner

__all__ = [
    "convert_format",
    "resample_raster",
    "PipelineStage",
    "CancellationToken",
    "RasterJobRunner",
    "ProgressSink",
    "CallbackProgress",
    "LoggingProgress",
    "RecordingProgress",
    "TqdmProgress",
    "report_progress",
]
