"""
Raster Conversion Pipeline
End-to-end format conversion and resampling: load → (resample) → save.

Both operations are the error boundary of the toolbox: whatever goes wrong in
the codec or the resampler comes back as a failed ProcessingResult, never as
an exception.  There are no retries and a partially written output file is
left as is.
"""

import logging
import time
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from ..models.enums import RasterFormat, ResampleMethod
from ..models.errors import RasterError
from ..models.processing_result import ProcessingResult
from ..services.raster_service import RasterService
from .cancellation import CancellationToken
from .progress import ProgressSink, report_progress

logger = logging.getLogger(__name__)

CONVERT_OK = "Raster format conversion succeeded"
CONVERT_FAILED = "Raster format conversion failed"
RESAMPLE_FAILED = "Raster resampling failed"


class PipelineStage(Enum):
    IDLE = "Idle"
    LOADING = "Loading"
    RESAMPLING = "Resampling"
    SAVING = "Saving"
    DONE = "Done"
    FAILED = "Failed"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _enter(stage: PipelineStage, cancel_token: Optional[CancellationToken]) -> PipelineStage:
    if cancel_token is not None:
        cancel_token.raise_if_cancelled(stage.value.lower())
    logger.debug(f"Stage → {stage.value}")
    return stage


def _failure(err: Exception, message: str, stage: PipelineStage, started: float) -> ProcessingResult:
    if isinstance(err, RasterError):
        error_type = type(err).__name__
        logger.error(f"{message} during {stage.value.lower()}: {err}")
    else:
        error_type = "UnhandledError"
        logger.exception(f"{message} during {stage.value.lower()} (unexpected {type(err).__name__})")

    result = ProcessingResult(
        success=False,
        message=message,
        error_message=str(err) or type(err).__name__,
        elapsed_milliseconds=_elapsed_ms(started),
    )
    result.details.update(
        stage=PipelineStage.FAILED.value,
        failed_stage=stage.value,
        error_type=error_type,
        exception=type(err).__name__,
    )
    return result


def convert_format(
    input_path: Union[str, Path],
    input_format: Union[RasterFormat, str],
    output_path: Union[str, Path],
    output_format: Union[RasterFormat, str],
    progress: Optional[ProgressSink] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
    raster_service: RasterService = None,
) -> ProcessingResult:
    """
    Re-encode the raster at *input_path* as *output_format*.

    Progress: 10 → load → 50 → save → 100.

    Returns:
        ProcessingResult: success with processed_features=1 and the output
        path, or failure carrying the error message.  Timing is measured in
        both cases.
    """
    started = time.perf_counter()
    stage = PipelineStage.IDLE

    try:
        raster_service = raster_service or RasterService()
        input_format = RasterFormat.parse(input_format)
        output_format = RasterFormat.parse(output_format)

        stage = _enter(PipelineStage.LOADING, cancel_token)
        report_progress(progress, 10)
        raster = raster_service.load(input_path, input_format)

        stage = _enter(PipelineStage.SAVING, cancel_token)
        report_progress(progress, 50)
        raster_service.save(raster, output_path, output_format)

        report_progress(progress, 100)
    except Exception as err:
        return _failure(err, CONVERT_FAILED, stage, started)

    result = ProcessingResult(
        success=True,
        message=CONVERT_OK,
        processed_features=1,
        output_file_path=str(output_path),
        elapsed_milliseconds=_elapsed_ms(started),
    )
    result.details.update(
        stage=PipelineStage.DONE.value,
        input_format=input_format.value,
        output_format=output_format.value,
        width=raster.width,
        height=raster.height,
        band_count=raster.band_count,
    )
    logger.info(f"{CONVERT_OK}: {input_path} ({input_format.value}) → "
                f"{output_path} ({output_format.value}) in {result.elapsed_milliseconds} ms")
    return result


def resample_raster(
    input_path: Union[str, Path],
    input_format: Union[RasterFormat, str],
    output_path: Union[str, Path],
    new_width: int,
    new_height: int,
    method: Union[ResampleMethod, str],
    progress: Optional[ProgressSink] = None,
    *,
    cancel_token: Optional[CancellationToken] = None,
    raster_service: RasterService = None,
) -> ProcessingResult:
    """
    Resample the raster at *input_path* to new_width x new_height.

    The output is written in the *input* format.
    Progress: 10 → load → 30 → resample → 80 → save → 100.
    """
    started = time.perf_counter()
    stage = PipelineStage.IDLE

    try:
        raster_service = raster_service or RasterService()
        input_format = RasterFormat.parse(input_format)
        method = ResampleMethod.parse(method)

        stage = _enter(PipelineStage.LOADING, cancel_token)
        report_progress(progress, 10)
        raster = raster_service.load(input_path, input_format)

        stage = _enter(PipelineStage.RESAMPLING, cancel_token)
        report_progress(progress, 30)
        resampled = raster_service.resample(raster, new_width, new_height, method)

        stage = _enter(PipelineStage.SAVING, cancel_token)
        report_progress(progress, 80)
        raster_service.save(resampled, output_path, input_format)

        report_progress(progress, 100)
    except Exception as err:
        return _failure(err, RESAMPLE_FAILED, stage, started)

    message = (f"Raster resampled ({raster.width}x{raster.height} → "
               f"{resampled.width}x{resampled.height})")
    result = ProcessingResult(
        success=True,
        message=message,
        processed_features=1,
        output_file_path=str(output_path),
        elapsed_milliseconds=_elapsed_ms(started),
    )
    result.details.update(
        stage=PipelineStage.DONE.value,
        method=method.value,
        format=input_format.value,
        original_width=raster.width,
        original_height=raster.height,
        width=resampled.width,
        height=resampled.height,
        band_count=resampled.band_count,
    )
    logger.info(f"{message} [{method.value}] → {output_path} in {result.elapsed_milliseconds} ms")
    return result
