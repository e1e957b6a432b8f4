"""
Background execution for pipeline operations.

Each submitted operation runs as one unit of work on a thread pool so the
caller stays responsive; inside, the operation is strictly sequential.
Concurrent jobs share nothing but the filesystem, and two jobs writing the
same output path are not coordinated (last writer wins).
"""
import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional

from dotenv import load_dotenv

from ..models.processing_result import ProcessingResult
from ..services.raster_service import RasterService
from .cancellation import CancellationToken
from .conversion_pipeline import convert_format, resample_raster
from .progress import ProgressSink

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class RasterJobRunner:
    def __init__(self, max_workers: int = None, raster_service: RasterService = None):
        if max_workers is None:
            max_workers = int(os.getenv("RASTER_WORKERS", "2"))
        self.max_workers = max_workers
        self.raster_service = raster_service or RasterService()
        self._executor = ThreadPoolExecutor(max_workers=max_workers,
                                            thread_name_prefix="raster-job")

    def submit_convert(self, input_path, input_format, output_path, output_format,
                       progress: Optional[ProgressSink] = None,
                       cancel_token: Optional[CancellationToken] = None) -> "Future[ProcessingResult]":
        logger.info(f"Queued conversion {input_path} → {output_path}")
        return self._executor.submit(
            convert_format, input_path, input_format, output_path, output_format, progress,
            cancel_token=cancel_token, raster_service=self.raster_service,
        )

    def submit_resample(self, input_path, input_format, output_path, new_width, new_height, method,
                        progress: Optional[ProgressSink] = None,
                        cancel_token: Optional[CancellationToken] = None) -> "Future[ProcessingResult]":
        logger.info(f"Queued resample {input_path} → {output_path} ({new_width}x{new_height})")
        return self._executor.submit(
            resample_raster, input_path, input_format, output_path, new_width, new_height, method,
            progress, cancel_token=cancel_token, raster_service=self.raster_service,
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "RasterJobRunner":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown()
