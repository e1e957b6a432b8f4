from pathlib import Path
from typing import Tuple, Union

from ..models.enums import RasterFormat, ResampleMethod
from ..models.raster_image import RasterImage
from ..repositories.raster_repository import RasterRepository
from .resampling_service import ResamplingService, fit_height


class RasterService:
    """Business-level raster operations.  No pixel I/O logic lives here."""

    def __init__(self,
                 raster_repository: RasterRepository = None,
                 resampling_service: ResamplingService = None):
        self.raster_repository = raster_repository or RasterRepository()
        self.resampling_service = resampling_service or ResamplingService()

    def load(self, path: Union[str, Path], fmt: RasterFormat) -> RasterImage:
        """Load a single raster from disk."""
        return self.raster_repository.load(path, fmt)

    def save(self, image: RasterImage, path: Union[str, Path], fmt: RasterFormat) -> None:
        self.raster_repository.save(image, path, fmt)

    def resample(self, image: RasterImage, new_width: int, new_height: int,
                 method: ResampleMethod) -> RasterImage:
        return self.resampling_service.resample(image, new_width, new_height, method)

    def get_dimensions(self, path: Union[str, Path]) -> Tuple[int, int]:
        """(width, height) of the raster at *path*."""
        return self.raster_repository.read_dimensions(path)

    def fit_to_width(self, path: Union[str, Path], new_width: int) -> Tuple[int, int]:
        """
        Target size for *new_width* that keeps the aspect ratio of the raster
        at *path*.
        """
        width, height = self.get_dimensions(path)
        return new_width, fit_height(new_width, width, height)
