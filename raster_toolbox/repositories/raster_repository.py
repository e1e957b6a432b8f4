from pathlib import Path
from typing import Tuple, Union
import logging
import os

import cv2
import numpy as np
from PIL import Image as PILImage
from dotenv import load_dotenv

from ..models.enums import RasterFormat
from ..models.errors import DecodeError, EncodeError
from ..models.raster_image import RasterImage

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = ".tif,.tiff,.png,.jpg,.jpeg,.bmp"


class RasterRepository:
    """
    Handles file I/O for RasterImage entities.
    Decoding goes through OpenCV, encoding through Pillow; nothing else here.
    """
    def __init__(self, jpeg_quality: int = None):
        exts = os.getenv("VALID_RASTER_EXTENSIONS", DEFAULT_EXTENSIONS)
        self.VALID_EXTS = {ext.strip().lower() for ext in exts.split(",") if ext.strip()}
        if jpeg_quality is None:
            jpeg_quality = int(os.getenv("JPEG_QUALITY", "95"))
        self.jpeg_quality = jpeg_quality

    @staticmethod
    def load(path: Union[str, Path], fmt: RasterFormat = RasterFormat.PNG) -> RasterImage:
        """
        Decode *path* into a 3-band (R, G, B) RasterImage at native size.
        *fmt* is a label only: every container is read as a plain bitmap.
        """
        path = Path(path)
        if not path.is_file():
            raise DecodeError(f"Raster not found: {path}")

        arr_bgr = cv2.imread(str(path), cv2.IMREAD_COLOR)
        if arr_bgr is None:
            raise DecodeError(f"Raster unreadable or not a decodable bitmap: {path}")

        arr_rgb = np.ascontiguousarray(arr_bgr[:, :, ::-1])
        if arr_rgb.dtype != np.uint8:
            raise DecodeError(f"Unsupported sample type {arr_rgb.dtype} in {path}")

        image = RasterImage.from_array(arr_rgb)
        logger.debug(f"Loaded {fmt.value} raster {path} ({image.width}x{image.height})")
        return image

    def save(self, image: RasterImage, path: Union[str, Path], fmt: RasterFormat = RasterFormat.PNG) -> None:
        """
        Interleave the planes into RGB and write them with the encoder for *fmt*.
        Missing green/blue bands reuse band 0, so one band comes out grayscale.
        """
        path = Path(path)
        problems = image.validation_errors()
        if problems:
            raise EncodeError(f"Cannot encode malformed raster: {'; '.join(problems)}")

        rgb = self.interleave_rgb(image)
        params = {"quality": self.jpeg_quality} if fmt is RasterFormat.JPEG else {}
        try:
            PILImage.fromarray(rgb).save(path, format=fmt.encoder, **params)
        except (OSError, ValueError) as err:
            raise EncodeError(f"Failed to write {fmt.value} raster to {path}: {err}") from err

        if fmt is RasterFormat.GEOTIFF:
            logger.warning(f"No GeoTIFF writer available, {path} was encoded as PNG")
        logger.debug(f"Saved {fmt.value} raster {path} ({image.width}x{image.height})")

    @staticmethod
    def interleave_rgb(image: RasterImage) -> np.ndarray:
        red = image.plane_2d(0)
        green = image.plane_2d(1) if image.band_count > 1 else red
        blue = image.plane_2d(2) if image.band_count > 2 else red
        return np.ascontiguousarray(np.stack([red, green, blue], axis=-1), dtype=np.uint8)

    @staticmethod
    def read_dimensions(path: Union[str, Path]) -> Tuple[int, int]:
        """(width, height) from the file header, without decoding pixels."""
        path = Path(path)
        try:
            with PILImage.open(path) as pil_img:
                return pil_img.size
        except OSError as err:
            raise DecodeError(f"Cannot read raster header of {path}: {err}") from err
