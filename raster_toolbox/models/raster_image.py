from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Tuple
import numpy as np

from .errors import ValidationError

DEFAULT_NO_DATA = -9999.0


@dataclass(frozen=True, eq=False)
class RasterImage:
    """
    Band-separated raster: one flat uint8 plane per band, row-major
    (index = y * width + x).  Geo fields are carried, never interpreted.
    Treat as immutable; every transform returns a new RasterImage.
    """
    width: int
    height: int
    band_count: int
    planes: Tuple[np.ndarray, ...]  # band_count arrays, each shape (width*height,), dtype uint8
    geo_transform: Tuple[float, ...] = (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
    projection: str = ""
    no_data_value: float = DEFAULT_NO_DATA
    metadata: Dict[str, str] = field(default_factory=dict)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return self.height, self.width, self.band_count

    def validation_errors(self) -> List[str]:
        """Every violation of the plane/dimension invariant, empty if the image is valid."""
        errors = []
        if not isinstance(self.width, (int, np.integer)) or self.width <= 0:
            errors.append(f"width must be a positive integer, got {self.width!r}")
        if not isinstance(self.height, (int, np.integer)) or self.height <= 0:
            errors.append(f"height must be a positive integer, got {self.height!r}")
        if not isinstance(self.band_count, (int, np.integer)) or self.band_count <= 0:
            errors.append(f"band_count must be a positive integer, got {self.band_count!r}")
        if self.planes is None or len(self.planes) == 0:
            errors.append("image has no pixel planes")
            return errors
        if len(self.planes) != self.band_count:
            errors.append(f"expected {self.band_count} planes, found {len(self.planes)}")
        if errors:
            return errors

        expected = self.width * self.height
        for band, plane in enumerate(self.planes):
            if plane is None:
                errors.append(f"plane {band} is missing")
            elif np.asarray(plane).size != expected:
                errors.append(f"plane {band} has {np.asarray(plane).size} samples, expected {expected}")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def plane_2d(self, band: int) -> np.ndarray:
        """Band *band* viewed as a (height, width) array."""
        return np.asarray(self.planes[band], dtype=np.uint8).reshape(self.height, self.width)

    def to_array(self) -> np.ndarray:
        """Stack the planes into an (H, W, B) uint8 array."""
        return np.stack([self.plane_2d(b) for b in range(self.band_count)], axis=-1)

    @classmethod
    def from_array(cls, array: np.ndarray, **geo) -> "RasterImage":
        """
        Build a RasterImage from an (H, W) or (H, W, B) array.  Values are
        copied and cast to uint8; extra keyword arguments fill the geo fields.
        """
        arr = np.asarray(array)
        if arr.ndim == 2:
            arr = arr[:, :, np.newaxis]
        if arr.ndim != 3:
            raise ValidationError(f"Expected a 2-D or 3-D array, got shape {arr.shape}")

        height, width, bands = arr.shape
        planes = tuple(
            np.array(arr[:, :, b], dtype=np.uint8, copy=True).reshape(-1)
            for b in range(bands)
        )
        return cls(width=width, height=height, band_count=bands, planes=planes, **geo)
