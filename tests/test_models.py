import logging

import numpy as np
import pytest

from raster_toolbox import load_raster, save_raster
from raster_toolbox.models.enums import RasterFormat, ResampleMethod
from raster_toolbox.models.errors import ValidationError
from raster_toolbox.models.processing_result import ProcessingResult
from raster_toolbox.pipeline.progress import LoggingProgress, report_progress


@pytest.mark.parametrize("text, expected", [
    ("GeoTIFF", RasterFormat.GEOTIFF),
    ("tif", RasterFormat.GEOTIFF),
    (".TIFF", RasterFormat.GEOTIFF),
    ("jpg", RasterFormat.JPEG),
    ("Jpeg", RasterFormat.JPEG),
    ("bmp", RasterFormat.BMP),
    (RasterFormat.PNG, RasterFormat.PNG),
])
def test_raster_format_parse(text, expected):
    assert RasterFormat.parse(text) is expected


def test_raster_format_from_path():
    assert RasterFormat.from_path("scene.JPG") is RasterFormat.JPEG
    with pytest.raises(ValidationError):
        RasterFormat.from_path("no_suffix")
    with pytest.raises(ValidationError):
        RasterFormat.parse("webp")


def test_geotiff_is_encoded_as_png():
    assert RasterFormat.GEOTIFF.encoder == "PNG"
    assert RasterFormat.GEOTIFF.extension == ".tif"


@pytest.mark.parametrize("text, expected", [
    ("nearest", ResampleMethod.NEAREST_NEIGHBOR),
    ("NearestNeighbor", ResampleMethod.NEAREST_NEIGHBOR),
    ("nearest-neighbor", ResampleMethod.NEAREST_NEIGHBOR),
    ("BILINEAR", ResampleMethod.BILINEAR),
    ("cubic", ResampleMethod.CUBIC),
])
def test_resample_method_parse(text, expected):
    assert ResampleMethod.parse(text) is expected


def test_processing_result_factories():
    ok = ProcessingResult.create_success("done", processed_features=3)
    assert ok.success and ok.message == "done" and ok.processed_features == 3
    assert ok.error_message is None and ok.details == {}

    err = ProcessingResult.create_error("bad input")
    assert not err.success
    assert err.error_message == "bad input"
    assert err.message == "Processing failed"


def test_processing_result_to_dict_converts_numpy_and_enums():
    result = ProcessingResult.create_success("ok")
    result.details.update(width=np.int64(4), method=ResampleMethod.CUBIC, size=(np.int32(2), 3))
    details = result.to_dict()["details"]
    assert details == {"width": 4, "method": "Cubic", "size": [2, 3]}
    assert type(details["width"]) is int


def test_top_level_load_and_save(tmp_path, raster_factory):
    img = raster_factory(6, 3, bands=3)
    save_raster(img, tmp_path / "api.bmp", "bmp")
    loaded = load_raster(tmp_path / "api.bmp", "bmp")
    assert loaded.shape == (3, 6, 3)
    assert all(np.array_equal(a, b) for a, b in zip(loaded.planes, img.planes))


def test_logging_progress(caplog):
    with caplog.at_level(logging.INFO):
        sink = LoggingProgress(label="convert")
        report_progress(sink, 50)
        report_progress(None, 60)
    assert "convert: 50%" in caplog.text
    assert "60%" not in caplog.text
