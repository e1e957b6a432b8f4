import numpy as np
import pytest
from PIL import Image as PILImage

from raster_toolbox.models.enums import RasterFormat, ResampleMethod
from raster_toolbox.pipeline.cancellation import CancellationToken
from raster_toolbox.pipeline.conversion_pipeline import convert_format, resample_raster
from raster_toolbox.pipeline.progress import CallbackProgress, RecordingProgress
from raster_toolbox.services.raster_service import RasterService


class ExplodingService(RasterService):
    def load(self, path, fmt):
        raise RuntimeError("disk on fire")


def test_convert_missing_input_fails_cleanly(tmp_path):
    progress = RecordingProgress()
    result = convert_format(str(tmp_path / "missing.png"), RasterFormat.PNG,
                            str(tmp_path / "out.png"), RasterFormat.BMP, progress)
    assert result.success is False
    assert result.error_message
    assert result.elapsed_milliseconds >= 0
    assert result.output_file_path is None
    assert result.details["error_type"] == "DecodeError"
    assert result.details["failed_stage"] == "Loading"
    assert result.details["stage"] == "Failed"
    # progress is not forced to 100 on failure
    assert progress.values == [10]


def test_convert_png_to_bmp(tmp_path, png_100):
    progress = RecordingProgress()
    out = str(tmp_path / "scene.bmp")
    result = convert_format(str(png_100), RasterFormat.PNG, out, RasterFormat.BMP, progress)
    assert result.success, result.error_message
    assert result.processed_features == 1
    assert result.output_file_path == out
    assert result.error_message is None
    assert progress.values == [10, 50, 100]
    assert result.details["output_format"] == "BMP"
    with PILImage.open(out) as written:
        assert written.format == "BMP"
        assert written.size == (100, 100)
        assert np.array_equal(np.asarray(written), np.asarray(PILImage.open(png_100)))


def test_convert_accepts_format_names(tmp_path, png_100):
    result = convert_format(png_100, "png", tmp_path / "scene.jpg", "jpg")
    assert result.success
    assert (tmp_path / "scene.jpg").read_bytes()[:2] == b"\xff\xd8"


def test_convert_unknown_format_is_a_validation_failure(tmp_path, png_100):
    result = convert_format(png_100, "png", tmp_path / "x.webp", "webp")
    assert not result.success
    assert result.details["error_type"] == "ValidationError"
    assert "webp" in result.error_message


def test_convert_write_failure_reports_encode_error(tmp_path, png_100):
    progress = RecordingProgress()
    result = convert_format(png_100, RasterFormat.PNG, tmp_path / "missing_dir" / "o.bmp",
                            RasterFormat.BMP, progress)
    assert not result.success
    assert result.details["error_type"] == "EncodeError"
    assert result.details["failed_stage"] == "Saving"
    assert progress.values == [10, 50]


def test_resample_100_to_50_bilinear(tmp_path, png_100):
    progress = RecordingProgress()
    out = str(tmp_path / "half.png")
    result = resample_raster(str(png_100), RasterFormat.PNG, out, 50, 50,
                             ResampleMethod.BILINEAR, progress)
    assert result.success, result.error_message
    assert "100x100" in result.message
    assert "50x50" in result.message
    assert result.output_file_path == out
    assert result.processed_features == 1
    assert progress.values == [10, 30, 80, 100]
    assert result.details["method"] == "Bilinear"
    with PILImage.open(out) as written:
        assert written.size == (50, 50)


def test_resample_writes_input_format(tmp_path, png_100):
    out = tmp_path / "named_like_a.bmp"
    result = resample_raster(png_100, RasterFormat.PNG, out, 10, 10, ResampleMethod.NEAREST_NEIGHBOR)
    assert result.success
    assert out.read_bytes().startswith(b"\x89PNG")


@pytest.mark.parametrize("width, height", [(0, 10), (10, 0), (-4, -4)])
def test_resample_invalid_size_fails_at_resampling(tmp_path, png_100, width, height):
    progress = RecordingProgress()
    result = resample_raster(png_100, RasterFormat.PNG, tmp_path / "o.png", width, height,
                             ResampleMethod.CUBIC, progress)
    assert not result.success
    assert result.details["error_type"] == "ValidationError"
    assert result.details["failed_stage"] == "Resampling"
    assert progress.values == [10, 30]
    assert not (tmp_path / "o.png").exists()


def test_unexpected_errors_are_reported_as_unhandled(tmp_path, png_100):
    result = resample_raster(png_100, RasterFormat.PNG, tmp_path / "o.png", 5, 5,
                             ResampleMethod.BILINEAR, raster_service=ExplodingService())
    assert not result.success
    assert result.error_message == "disk on fire"
    assert result.details["error_type"] == "UnhandledError"
    assert result.details["exception"] == "RuntimeError"


def test_cancelled_before_start(tmp_path, png_100):
    token = CancellationToken()
    token.cancel()
    progress = RecordingProgress()
    result = convert_format(png_100, RasterFormat.PNG, tmp_path / "o.bmp", RasterFormat.BMP,
                            progress, cancel_token=token)
    assert not result.success
    assert result.details["error_type"] == "OperationCancelled"
    assert progress.values == []
    assert not (tmp_path / "o.bmp").exists()


def test_cancel_between_stages_stops_before_saving(tmp_path, png_100):
    token = CancellationToken()

    def cancel_after_resample_starts(percent):
        if percent == 30:
            token.cancel()

    result = resample_raster(png_100, RasterFormat.PNG, tmp_path / "o.png", 20, 20,
                             ResampleMethod.BILINEAR, CallbackProgress(cancel_after_resample_starts),
                             cancel_token=token)
    assert not result.success
    assert result.details["failed_stage"] == "Resampling"
    assert "saving" in result.error_message
    assert not (tmp_path / "o.png").exists()


def test_progress_is_monotonic(tmp_path, png_100):
    progress = RecordingProgress()
    resample_raster(png_100, RasterFormat.PNG, tmp_path / "o.png", 30, 70,
                    ResampleMethod.CUBIC, progress)
    values = progress.values
    assert values == sorted(values)
    assert values[-1] == 100


def test_result_is_json_friendly(tmp_path, png_100):
    result = resample_raster(png_100, RasterFormat.PNG, tmp_path / "o.png", 8, 8,
                             ResampleMethod.NEAREST_NEIGHBOR)
    payload = result.to_dict()
    assert payload["success"] is True
    assert payload["details"]["width"] == 8
    assert isinstance(payload["elapsed_milliseconds"], int)


@pytest.mark.parametrize("operation", ["convert", "resample"])
def test_bad_default_service_config_is_reported(monkeypatch, tmp_path, png_100, operation):
    monkeypatch.setenv("JPEG_QUALITY", "high")
    if operation == "convert":
        result = convert_format(png_100, RasterFormat.PNG, tmp_path / "o.bmp", RasterFormat.BMP)
    else:
        result = resample_raster(png_100, RasterFormat.PNG, tmp_path / "o.png", 5, 5,
                                 ResampleMethod.NEAREST_NEIGHBOR)
    assert not result.success
    assert result.details["error_type"] == "UnhandledError"
    assert result.details["exception"] == "ValueError"
    assert result.details["failed_stage"] == "Idle"
