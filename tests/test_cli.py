import pytest
from PIL import Image as PILImage

from raster_toolbox.cli.raster_cli import main


def test_convert_command(tmp_path, png_100):
    out = tmp_path / "scene.bmp"
    assert main(["--quiet", "convert", str(png_100), str(out)]) == 0
    with PILImage.open(out) as written:
        assert written.format == "BMP"


def test_convert_rejects_identical_formats(tmp_path, png_100):
    with pytest.raises(SystemExit) as exc:
        main(["--quiet", "convert", str(png_100), str(tmp_path / "copy.png")])
    assert exc.value.code == 2


def test_convert_rejects_unknown_format(tmp_path, png_100):
    with pytest.raises(SystemExit) as exc:
        main(["--quiet", "convert", str(png_100), str(tmp_path / "x.out"), "--to", "webp"])
    assert exc.value.code == 2


def test_convert_missing_input_exits_with_failure(tmp_path, capsys):
    code = main(["--quiet", "convert", str(tmp_path / "missing.png"), str(tmp_path / "o.bmp")])
    assert code == 1
    assert "Raster format conversion failed" in capsys.readouterr().out


def test_resample_keeps_aspect_ratio_without_height(tmp_path, wide_png):
    out = tmp_path / "small.png"
    assert main(["--quiet", "resample", str(wide_png), str(out), "--width", "40"]) == 0
    with PILImage.open(out) as written:
        assert written.size == (40, 20)


def test_resample_with_explicit_size_and_method(tmp_path, png_100, capsys):
    out = tmp_path / "big.png"
    assert main(["--quiet", "resample", str(png_100), str(out),
                 "--width", "120", "--height", "30", "--method", "cubic"]) == 0
    assert "100x100" in capsys.readouterr().out


def test_resample_rejects_non_positive_width(tmp_path, png_100):
    with pytest.raises(SystemExit) as exc:
        main(["--quiet", "resample", str(png_100), str(tmp_path / "o.png"), "--width", "0"])
    assert exc.value.code == 2


def test_resample_unreadable_input_without_height(tmp_path):
    assert main(["--quiet", "resample", str(tmp_path / "missing.png"),
                 str(tmp_path / "o.png"), "--width", "10"]) == 1


def test_info_command(wide_png, capsys):
    assert main(["info", str(wide_png)]) == 0
    assert "100x50" in capsys.readouterr().out


def test_info_missing_file(tmp_path):
    assert main(["info", str(tmp_path / "missing.png")]) == 1
