from __future__ import annotations

import json

import numpy as np
import pytest
from PIL import Image as PILImage

from rasterforge import ImageLoadError, load_image, save_image
from rasterforge.main import main


@pytest.fixture
def input_png(tmp_path, gradient_image):
    path = tmp_path / "in.png"
    save_image(gradient_image, path)
    return path


def test_load_flips_rows_by_default(tmp_path):
    arr = np.zeros((3, 2, 4), dtype=np.uint8)
    arr[0] = (255, 0, 0, 255)
    arr[2] = (0, 0, 255, 255)
    path = tmp_path / "rows.png"
    PILImage.fromarray(arr).save(path)

    flipped = load_image(path)
    assert flipped.pixel(0, 0) == (0, 0, 255, 255)
    assert flipped.pixel(0, 2) == (255, 0, 0, 255)
    assert load_image(path, flip_rows=False).pixel(0, 0) == (255, 0, 0, 255)


def test_rgb_files_load_opaque(tmp_path):
    path = tmp_path / "rgb.png"
    PILImage.new("RGB", (3, 2), (10, 20, 30)).save(path)
    img = load_image(path)
    assert img.size == (3, 2)
    assert img.pixel(2, 1) == (10, 20, 30, 255)


@pytest.mark.parametrize("suffix", [".tga", ".png"])
def test_save_load_round_trip(tmp_path, noise_image, suffix):
    noise_image.pixels[::3, ::2, 3] = 17
    path = tmp_path / f"out{suffix}"
    save_image(noise_image, path)
    np.testing.assert_array_equal(load_image(path).pixels, noise_image.pixels)


def test_save_opaque_format_composites_onto_black(tmp_path, make_solid):
    path = tmp_path / "out.bmp"
    save_image(make_solid(2, 2, (50, 100, 10, 100)), path)
    assert load_image(path).pixel(0, 0) == (127, 255, 25, 255)


def test_load_errors(tmp_path):
    with pytest.raises(ImageLoadError):
        load_image(tmp_path / "missing.png")
    junk = tmp_path / "junk.png"
    junk.write_bytes(b"not an image")
    with pytest.raises(ImageLoadError):
        load_image(junk)


def test_save_unknown_extension(tmp_path, gradient_image):
    with pytest.raises(ImageLoadError):
        save_image(gradient_image, tmp_path / "out.nope")


def test_cli_grayscale(tmp_path, input_png, gradient_image):
    out = tmp_path / "gray.png"
    assert main(["grayscale", "-i", str(input_png), "-o", str(out), "-q"]) == 0
    expected = gradient_image.copy().to_grayscale()
    np.testing.assert_array_equal(load_image(out).pixels, expected.pixels)


def test_cli_resize_writes_new_dimensions(tmp_path, input_png):
    out = tmp_path / "big.tga"
    assert main(["resize", "-i", str(input_png), "-o", str(out), "--scale", "2", "-q"]) == 0
    assert load_image(out).size == (32, 24)


def test_cli_seed_makes_output_reproducible(tmp_path, input_png):
    a, b = tmp_path / "a.png", tmp_path / "b.png"
    for out in (a, b):
        assert main(["dither-random", "-i", str(input_png), "-o", str(out), "--seed", "8", "-q"]) == 0
    np.testing.assert_array_equal(load_image(a).pixels, load_image(b).pixels)


def test_cli_config_seed(tmp_path, input_png):
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps({"seed": 4, "painterly": {"brush_radii": [6, 3]}}), encoding="utf-8"
    )
    a, b = tmp_path / "a.png", tmp_path / "b.png"
    for out in (a, b):
        argv = ["npr-paint", "-i", str(input_png), "-o", str(out), "--config", str(config), "-q"]
        assert main(argv) == 0
    np.testing.assert_array_equal(load_image(a).pixels, load_image(b).pixels)


def test_cli_log_file(tmp_path, input_png):
    log = tmp_path / "run.log"
    out = tmp_path / "out.png"
    assert main(["filter-box", "-i", str(input_png), "-o", str(out), "--log-file", str(log)]) == 0
    assert "filter-box" in log.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "extra",
    [
        ["resize"],
        ["rotate"],
        ["filter-gaussian-n", "--size", "4"],
        ["difference"],
        ["grayscale", "--seed", "-1"],
    ],
)
def test_cli_failures_return_one(tmp_path, input_png, extra):
    argv = [extra[0], "-i", str(input_png), "-o", str(tmp_path / "out.png"), "-q", *extra[1:]]
    assert main(argv) == 1
    assert not (tmp_path / "out.png").exists()


def test_cli_missing_input(tmp_path):
    argv = ["grayscale", "-i", str(tmp_path / "none.png"), "-o", str(tmp_path / "out.png"), "-q"]
    assert main(argv) == 1


def test_cli_size_mismatch(tmp_path, input_png, make_solid):
    other = tmp_path / "small.png"
    save_image(make_solid(3, 3), other)
    argv = ["difference", "-i", str(input_png), "--other", str(other), "-o", str(tmp_path / "d.png"), "-q"]
    assert main(argv) == 1


def test_cli_bad_config(tmp_path, input_png):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"seed": "x"}), encoding="utf-8")
    argv = ["grayscale", "-i", str(input_png), "-o", str(tmp_path / "o.png"), "--config", str(config), "-q"]
    assert main(argv) == 1


def test_cli_unknown_operation_exits_two(tmp_path, input_png):
    with pytest.raises(SystemExit) as excinfo:
        main(["sharpen", "-i", str(input_png), "-o", str(tmp_path / "o.png")])
    assert excinfo.value.code == 2


def test_cli_unwritable_log_file(tmp_path, input_png):
    argv = ["grayscale", "-i", str(input_png), "-o", str(tmp_path / "o.png"), "--log-file", str(tmp_path)]
    assert main(argv) == 1
    assert not (tmp_path / "o.png").exists()
