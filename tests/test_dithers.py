from __future__ import annotations

import numpy as np
import pytest

from rasterforge import (
    InvalidParameterError,
    apply_dither,
    dither_bright,
    dither_cluster,
    dither_color,
    dither_fs,
    dither_random,
    dither_threshold,
)
from rasterforge.dithers.cluster import CLUSTER_MATRIX, threshold_map
from rasterforge.dithers.floyd import GRAY_BITS, diffuse_channels


def _is_binary_gray(img) -> bool:
    rgb = img.pixels[..., :3]
    return (
        set(np.unique(rgb).tolist()) <= {0, 255}
        and (rgb[..., 0] == rgb[..., 1]).all()
        and (rgb[..., 1] == rgb[..., 2]).all()
    )


def test_threshold_is_strict(make_solid):
    assert dither_threshold(make_solid(2, 2, (128, 128, 128, 255))).pixel(0, 0)[:3] == (0, 0, 0)
    assert dither_threshold(make_solid(2, 2, (129, 129, 129, 255))).pixel(0, 0)[:3] == (255, 255, 255)


def test_threshold_keeps_alpha(gradient_image):
    gradient_image.pixels[..., 3] = 77
    dither_threshold(gradient_image)
    assert _is_binary_gray(gradient_image)
    assert (gradient_image.pixels[..., 3] == 77).all()


def test_random_is_reproducible(noise_image):
    a = dither_random(noise_image.copy(), np.random.default_rng(7))
    b = dither_random(noise_image.copy(), np.random.default_rng(7))
    np.testing.assert_array_equal(a.pixels, b.pixels)
    assert _is_binary_gray(a)


def test_random_noise_cannot_flip_extremes(make_solid, rng):
    black = dither_random(make_solid(8, 8, (0, 0, 0, 255)), rng)
    white = dither_random(make_solid(8, 8, (255, 255, 255, 255)), rng)
    assert not black.pixels[..., :3].any()
    assert (white.pixels[..., :3] == 255).all()


def test_random_with_zero_amplitude_equals_threshold(noise_image, rng):
    a = dither_random(noise_image.copy(), rng, amplitude=0)
    b = dither_threshold(noise_image.copy())
    np.testing.assert_array_equal(a.pixels, b.pixels)


def test_random_rejects_negative_amplitude(make_solid, rng):
    img = make_solid(2, 2, (50, 50, 50, 255))
    with pytest.raises(InvalidParameterError):
        dither_random(img, rng, amplitude=-1)
    assert img.pixel(0, 0) == (50, 50, 50, 255)


def test_bright_uses_mean(make_solid):
    img = make_solid(4, 2, (50, 50, 50, 255))
    img.pixels[1] = (200, 200, 200, 255)
    dither_bright(img)
    assert not img.pixels[0, :, :3].any()
    assert (img.pixels[1, :, :3] == 255).all()


def test_threshold_map_tiles():
    m = threshold_map(6, 5)
    assert m.shape == (6, 5)
    assert m[5, 4] == CLUSTER_MATRIX[1, 0]
    assert m[4, 4] == CLUSTER_MATRIX[0, 0]


def test_cluster_pattern(make_solid):
    img = dither_cluster(make_solid(4, 4, (100, 100, 100, 255)))
    expected = np.where(100 > CLUSTER_MATRIX, 255, 0)
    np.testing.assert_array_equal(img.pixels[..., 0], expected)
    assert _is_binary_gray(img)


def test_fs_mid_gray_is_half_white(make_solid):
    img = dither_fs(make_solid(64, 64, (128, 128, 128, 255)))
    assert _is_binary_gray(img)
    fraction = (img.pixels[..., 0] == 255).mean()
    assert abs(fraction - 128 / 255) < 0.03


def test_fs_keeps_black_and_white(make_solid):
    assert not dither_fs(make_solid(9, 7, (0, 0, 0, 255))).pixels[..., :3].any()
    assert (dither_fs(make_solid(9, 7, (255, 255, 255, 255))).pixels[..., :3] == 255).all()


def test_fs_preserves_mean_brightness(gradient_image):
    gray = gradient_image.copy().to_grayscale().pixels[..., 0].mean()
    out = dither_fs(gradient_image)
    assert _is_binary_gray(out)
    assert abs(out.pixels[..., 0].mean() - gray) < 20


def test_color_uses_uniform_levels(noise_image):
    noise_image.pixels[..., 3] = 200
    dither_color(noise_image)
    px = noise_image.pixels
    assert set(np.unique(px[..., 0]).tolist()) <= {0, 36, 73, 109, 146, 182, 219, 255}
    assert set(np.unique(px[..., 1]).tolist()) <= {0, 36, 73, 109, 146, 182, 219, 255}
    assert set(np.unique(px[..., 2]).tolist()) <= {0, 85, 170, 255}
    assert (px[..., 3] == 200).all()


def test_color_preserves_channel_means(make_solid):
    img = dither_color(make_solid(32, 32, (100, 60, 120, 255)))
    means = img.pixels[..., :3].reshape(-1, 3).mean(axis=0)
    np.testing.assert_allclose(means, [100, 60, 120], atol=8)


@pytest.mark.parametrize("method", ["threshold", "random", "bright", "cluster", "fs"])
def test_apply_dither_dispatch(method, gradient_image):
    out = apply_dither(gradient_image, method, rng=np.random.default_rng(0))
    assert out is gradient_image
    assert _is_binary_gray(out)


def test_apply_dither_random_without_rng(gradient_image):
    assert _is_binary_gray(apply_dither(gradient_image, "random"))


def test_apply_dither_unknown(gradient_image):
    with pytest.raises(InvalidParameterError):
        apply_dither(gradient_image, "ordered")


def test_diffusion_golden_serpentine():
    # Row 0 runs left to right, row 1 right to left. The 0.5 in row 0
    # rounds down and pushes 3/16 of its error to (1, 0) and 1/16 to (1, 2).
    # Row 1 then carries error leftwards so only (1, 0) turns white.
    values = np.array([[0.0, 0.5, 0.0], [0.3, 0.0, 0.37]])
    stacked = np.repeat(values[..., None], 3, axis=2)
    out = diffuse_channels(stacked, GRAY_BITS)
    expected = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    for c in range(3):
        np.testing.assert_array_equal(out[..., c], expected)
    # input is not modified
    np.testing.assert_array_equal(stacked[..., 0], values)
