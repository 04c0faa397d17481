from __future__ import annotations

import numpy as np
import pytest

from rasterforge import (
    InvalidParameterError,
    Kernel,
    convolve,
    filter_bartlett,
    filter_box,
    filter_edge,
    filter_enhance,
    filter_gaussian,
    filter_gaussian_n,
)
from rasterforge.filters import (
    bartlett_kernel,
    binomial_kernel,
    box_kernel,
    edge_kernel,
    enhance_kernel,
    gaussian_kernel,
    pascal_row,
)


@pytest.mark.parametrize(
    "kernel", [box_kernel(), bartlett_kernel(), gaussian_kernel(), binomial_kernel(7)]
)
def test_low_pass_kernels_sum_to_one(kernel):
    assert kernel.weights.sum() == pytest.approx(1.0)


def test_high_pass_kernel_sums():
    assert edge_kernel().weights.sum() == pytest.approx(0.0, abs=1e-12)
    assert edge_kernel().bias == 0.5
    assert enhance_kernel().weights.sum() == pytest.approx(1.0)


def test_pascal_row():
    assert pascal_row(0) == [1]
    assert pascal_row(4) == [1, 4, 6, 4, 1]


def test_binomial_kernel_weights():
    row = np.array([1, 4, 6, 4, 1], dtype=np.float64)
    np.testing.assert_allclose(binomial_kernel(5).weights, np.outer(row, row) / 256.0)


@pytest.mark.parametrize("n", [0, -3, 4])
def test_binomial_kernel_rejects_bad_size(n):
    with pytest.raises(InvalidParameterError):
        binomial_kernel(n)


def test_kernel_rejects_even_or_non_square():
    with pytest.raises(InvalidParameterError):
        Kernel(np.ones((4, 4)))
    with pytest.raises(InvalidParameterError):
        Kernel(np.ones((3, 5)))
    with pytest.raises(InvalidParameterError):
        Kernel.low_pass(np.zeros((3, 3)))


def test_box_keeps_flat_interior_and_darkens_border(make_solid):
    img = make_solid(9, 9, (200, 200, 200, 100))
    out = filter_box(img)
    assert out is img
    assert (img.pixels[2:7, 2:7, :3] == 200).all()
    # corner sees 3x3 of the 5x5 support
    assert img.pixel(0, 0)[:3] == (72, 72, 72)
    assert (img.pixels[..., 3] == 100).all()


@pytest.mark.parametrize("fn", [filter_box, filter_bartlett, filter_gaussian])
def test_blurs_do_not_brighten(fn, noise_image):
    before = noise_image.pixels[..., :3].max()
    fn(noise_image)
    assert noise_image.pixels[..., :3].max() <= before


def test_gaussian_n_of_one_is_identity(gradient_image):
    before = gradient_image.pixels.copy()
    filter_gaussian_n(gradient_image, 1)
    np.testing.assert_array_equal(gradient_image.pixels, before)


def test_gaussian_n_rejects_even_without_touching_image(gradient_image):
    before = gradient_image.pixels.copy()
    with pytest.raises(InvalidParameterError):
        filter_gaussian_n(gradient_image, 4)
    np.testing.assert_array_equal(gradient_image.pixels, before)


def test_edge_turns_flat_regions_mid_gray(make_solid):
    img = filter_edge(make_solid(9, 9, (200, 50, 0, 255)))
    interior = img.pixels[2:7, 2:7, :3]
    # zero response plus the 0.5 bias lands on 127.5
    assert set(np.unique(interior).tolist()) <= {127, 128}


def test_enhance_keeps_flat_interior(make_solid):
    img = filter_enhance(make_solid(9, 9, (200, 50, 0, 255)))
    assert (img.pixels[2:7, 2:7, 0] == 200).all()
    assert (img.pixels[2:7, 2:7, 1] == 50).all()
    assert (img.pixels[2:7, 2:7, 2] == 0).all()


def test_convolve_with_custom_kernel(make_solid):
    img = make_solid(3, 3, (0, 0, 0, 255))
    img.set_pixel(1, 1, (255, 255, 255, 255))
    # shift right by one pixel
    convolve(img, Kernel(np.array([[0, 0, 0], [1.0, 0, 0], [0, 0, 0]])))
    assert img.pixel(2, 1)[:3] == (255, 255, 255)
    assert img.pixel(1, 1)[:3] == (0, 0, 0)


def test_wide_binomial_kernel_stays_finite():
    kernel = binomial_kernel(601)
    assert np.isfinite(kernel.weights).all()
    assert kernel.weights.sum() == pytest.approx(1.0)


def test_wide_gaussian_blurs_instead_of_blanking(make_solid):
    img = filter_gaussian_n(make_solid(12, 12, (200, 200, 200, 255)), 601)
    r, g, b, a = img.pixel(6, 6)
    assert 0 < r < 200
    assert r == g == b
    assert a == 255


def test_kernel_accepts_nested_lists():
    kernel = Kernel([[1.0]])
    assert isinstance(kernel.weights, np.ndarray)
    assert kernel.size == 1


@pytest.mark.parametrize(
    "weights", [[[1.0, 2.0], [3.0, 4.0]], "abc", [[np.inf]], [[1.0, 2.0], [3.0]]]
)
def test_kernel_rejects_bad_weights(weights):
    with pytest.raises(InvalidParameterError):
        Kernel(weights)
