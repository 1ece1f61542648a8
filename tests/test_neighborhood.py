import numpy as np
import pytest

from saca_colocalization import (
    InvalidParameterError,
    MismatchedArrayShapesError,
    fill_neighborhood_buffer,
    weighted_circle,
    weighted_sphere,
)


def _inputs(shape):
    a = np.arange(np.prod(shape), dtype=float).reshape(shape) + 1.0
    b = a * 2.0
    return a, b, np.zeros(shape), np.ones(shape)


def test_interior_pixel_copies_kernel_weights():
    a, b, tau, sqrt_n = _inputs((7, 7))
    kernel = weighted_circle(1, np.sqrt(2.5))
    buf = fill_neighborhood_buffer((3, 3), 1, a, b, kernel, tau, sqrt_n, dn=2.0)
    assert len(buf) == 9
    assert buf.filled == 9
    np.testing.assert_array_equal(buf.values_a, a[2:5, 2:5].ravel())
    np.testing.assert_array_equal(buf.values_b, b[2:5, 2:5].ravel())
    np.testing.assert_allclose(buf.weights, kernel.ravel())


def test_corner_pixel_is_clamped_and_tail_zeroed():
    a, b, tau, sqrt_n = _inputs((5, 5))
    kernel = weighted_circle(1, np.sqrt(2.5))
    buf = fill_neighborhood_buffer((0, 0), 1, a, b, kernel, tau, sqrt_n, dn=2.0)
    assert buf.filled == 4
    np.testing.assert_array_equal(buf.values_a[:4], [1.0, 2.0, 6.0, 7.0])
    np.testing.assert_allclose(buf.weights[:4], kernel[1:, 1:].ravel())
    assert np.all(buf.weights[4:] == 0.0)
    assert np.all(buf.values_a[4:] == 0.0)


def test_inconsistent_prior_tau_is_excluded():
    a, b, tau, sqrt_n = _inputs((5, 5))
    tau[2, 3] = 0.9
    sqrt_n[:] = 4.0
    kernel = np.ones((3, 3))
    buf = fill_neighborhood_buffer((2, 2), 1, a, b, kernel, tau, sqrt_n, dn=2.0)
    # |0.9 - 0| * 4 / 2 >= 1 drops the cell
    assert buf.weights[5] == 0.0
    assert buf.weights[4] == 1.0


def test_consistent_prior_tau_is_downweighted():
    a, b, tau, sqrt_n = _inputs((5, 5))
    tau[2, 3] = 0.25
    kernel = np.ones((3, 3))
    buf = fill_neighborhood_buffer((2, 2), 1, a, b, kernel, tau, sqrt_n, dn=2.0)
    # scaled difference 0.25 * 1 / 2 = 0.125
    assert buf.weights[5] == pytest.approx((1.0 - 0.125) ** 2)


def test_threshold_zeroes_weights():
    a, b, tau, sqrt_n = _inputs((5, 5))
    kernel = np.ones((3, 3))
    buf = fill_neighborhood_buffer((2, 2), 1, a, b, kernel, tau, sqrt_n, dn=2.0, threshold_a=13.0)
    # a[1:4, 1:4] = 7, 8, 9, 12, 13, 14, 17, 18, 19
    np.testing.assert_array_equal(buf.weights, [0, 0, 0, 0, 1, 1, 1, 1, 1])


def test_3d_buffer():
    a, b, tau, sqrt_n = _inputs((4, 4, 4))
    kernel = weighted_sphere(1, np.sqrt(2.5))
    buf = fill_neighborhood_buffer((1, 1, 1), 1, a, b, kernel, tau, sqrt_n, dn=2.0)
    assert len(buf) == 27
    assert buf.filled == 27
    np.testing.assert_allclose(buf.weights, kernel.ravel())


def test_validation_errors():
    a, b, tau, sqrt_n = _inputs((5, 5))
    kernel = np.ones((3, 3))
    with pytest.raises(MismatchedArrayShapesError):
        fill_neighborhood_buffer((2, 2), 1, a, b[:, :4], kernel, tau, sqrt_n, dn=2.0)
    with pytest.raises(InvalidParameterError):
        fill_neighborhood_buffer((2, 2), 0, a, b, kernel, tau, sqrt_n, dn=2.0)
    with pytest.raises(InvalidParameterError):
        fill_neighborhood_buffer((2, 7), 1, a, b, kernel, tau, sqrt_n, dn=2.0)
    with pytest.raises(InvalidParameterError):
        fill_neighborhood_buffer((2, 2), 1, a, b, np.ones((5, 5)), tau, sqrt_n, dn=2.0)
