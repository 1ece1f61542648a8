import numpy as np
import pytest

from image_utils import histogram, manual_mask, otsu_threshold
from integration import composite_simpson, midpoint, simpson
from optical_parameters import abbe_diffraction_limit, omega
from saca_colocalization import InvalidParameterError
from signal_filters import fft_convolve, gaussian


def test_midpoint():
    assert midpoint([1.0, 2.0, 3.0]) == 6.0
    assert midpoint([1.0, 2.0, 3.0], 0.5) == 3.0


def test_simpson_is_exact_for_cubics():
    x = np.linspace(0.0, 2.0, 11)
    assert simpson(x ** 3, x[1] - x[0]) == pytest.approx(4.0)


def test_simpson_rejects_odd_subintervals():
    with pytest.raises(InvalidParameterError):
        simpson(np.ones(4))


def test_composite_simpson_handles_odd_subintervals():
    x = np.linspace(0.0, 3.0, 4)
    # 2 Simpson subintervals plus one trapezoid over a linear function
    assert composite_simpson(x, 1.0) == pytest.approx(4.5)
    y = np.linspace(0.0, 1.0, 5) ** 2
    assert composite_simpson(y, 0.25) == pytest.approx(simpson(y, 0.25))


def test_omega_and_abbe_limit():
    assert omega(12.5) == pytest.approx(2.0 * np.pi / 12.5)
    assert abbe_diffraction_limit(500.0, 1.25) == pytest.approx(200.0)


def test_gaussian_is_normalized_and_centered():
    g = gaussian(1.0, 101, 10.0, 5.0)
    assert g.sum() == pytest.approx(1.0)
    assert int(np.argmax(g)) == 50
    np.testing.assert_allclose(g, g[::-1])


def test_fft_convolve_truncates_to_first_input():
    a = np.array([1.0, 2.0, 3.0, 4.0])
    b = np.array([1.0, 1.0])
    np.testing.assert_allclose(fft_convolve(a, b), [1.0, 3.0, 5.0, 7.0])
    np.testing.assert_allclose(fft_convolve(a, [1.0]), a)


def test_histogram_counts():
    data = np.zeros((20, 20))
    for i in range(15, 20):
        for j in range(20):
            data[i, j] = (i - 15) * 20 + j
    hist = histogram(data, bins=20)
    assert len(hist) == 20
    assert hist[0] == 305
    assert hist[10] == 5
    assert hist.min() == 5
    assert hist.max() == 305
    assert hist.sum() == 400


def test_histogram_edge_cases():
    np.testing.assert_array_equal(histogram(np.array([])), [0])
    np.testing.assert_array_equal(histogram(np.ones(5), bins=0), [0])
    hist = histogram(np.full((3, 3), 7.0), bins=4)
    np.testing.assert_array_equal(hist, [9, 0, 0, 0])


def test_manual_mask():
    img = np.array([[1.0, 5.0], [3.0, 7.0]])
    np.testing.assert_array_equal(manual_mask(img, 3.0), [[False, True], [False, True]])


def test_otsu_threshold_separates_two_populations():
    img = np.concatenate([np.full(50, 10.0), np.full(50, 100.0)]).reshape(10, 10)
    t = otsu_threshold(img)
    assert 10.0 <= t < 100.0
    assert otsu_threshold(np.full((4, 4), 3.0)) == 3.0
