"""
Tests for the FLIM phasor transform, plot geometry and calibration.
"""

import unittest

import numpy as np
import pytest

from flim_phasor import calibration, plot, time_domain
from flim_simulation import ideal_exponential_1d, ideal_exponential_3d
from optical_parameters import omega
from saca_colocalization import InvalidParameterError


class TestPhasorPlot(unittest.TestCase):

    def test_modulation(self):
        self.assertAlmostEqual(plot.modulation(0.71, 0.43), 0.8300602387778853, places=15)

    def test_phase(self):
        self.assertAlmostEqual(plot.phase(0.71, 0.43), 0.5445517081560367, places=15)

    def test_monoexponential_coordinates(self):
        g, s = plot.monoexponential_coordinates(1.1e-9, omega(1.25e-8))
        self.assertAlmostEqual(g, 0.7658604730109535, places=12)
        self.assertAlmostEqual(s, 0.4234598078807387, places=12)
        # every monoexponential point lies on the universal semicircle
        self.assertAlmostEqual((g - 0.5) ** 2 + s ** 2, 0.25, places=12)

    def test_map_mask(self):
        gs = np.zeros((3, 4, 2))
        gs[1, 2] = [0.5, 0.25]
        gs[2, 0] = [0.8, 0.1]
        mask = plot.map_mask(gs, [0.5, 0.8], [0.25, 0.1])
        self.assertEqual(mask.shape, (3, 4))
        self.assertTrue(mask[1, 2])
        self.assertTrue(mask[2, 0])
        self.assertEqual(int(mask.sum()), 2)

        channel_first = np.moveaxis(gs, 2, 0)
        np.testing.assert_array_equal(plot.map_mask(channel_first, [0.5, 0.8], [0.25, 0.1], axis=0), mask)


class TestTimeDomain(unittest.TestCase):

    def test_constant_signal_is_at_origin(self):
        data = np.full(128, 10.0)
        self.assertAlmostEqual(time_domain.real(data, 12.5), 0.0, places=12)
        self.assertAlmostEqual(time_domain.imaginary(data, 12.5), 0.0, places=12)

    def test_short_lifetime_approaches_semicircle(self):
        period = 12.5
        tau = 0.5
        data = ideal_exponential_1d(4096, period, [tau], [1.0], 1000.0)
        g_t, s_t = plot.monoexponential_coordinates(tau, omega(period))
        self.assertAlmostEqual(time_domain.real(data, period), g_t, delta=0.01)
        self.assertAlmostEqual(time_domain.imaginary(data, period), s_t, delta=0.01)

    def test_explicit_omega_matches_default(self):
        data = ideal_exponential_1d(256, 12.5, [2.0], [1.0], 100.0)
        self.assertEqual(
            time_domain.real(data, 12.5),
            time_domain.real(data, 12.5, omega=omega(12.5)),
        )

    def test_image_matches_curve_transform(self):
        curve = ideal_exponential_1d(256, 12.5, [1.0, 3.0], [0.7, 0.3], 5000.0)
        data = ideal_exponential_3d(256, 12.5, [1.0, 3.0], [0.7, 0.3], 5000.0, (4, 5))
        gs = time_domain.image(data, 12.5)
        self.assertEqual(gs.shape, (4, 5, 2))
        np.testing.assert_allclose(gs[2, 3, 0], time_domain.real(curve, 12.5))
        np.testing.assert_allclose(gs[2, 3, 1], time_domain.imaginary(curve, 12.5))

    def test_image_mask_and_axis(self):
        data = ideal_exponential_3d(64, 12.5, [2.0], [1.0], 100.0, (3, 3))
        mask = np.zeros((3, 3), dtype=bool)
        mask[1, 1] = True
        gs = time_domain.image(data, 12.5, mask=mask)
        self.assertTrue(np.all(gs[0, 0] == 0.0))
        self.assertTrue(np.all(gs[1, 1] != 0.0))

        decay_first = np.moveaxis(data, 2, 0)
        np.testing.assert_allclose(time_domain.image(decay_first, 12.5, axis=0), time_domain.image(data, 12.5))
        with self.assertRaises(InvalidParameterError):
            time_domain.image(data, 12.5, axis=3)


def test_histogram_quality():
    data = np.array([0.0, 5.0, 20.0, 30.0])
    # two valid bins: (2 / 16) * (400 + 900)
    assert time_domain.histogram_quality(data, 10.0) == pytest.approx(162.5)
    assert time_domain.histogram_quality(data, 100.0) == 0.0


def test_histogram_quality_image():
    data = np.zeros((2, 2, 4))
    data[0, 1] = [0.0, 5.0, 20.0, 30.0]
    q = time_domain.histogram_quality_image(data, 10.0)
    assert q.shape == (2, 2)
    assert q[0, 1] == pytest.approx(162.5)
    assert q[0, 0] == 0.0
    q_axis0 = time_domain.histogram_quality_image(np.moveaxis(data, 2, 0), 10.0, axis=0)
    np.testing.assert_allclose(q_axis0, q)


class TestCalibration(unittest.TestCase):

    def test_identity_calibration(self):
        self.assertEqual(calibration.coordinates(0.4, 0.3, 1.0, 0.0), (0.4, 0.3))

    def test_modulation_and_phase_maps_reference_onto_semicircle(self):
        w = omega(12.5)
        g_t, s_t = plot.monoexponential_coordinates(4.0, w)
        # a measured reference that is rotated and damped
        g_m, s_m = calibration.coordinates(g_t, s_t, 0.8, -0.2)
        m, phi = calibration.modulation_and_phase(g_m, s_m, 4.0, w)
        self.assertAlmostEqual(m, 1.25, places=12)
        self.assertAlmostEqual(phi, 0.2, places=12)
        g_c, s_c = calibration.coordinates(g_m, s_m, m, phi)
        self.assertAlmostEqual(g_c, g_t, places=12)
        self.assertAlmostEqual(s_c, s_t, places=12)

    def test_image_returns_new_array(self):
        gs = np.random.default_rng(0).uniform(0.0, 0.5, size=(3, 3, 2))
        original = gs.copy()
        out = calibration.image(gs, 1.1, 0.3)
        np.testing.assert_array_equal(gs, original)
        g, s = calibration.coordinates(gs[1, 2, 0], gs[1, 2, 1], 1.1, 0.3)
        self.assertAlmostEqual(out[1, 2, 0], g, places=12)
        self.assertAlmostEqual(out[1, 2, 1], s, places=12)
