"""
Tests for the weighted merge sort, effective sample size and weighted Tau-b.
"""

import itertools
import unittest

import numpy as np
import pytest
from scipy import stats

from saca_colocalization import (
    DegenerateCorrelationError,
    MismatchedArrayLengthsError,
    effective_sample_size,
    weighted_kendall_tau_b,
    weighted_merge_sort,
)


def brute_force_tau_b(a, b, w):
    """O(n^2) weighted Tau-b over all pairs."""
    total = tied_a = tied_b = score = 0.0
    for i, j in itertools.combinations(range(len(a)), 2):
        pw = w[i] * w[j]
        da = np.sign(a[i] - a[j])
        db = np.sign(b[i] - b[j])
        total += pw
        if da == 0:
            tied_a += pw
        if db == 0:
            tied_b += pw
        score += pw * da * db
    return score / np.sqrt((total - tied_a) * (total - tied_b))


class TestWeightedMergeSort(unittest.TestCase):

    def test_counts_weighted_inversions(self):
        data = np.array([3.0, 1.0, 2.0])
        weights = np.array([1.0, 2.0, 3.0])
        swaps = weighted_merge_sort(data, weights)
        # (3, 1) -> 1 * 2, (3, 2) -> 1 * 3
        self.assertAlmostEqual(swaps, 5.0)
        np.testing.assert_array_equal(data, [1.0, 2.0, 3.0])
        np.testing.assert_array_equal(weights, [2.0, 3.0, 1.0])

    def test_sorted_input_has_no_swaps(self):
        data = np.arange(10, dtype=float)
        weights = np.ones(10)
        self.assertEqual(weighted_merge_sort(data, weights), 0.0)

    def test_reverse_input_unit_weights(self):
        n = 9
        data = np.arange(n, 0, -1).astype(float)
        weights = np.ones(n)
        self.assertAlmostEqual(weighted_merge_sort(data, weights), n * (n - 1) / 2)
        np.testing.assert_array_equal(data, np.arange(1, n + 1))

    def test_lists_are_written_back(self):
        data = [4, 2, 3, 1]
        weights = [1.0, 1.0, 1.0, 1.0]
        swaps = weighted_merge_sort(data, weights)
        self.assertAlmostEqual(swaps, 5.0)
        self.assertEqual(data, [1, 2, 3, 4])

    def test_matches_pairwise_count(self):
        rng = np.random.default_rng(7)
        data = rng.integers(0, 20, size=40).astype(float)
        weights = rng.uniform(0.1, 2.0, size=40)
        expected = sum(
            weights[i] * weights[j]
            for i, j in itertools.combinations(range(40), 2)
            if data[i] > data[j]
        )
        swaps = weighted_merge_sort(data.copy(), weights.copy())
        self.assertAlmostEqual(swaps, expected, places=9)

    def test_mismatched_lengths(self):
        with self.assertRaises(MismatchedArrayLengthsError):
            weighted_merge_sort(np.zeros(3), np.zeros(4))


def test_effective_sample_size_uniform_weights():
    assert effective_sample_size(np.ones(12)) == pytest.approx(12.0)


def test_effective_sample_size_unequal_weights():
    # (0.5 + 2.0)^2 / (0.25 + 4.0)
    assert effective_sample_size([0.5, 2.0]) == pytest.approx(6.25 / 4.25)


def test_effective_sample_size_all_zero():
    assert effective_sample_size(np.zeros(5)) == 0.0
    assert effective_sample_size([]) == 0.0


def test_effective_sample_size_ignores_zero_weights():
    assert effective_sample_size([1.0, 0.0, 1.0, 0.0]) == pytest.approx(2.0)


def test_tau_b_perfect_agreement_and_reversal():
    a = np.arange(10, dtype=float)
    w = np.ones(10)
    assert weighted_kendall_tau_b(a, a * 3.0, w) == pytest.approx(1.0)
    assert weighted_kendall_tau_b(a, -a, w) == pytest.approx(-1.0)


def test_tau_b_unit_weights_match_scipy():
    rng = np.random.default_rng(11)
    a = rng.integers(0, 6, size=50).astype(float)
    b = a + rng.integers(-3, 4, size=50)
    expected = stats.kendalltau(a, b).statistic
    assert weighted_kendall_tau_b(a, b, np.ones(50)) == pytest.approx(expected, abs=1e-10)


def test_tau_b_weighted_matches_brute_force():
    rng = np.random.default_rng(3)
    a = rng.integers(0, 8, size=30).astype(float)
    b = rng.integers(0, 8, size=30).astype(float)
    w = rng.uniform(0.0, 1.0, size=30)
    expected = brute_force_tau_b(a, b, w)
    assert weighted_kendall_tau_b(a, b, w) == pytest.approx(expected, abs=1e-10)


def test_tau_b_zero_weights_drop_observations():
    a = np.array([1.0, 2.0, 3.0, 4.0, 5.0])
    b = np.array([1.0, 2.0, 3.0, 4.0, -100.0])
    w = np.array([1.0, 1.0, 1.0, 1.0, 0.0])
    assert weighted_kendall_tau_b(a, b, w) == pytest.approx(1.0)


def test_tau_b_degenerate_input_raises():
    with pytest.raises(DegenerateCorrelationError):
        weighted_kendall_tau_b(np.ones(5), np.arange(5.0), np.ones(5))
    with pytest.raises(DegenerateCorrelationError):
        weighted_kendall_tau_b(np.arange(5.0), np.arange(5.0), np.zeros(5))


def test_tau_b_mismatched_lengths():
    with pytest.raises(MismatchedArrayLengthsError):
        weighted_kendall_tau_b(np.arange(4.0), np.arange(5.0), np.ones(4))
    with pytest.raises(MismatchedArrayLengthsError):
        weighted_kendall_tau_b(np.arange(4.0), np.arange(4.0), np.ones(3))
