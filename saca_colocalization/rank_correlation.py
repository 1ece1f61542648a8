"""
Weighted Kendall's Tau-b rank correlation

Every pair of observations (i, j) carries the weight w_i * w_j. With

    T   = total pair weight
    T_a = pair weight tied in a
    T_b = pair weight tied in b
    T_ab = pair weight tied in both a and b
    D   = discordant pair weight (weighted inversions of b once the
          observations are ordered by (a, b))

the statistic is

    tau_b = (T - T_a - T_b + T_ab - 2 D) / sqrt((T - T_a) * (T - T_b))

The numerator equals concordant minus discordant weight. Zero-weight
observations do not contribute. The sort runs in O(n log n) via the weighted
merge sort.

Reference
---------
Knight, W. R. (1966) "A Computer Method for Calculating Kendall's Tau with
Ungrouped Data" J Am Stat Assoc 61(314):436-439
"""

from __future__ import annotations

import numba as nb
import numpy as np

from .base import DegenerateCorrelationError, MismatchedArrayLengthsError
from .weighted_sort import _weighted_merge_sort


@nb.njit(cache=True)
def _tie_weight(values, weights):
    """Pair weight of tied runs in an already sorted `values` array."""
    n = values.shape[0]
    ties = 0.0
    i = 0
    while i < n:
        run_w = 0.0
        run_sq = 0.0
        j = i
        while j < n and values[j] == values[i]:
            run_w += weights[j]
            run_sq += weights[j] * weights[j]
            j += 1
        ties += 0.5 * (run_w * run_w - run_sq)
        i = j
    return ties


@nb.njit(cache=True)
def _joint_tie_weight(a_sorted, b_sorted, weights):
    """Pair weight of runs tied in both a and b (input ordered by (a, b))."""
    n = a_sorted.shape[0]
    ties = 0.0
    i = 0
    while i < n:
        run_w = 0.0
        run_sq = 0.0
        j = i
        while j < n and a_sorted[j] == a_sorted[i] and b_sorted[j] == b_sorted[i]:
            run_w += weights[j]
            run_sq += weights[j] * weights[j]
            j += 1
        ties += 0.5 * (run_w * run_w - run_sq)
        i = j
    return ties


@nb.njit(cache=True)
def _weighted_kendall_tau_b(a, b, weights):
    """Compiled weighted Tau-b; returns NaN when the denominator is zero."""
    n = a.shape[0]
    if n < 2:
        return np.nan

    # order observations by (a, b): stable sort by b, then stable sort by a
    order_b = np.argsort(b, kind="mergesort")
    order = order_b[np.argsort(a[order_b], kind="mergesort")]
    a_s = np.empty(n, dtype=np.float64)
    b_s = np.empty(n, dtype=np.float64)
    w_s = np.empty(n, dtype=np.float64)
    total_w = 0.0
    total_sq = 0.0
    for k in range(n):
        idx = order[k]
        a_s[k] = a[idx]
        b_s[k] = b[idx]
        w_s[k] = weights[idx]
        total_w += weights[idx]
        total_sq += weights[idx] * weights[idx]

    total_pairs = 0.5 * (total_w * total_w - total_sq)
    tie_a = _tie_weight(a_s, w_s)
    tie_ab = _joint_tie_weight(a_s, b_s, w_s)

    # inversions of b in (a, b) order are the discordant pairs
    discordant = _weighted_merge_sort(b_s, w_s)
    tie_b = _tie_weight(b_s, w_s)

    denom = (total_pairs - tie_a) * (total_pairs - tie_b)
    if denom <= 0.0:
        return np.nan
    tau = (total_pairs - tie_a - tie_b + tie_ab - 2.0 * discordant) / np.sqrt(denom)
    if tau > 1.0:
        return 1.0
    if tau < -1.0:
        return -1.0
    return tau


def weighted_kendall_tau_b(a, b, weights) -> float:
    """
    Weighted Kendall's Tau-b correlation of two paired samples.

    Parameters
    ----------
    a, b : array-like
        Paired observations, equal length.
    weights : array-like
        Weight of each observation pair, same length as `a`.

    Returns
    -------
    tau_b : float
        Correlation in [-1, 1].

    Raises
    ------
    MismatchedArrayLengthsError
        If the inputs differ in length.
    DegenerateCorrelationError
        If either variable has zero weighted variance (all pairs tied or
        zero weight), which leaves the statistic undefined.
    """
    a = np.ascontiguousarray(a, dtype=np.float64).ravel()
    b = np.ascontiguousarray(b, dtype=np.float64).ravel()
    w = np.ascontiguousarray(weights, dtype=np.float64).ravel()
    if a.shape[0] != b.shape[0]:
        raise MismatchedArrayLengthsError(a.shape[0], b.shape[0])
    if a.shape[0] != w.shape[0]:
        raise MismatchedArrayLengthsError(a.shape[0], w.shape[0])

    tau = float(_weighted_kendall_tau_b(a, b, w))
    if np.isnan(tau):
        raise DegenerateCorrelationError(
            "Kendall's Tau-b is undefined, one of the inputs has no untied weighted pairs."
        )
    return tau
