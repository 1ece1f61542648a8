"""
Weighted merge sort with inversion counting

Sorts a data array in ascending order while permuting a parallel weight
array identically, and returns the weighted inversion count

    sum over pairs (i < j) with data[i] > data[j] of weights[i] * weights[j]

which is the discordant-pair weight consumed by the weighted Kendall Tau-b.
"""

from __future__ import annotations

import numba as nb
import numpy as np

from .base import MismatchedArrayLengthsError


@nb.njit(cache=True)
def _merge_weighted(src_d, src_w, dst_d, dst_w, lo, mid, hi):
    """Merge src[lo:mid] and src[mid:hi] into dst, return the weighted swaps."""
    swaps = 0.0
    left_w = 0.0
    for k in range(lo, mid):
        left_w += src_w[k]
    i = lo
    j = mid
    k = lo
    while i < mid and j < hi:
        if src_d[j] < src_d[i]:
            # right element jumps over every remaining left element
            swaps += left_w * src_w[j]
            dst_d[k] = src_d[j]
            dst_w[k] = src_w[j]
            j += 1
        else:
            left_w -= src_w[i]
            dst_d[k] = src_d[i]
            dst_w[k] = src_w[i]
            i += 1
        k += 1
    while i < mid:
        dst_d[k] = src_d[i]
        dst_w[k] = src_w[i]
        i += 1
        k += 1
    while j < hi:
        dst_d[k] = src_d[j]
        dst_w[k] = src_w[j]
        j += 1
        k += 1
    return swaps


@nb.njit(cache=True)
def _weighted_merge_sort(data, weights):
    """Bottom-up stable merge sort of `data`/`weights` in place."""
    n = data.shape[0]
    swaps = 0.0
    if n < 2:
        return swaps
    buf_d = np.empty_like(data)
    buf_w = np.empty_like(weights)
    src_d, src_w = data, weights
    dst_d, dst_w = buf_d, buf_w
    in_buffer = False
    width = 1
    while width < n:
        lo = 0
        while lo < n:
            mid = min(lo + width, n)
            hi = min(lo + 2 * width, n)
            swaps += _merge_weighted(src_d, src_w, dst_d, dst_w, lo, mid, hi)
            lo += 2 * width
        src_d, dst_d = dst_d, src_d
        src_w, dst_w = dst_w, src_w
        in_buffer = not in_buffer
        width *= 2
    if in_buffer:
        data[:] = buf_d
        weights[:] = buf_w
    return swaps


def weighted_merge_sort(data, weights) -> float:
    """
    Sort `data` ascending in place, carrying `weights` along, and count
    weighted inversions.

    Parameters
    ----------
    data : np.ndarray or list
        Values to sort. Numpy arrays are sorted in place; lists are sorted and
        written back element-wise.
    weights : np.ndarray or list
        Weight of each data value, same length as `data`.

    Returns
    -------
    swaps : float
        Sum of weights[i] * weights[j] over all inverted pairs. 0.0 for
        already sorted input.
    """
    if len(data) != len(weights):
        raise MismatchedArrayLengthsError(len(data), len(weights))

    d = np.ascontiguousarray(data)
    w = np.ascontiguousarray(weights, dtype=np.float64)

    swaps = float(_weighted_merge_sort(d, w))

    # write back when a copy had to be made (lists, strided views, other dtypes)
    if d is not data:
        data[:] = d if isinstance(data, np.ndarray) else d.tolist()
    if w is not weights:
        weights[:] = w if isinstance(weights, np.ndarray) else w.tolist()
    return swaps
