"""
Image utilities

- Min-max binned intensity histogram
- Manual and Otsu threshold masks
"""

from __future__ import annotations

import numpy as np
from skimage.filters import threshold_otsu


def histogram(data, bins: int = 256) -> np.ndarray:
    """
    Histogram of all values, binned uniformly between their min and max.

    Parameters
    ----------
    data : array-like
        Values of any shape.
    bins : int
        Number of bins.

    Returns
    -------
    counts : np.ndarray
        int64 counts of length `bins`. Empty input or `bins == 0` gives
        ``[0]``; a constant input puts every count in the first bin.
    """
    values = np.asarray(data, dtype=np.float64).ravel()
    if values.size == 0 or bins == 0:
        return np.zeros(1, dtype=np.int64)
    lo = values.min()
    hi = values.max()
    counts = np.zeros(bins, dtype=np.int64)
    if hi == lo:
        counts[0] = values.size
        return counts
    bin_width = (hi - lo) / bins
    idx = np.floor((values - lo) / bin_width).astype(np.int64)
    idx = np.clip(idx, 0, bins - 1)
    np.add.at(counts, idx, 1)
    return counts


def manual_mask(image, threshold: float) -> np.ndarray:
    """Boolean mask of pixels strictly above `threshold`."""
    return np.asarray(image) > threshold


def otsu_threshold(image) -> float:
    """Otsu threshold of an image; a constant image returns its value."""
    values = np.asarray(image, dtype=np.float64)
    if values.size == 0:
        return 0.0
    if values.min() == values.max():
        return float(values.flat[0])
    return float(threshold_otsu(values))
