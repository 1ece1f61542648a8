"""
Signal filters

Discrete, normalized Gaussian curves and FFT based linear convolution.
"""

from __future__ import annotations

import numpy as np
from scipy.signal import fftconvolve

from saca_colocalization.base import InvalidParameterError


def gaussian(sigma: float, bins: int, range: float, center: float) -> np.ndarray:
    """
    Sample a Gaussian and normalize it to unit sum.

    Parameters
    ----------
    sigma : float
        Standard deviation, in the units of `range`.
    bins : int
        Number of samples.
    range : float
        Extent of the sampled axis; sample i sits at i * range / (bins - 1).
    center : float
        Mean of the Gaussian.

    Returns
    -------
    curve : np.ndarray
        float64 array of length `bins` summing to 1.
    """
    if bins < 1:
        raise InvalidParameterError("bins", bins, "must be at least 1")
    if sigma <= 0:
        raise InvalidParameterError("sigma", sigma, "must be positive")
    if bins == 1:
        return np.ones(1, dtype=np.float64)
    x = np.arange(bins, dtype=np.float64) * (range / (bins - 1))
    curve = np.exp(-((x - center) ** 2) / (2.0 * sigma * sigma))
    total = curve.sum()
    if total == 0:
        return curve
    return curve / total


def fft_convolve(a, b) -> np.ndarray:
    """Linear convolution of `a` with `b`, truncated to the length of `a`."""
    a = np.asarray(a, dtype=np.float64).ravel()
    b = np.asarray(b, dtype=np.float64).ravel()
    if a.size == 0 or b.size == 0:
        return np.zeros(a.shape[0], dtype=np.float64)
    return fftconvolve(a, b, mode='full')[:a.shape[0]]
