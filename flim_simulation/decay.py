"""
Fluorescence decay curves

Multi-exponential decays sampled over one laser period, optionally convolved
with an instrument response function:
- ideal: I(t) = N * sum_i (f_i / tau_i) * exp(-t / tau_i), t = linspace(0, period, samples)
- irf: ideal curve convolved with a measured or simulated IRF
- gaussian: ideal curve convolved with a Gaussian IRF

The *_3d variants tile one curve over a (rows, cols, samples) image.
"""

from __future__ import annotations

from typing import Sequence, Tuple

import numpy as np

from saca_colocalization.base import InvalidParameterError, MismatchedArrayLengthsError
from signal_filters import fft_convolve
from .instrument import gaussian_irf_1d


def _check_components(taus: Sequence[float], fractions: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    taus = np.asarray(taus, dtype=np.float64).ravel()
    fractions = np.asarray(fractions, dtype=np.float64).ravel()
    if taus.shape[0] != fractions.shape[0]:
        raise MismatchedArrayLengthsError(taus.shape[0], fractions.shape[0])
    if not np.isclose(fractions.sum(), 1.0):
        raise InvalidParameterError("fractions", fractions.tolist(), "must sum to 1")
    if np.any(taus <= 0):
        raise InvalidParameterError("taus", taus.tolist(), "must be positive")
    return taus, fractions


def _tile(curve: np.ndarray, shape: Tuple[int, int]) -> np.ndarray:
    rows, cols = (int(v) for v in shape)
    return np.broadcast_to(curve, (rows, cols, curve.shape[0])).copy()


def ideal_exponential_1d(samples: int, period: float, taus, fractions, total_counts: float) -> np.ndarray:
    """
    Simulate an ideal multi-component exponential decay.

    Parameters
    ----------
    samples : int
        Number of time bins.
    period : float
        Laser period (same unit as `taus`).
    taus : sequence of float
        Component lifetimes.
    fractions : sequence of float
        Component fractions; must sum to 1.
    total_counts : float
        Total photon count scale N.

    Returns
    -------
    decay : np.ndarray
        float64 curve of length `samples`.
    """
    taus, fractions = _check_components(taus, fractions)
    t = np.linspace(0.0, period, samples)
    amplitudes = fractions / taus
    return total_counts * np.sum(amplitudes[:, None] * np.exp(-t[None, :] / taus[:, None]), axis=0)


def ideal_exponential_3d(samples, period, taus, fractions, total_counts, shape) -> np.ndarray:
    """Ideal decay tiled over `shape` = (rows, cols); returns (rows, cols, samples)."""
    return _tile(ideal_exponential_1d(samples, period, taus, fractions, total_counts), shape)


def irf_exponential_1d(irf, samples, period, taus, fractions, total_counts) -> np.ndarray:
    """Ideal decay convolved with `irf`, truncated to `samples` bins."""
    ideal = ideal_exponential_1d(samples, period, taus, fractions, total_counts)
    return fft_convolve(ideal, irf)


def irf_exponential_3d(irf, samples, period, taus, fractions, total_counts, shape) -> np.ndarray:
    return _tile(irf_exponential_1d(irf, samples, period, taus, fractions, total_counts), shape)


def gaussian_exponential_1d(samples, period, taus, fractions, total_counts,
                            irf_center, irf_width) -> np.ndarray:
    """Ideal decay convolved with a Gaussian IRF of FWHM `irf_width` centred at `irf_center`."""
    irf = gaussian_irf_1d(samples, period, irf_center, irf_width)
    return irf_exponential_1d(irf, samples, period, taus, fractions, total_counts)


def gaussian_exponential_3d(samples, period, taus, fractions, total_counts,
                            irf_center, irf_width, shape) -> np.ndarray:
    return _tile(
        gaussian_exponential_1d(samples, period, taus, fractions, total_counts, irf_center, irf_width),
        shape,
    )
