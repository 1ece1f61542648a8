"""
Time-domain phasor transform

The real (G) and imaginary (S) phasor coordinates of a decay I(t) are the
normalized cosine and sine transforms at harmonic n:

    G = ∫ I(t) cos(nωt) dt / ∫ I(t) dt
    S = ∫ I(t) sin(nωt) dt / ∫ I(t) dt

integrated with the midpoint rule over dt = period / len(I).

Also provides the histogram quality metric of a photon arrival histogram,

    q = (vb / n²) * Σ_{x_i > t} x_i²

with n the number of bins and vb the number of bins above the threshold t.

Reference:
- Digman, M. A. et al. (2008) "The phasor approach to fluorescence lifetime
  imaging analysis" Biophys J 94(2):L14-L16
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from integration import midpoint
from optical_parameters import omega as angular_frequency
from saca_colocalization.base import InvalidParameterError, check_matching_shapes


def _check_axis(axis: int) -> int:
    if axis not in (0, 1, 2):
        raise InvalidParameterError("axis", axis, "must be 0, 1 or 2")
    return axis


def _waveforms(n: int, period: float, harmonic: float, omega: Optional[float]):
    w = angular_frequency(period) if omega is None else omega
    dt = period / n
    phase = harmonic * w * dt * np.arange(n, dtype=np.float64)
    return np.cos(phase), np.sin(phase), dt


def real(data, period: float, harmonic: float = 1.0, omega: Optional[float] = None) -> float:
    """
    Real (G) phasor coordinate of a 1D decay curve.

    Parameters
    ----------
    data : array-like
        Decay curve I(t).
    period : float
        Period of the time axis.
    harmonic : float
        Harmonic n.
    omega : float, optional
        Angular frequency; defaults to 2π / period.

    Returns
    -------
    g : float
    """
    values = np.asarray(data, dtype=np.float64).ravel()
    cos_w, _, dt = _waveforms(values.shape[0], period, harmonic, omega)
    return midpoint(values * cos_w, dt) / midpoint(values, dt)


def imaginary(data, period: float, harmonic: float = 1.0, omega: Optional[float] = None) -> float:
    """Imaginary (S) phasor coordinate of a 1D decay curve; see `real`."""
    values = np.asarray(data, dtype=np.float64).ravel()
    _, sin_w, dt = _waveforms(values.shape[0], period, harmonic, omega)
    return midpoint(values * sin_w, dt) / midpoint(values, dt)


def image(data, period: float, mask=None, harmonic: float = 1.0, axis: int = 2) -> np.ndarray:
    """
    Phasor coordinates of every pixel of a 3D decay image.

    Parameters
    ----------
    data : np.ndarray
        3D decay image.
    period : float
        Period of the time axis.
    mask : np.ndarray, optional
        2D boolean mask over the non-decay axes; pixels outside get (0, 0).
    harmonic : float
        Harmonic n.
    axis : int
        Decay axis.

    Returns
    -------
    gs : np.ndarray
        (rows, cols, 2) array, G in channel 0 and S in channel 1.
    """
    values = np.asarray(data, dtype=np.float64)
    if values.ndim != 3:
        raise InvalidParameterError("data ndim", values.ndim, "must be 3")
    lanes = np.moveaxis(values, _check_axis(axis), -1)
    cos_w, sin_w, dt = _waveforms(lanes.shape[-1], period, harmonic, None)

    total = lanes.sum(axis=-1) * dt
    with np.errstate(divide='ignore', invalid='ignore'):
        g = (lanes @ cos_w) * dt / total
        s = (lanes @ sin_w) * dt / total
    if mask is not None:
        mask = np.asarray(mask, dtype=bool)
        check_matching_shapes(mask, g)
        g = np.where(mask, g, 0.0)
        s = np.where(mask, s, 0.0)
    return np.stack([g, s], axis=2)


def histogram_quality(data, count_threshold: float) -> float:
    """
    Quality q of a photon arrival histogram.

    q is 0.0 when no bin exceeds `count_threshold`; values below 1.0 point
    to few photons or photons spread thinly across bins, values above 10.0 to
    high counts distributed across the histogram.
    """
    values = np.asarray(data, dtype=np.float64).ravel()
    if values.size == 0:
        return 0.0
    valid = values > count_threshold
    vb = float(np.count_nonzero(valid))
    return float(np.sum(values[valid] ** 2) * (vb / values.size ** 2))


def histogram_quality_image(data, count_threshold: float, axis: int = 2) -> np.ndarray:
    """Pixel-wise `histogram_quality` map of a 3D decay image."""
    values = np.asarray(data, dtype=np.float64)
    if values.ndim != 3:
        raise InvalidParameterError("data ndim", values.ndim, "must be 3")
    lanes = np.moveaxis(values, _check_axis(axis), -1)
    n = lanes.shape[-1]
    if n == 0:
        return np.zeros(lanes.shape[:-1], dtype=np.float64)
    valid = lanes > count_threshold
    vb = np.count_nonzero(valid, axis=-1).astype(np.float64)
    sq = np.where(valid, lanes ** 2, 0.0).sum(axis=-1)
    return sq * (vb / n ** 2)
