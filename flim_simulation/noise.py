"""
Photon shot noise

Poisson noise with rate value * scale per sample. Non-positive rates give 0.
With a seed every lane of a 3D array gets the same seed (homogeneous noise);
without one, lanes draw from independent generators.
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from saca_colocalization.base import InvalidParameterError


def _poisson_lane(values: np.ndarray, scale: float, rng: np.random.Generator) -> np.ndarray:
    lam = values * scale
    lam = np.where(lam > 0, lam, 0.0)
    return rng.poisson(lam).astype(np.float64)


def poisson_1d(data, scale: float, seed: Optional[int] = None) -> np.ndarray:
    """
    Draw Poisson noise around a 1D curve.

    Parameters
    ----------
    data : array-like
        Noise-free curve.
    scale : float
        Multiplier applied to each value before sampling.
    seed : int, optional
        Seed of the generator; None draws fresh entropy.

    Returns
    -------
    noisy : np.ndarray
        float64 Poisson counts, same length as `data`.
    """
    values = np.asarray(data, dtype=np.float64)
    if values.ndim != 1:
        raise InvalidParameterError("data ndim", values.ndim, "must be 1")
    return _poisson_lane(values, scale, np.random.default_rng(seed))


def poisson_3d(data, scale: float, seed: Optional[int] = None, axis: int = 2) -> np.ndarray:
    """Poisson noise applied lane by lane along `axis` of a 3D array; returns a new array."""
    values = np.asarray(data, dtype=np.float64)
    if values.ndim != 3:
        raise InvalidParameterError("data ndim", values.ndim, "must be 3")
    if axis not in (0, 1, 2):
        raise InvalidParameterError("axis", axis, "must be 0, 1 or 2")

    lanes = np.moveaxis(values, axis, -1)
    out = np.empty_like(lanes)
    shared = np.random.default_rng() if seed is None else None
    for idx in np.ndindex(lanes.shape[:-1]):
        rng = shared if seed is None else np.random.default_rng(seed)
        out[idx] = _poisson_lane(lanes[idx], scale, rng)
    return np.moveaxis(out, -1, axis)
