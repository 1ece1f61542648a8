"""
Phasor plot geometry

Polar quantities of (G, S) coordinates, the universal semicircle position
of a monoexponential decay and masks of selected phasor points.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from saca_colocalization.base import InvalidParameterError, MismatchedArrayLengthsError


def modulation(g: float, s: float) -> float:
    """M = sqrt(G² + S²)."""
    return float(np.sqrt(g * g + s * s))


def phase(g: float, s: float) -> float:
    """φ = atan2(S, G), in radians."""
    return float(np.arctan2(s, g))


def monoexponential_coordinates(tau: float, omega: float) -> Tuple[float, float]:
    """
    Phasor coordinates of a single-component decay.

    Parameters
    ----------
    tau : float
        Lifetime.
    omega : float
        Angular frequency, in the inverse unit of `tau`.

    Returns
    -------
    (g, s) : tuple of float
        Point on the universal semicircle, (1/(1+(ωτ)²), ωτ/(1+(ωτ)²)).
    """
    wt = omega * tau
    denom = 1.0 + wt * wt
    return 1.0 / denom, wt / denom


def map_mask(data, g_coords, s_coords, axis: int = 2) -> np.ndarray:
    """
    Mask the pixels of a phasor image that sit on selected coordinates.

    Parameters
    ----------
    data : np.ndarray
        3D phasor image holding G and S on the channel `axis`.
    g_coords, s_coords : sequence of float
        Selected (g, s) pairs.
    axis : int
        Channel axis of `data`.

    Returns
    -------
    mask : np.ndarray
        2D boolean array, True where a pixel's (G, S) matches a selected pair.
    """
    values = np.asarray(data, dtype=np.float64)
    if values.ndim != 3:
        raise InvalidParameterError("data ndim", values.ndim, "must be 3")
    if axis not in (0, 1, 2):
        raise InvalidParameterError("axis", axis, "must be 0, 1 or 2")
    gs = np.moveaxis(values, axis, -1)
    if gs.shape[-1] != 2:
        raise InvalidParameterError("channel axis length", gs.shape[-1], "must be 2 (G and S)")
    g_coords = np.asarray(g_coords, dtype=np.float64).ravel()
    s_coords = np.asarray(s_coords, dtype=np.float64).ravel()
    if g_coords.shape[0] != s_coords.shape[0]:
        raise MismatchedArrayLengthsError(g_coords.shape[0], s_coords.shape[0])

    mask = np.zeros(gs.shape[:-1], dtype=bool)
    for g, s in zip(g_coords, s_coords):
        mask |= np.isclose(gs[..., 0], g) & np.isclose(gs[..., 1], s)
    return mask
