"""
Phasor calibration

Measured (G, S) coordinates are rotated by φ and scaled by M:

    G' = G * M cos(φ) - S * M sin(φ)
    S' = G * M sin(φ) + S * M cos(φ)

(M, φ) is derived from a reference of known monoexponential lifetime.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from saca_colocalization.base import InvalidParameterError
from .plot import modulation as _modulation
from .plot import monoexponential_coordinates, phase as _phase


def coordinates(g: float, s: float, modulation: float, phase: float) -> Tuple[float, float]:
    """Calibrate one (G, S) pair; returns (G', S')."""
    g_trans = modulation * np.cos(phase)
    s_trans = modulation * np.sin(phase)
    return float(g * g_trans - s * s_trans), float(g * s_trans + s * g_trans)


def image(data, modulation: float, phase: float, axis: int = 2) -> np.ndarray:
    """
    Calibrate every coordinate of a phasor image.

    Parameters
    ----------
    data : np.ndarray
        3D phasor image with G and S on the channel `axis`.
    modulation, phase : float
        Calibration scale and rotation.
    axis : int
        Channel axis.

    Returns
    -------
    calibrated : np.ndarray
        New array of the input shape.
    """
    values = np.asarray(data, dtype=np.float64)
    if values.ndim != 3:
        raise InvalidParameterError("data ndim", values.ndim, "must be 3")
    if axis not in (0, 1, 2):
        raise InvalidParameterError("axis", axis, "must be 0, 1 or 2")
    gs = np.moveaxis(values, axis, -1)
    if gs.shape[-1] != 2:
        raise InvalidParameterError("channel axis length", gs.shape[-1], "must be 2 (G and S)")

    g_trans = modulation * np.cos(phase)
    s_trans = modulation * np.sin(phase)
    out = np.empty_like(gs)
    out[..., 0] = gs[..., 0] * g_trans - gs[..., 1] * s_trans
    out[..., 1] = gs[..., 0] * s_trans + gs[..., 1] * g_trans
    return np.moveaxis(out, -1, axis)


def modulation_and_phase(g: float, s: float, tau: float, omega: float) -> Tuple[float, float]:
    """
    Calibration (M, φ) from a reference measurement.

    Parameters
    ----------
    g, s : float
        Measured coordinates of the reference sample.
    tau : float
        Known monoexponential lifetime of the reference.
    omega : float
        Angular frequency of the measurement.

    Returns
    -------
    (modulation, phase) : tuple of float
        Applying them with `coordinates` maps (g, s) onto the theoretical
        monoexponential coordinate of `tau`.
    """
    g_t, s_t = monoexponential_coordinates(tau, omega)
    m_measured = _modulation(g, s)
    if m_measured == 0:
        raise InvalidParameterError("measured modulation", m_measured, "must be non-zero")
    return _modulation(g_t, s_t) / m_measured, _phase(g_t, s_t) - _phase(g, s)
