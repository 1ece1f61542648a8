"""
Optical parameters

Small closed-form quantities used across the FLIM and imaging utilities.
"""

from __future__ import annotations

import numpy as np


def omega(period: float) -> float:
    """
    Angular frequency of a repetitive excitation.

    Parameters
    ----------
    period : float
        Repetition period (e.g. the laser pulse period in seconds).

    Returns
    -------
    omega : float
        2π / period.
    """
    return 2.0 * np.pi / period


def abbe_diffraction_limit(wavelength: float, numerical_aperture: float) -> float:
    """Abbe lateral resolution limit, wavelength / (2 * NA)."""
    return wavelength / (2.0 * numerical_aperture)
