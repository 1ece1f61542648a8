"""
Instrument response functions (IRF) of a time-correlated photon counting setup.
"""

from __future__ import annotations

import numpy as np

from signal_filters import gaussian

# FWHM = 2 * sqrt(2 ln 2) * sigma
FWHM_TO_SIGMA = 1.0 / (2.0 * np.sqrt(2.0 * np.log(2.0)))


def gaussian_irf_1d(bins: int, time_range: float, irf_center: float, irf_width: float) -> np.ndarray:
    """
    Simulate a Gaussian IRF.

    Parameters
    ----------
    bins : int
        Number of time bins.
    time_range : float
        Extent of the time axis, e.g. the laser period in ns.
    irf_center : float
        Position of the IRF maximum on the time axis.
    irf_width : float
        Full width at half maximum of the IRF.

    Returns
    -------
    irf : np.ndarray
        float64 curve of length `bins` normalized to unit sum.
    """
    sigma = irf_width * FWHM_TO_SIGMA
    return gaussian(sigma, bins, time_range, irf_center)
