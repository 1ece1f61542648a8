"""
Effective sample size of a weighted sample (Kish).

    n_eff = (sum w)^2 / sum w^2
"""

from __future__ import annotations

import numba as nb
import numpy as np


@nb.njit(cache=True)
def _effective_sample_size(weights):
    total = 0.0
    total_sq = 0.0
    for i in range(weights.shape[0]):
        w = weights[i]
        total += w
        total_sq += w * w
    if total_sq == 0.0:
        return 0.0
    return (total * total) / total_sq


def effective_sample_size(weights) -> float:
    """
    Kish's effective sample size of a weight vector.

    Parameters
    ----------
    weights : array-like
        Non-negative sample weights.

    Returns
    -------
    n_eff : float
        Number of equally weighted samples the weighted sample is worth;
        0.0 when every weight is 0.
    """
    w = np.ascontiguousarray(weights, dtype=np.float64).ravel()
    return float(_effective_sample_size(w))
