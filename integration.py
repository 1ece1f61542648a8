"""
Numerical integration of uniformly sampled curves

- Midpoint (rectangle) rule
- Simpson's 1/3 rule
- Composite Simpson: Simpson's rule on the even part, trapezoid on an odd
  trailing subinterval
"""

from __future__ import annotations

import numpy as np

from saca_colocalization.base import InvalidParameterError


def midpoint(y, delta_x: float = 1.0) -> float:
    """
    Integrate samples with the midpoint rule.

    Parameters
    ----------
    y : array-like
        Sampled function values.
    delta_x : float
        Sample spacing.

    Returns
    -------
    area : float
        delta_x * sum(y).
    """
    y = np.asarray(y, dtype=np.float64).ravel()
    return float(delta_x * np.sum(y))


def simpson(y, delta_x: float = 1.0) -> float:
    """
    Integrate samples with Simpson's 1/3 rule.

    Raises
    ------
    InvalidParameterError
        If the number of subintervals (len(y) - 1) is odd.
    """
    y = np.asarray(y, dtype=np.float64).ravel()
    n = y.shape[0] - 1
    if n < 0:
        return 0.0
    if n % 2 != 0:
        raise InvalidParameterError("number of subintervals", n, "must be even for Simpson's rule")
    if n == 0:
        return 0.0
    odd = np.sum(y[1:-1:2])
    even = np.sum(y[2:-1:2])
    return float(delta_x / 3.0 * (y[0] + 4.0 * odd + 2.0 * even + y[-1]))


def composite_simpson(y, delta_x: float = 1.0) -> float:
    """Simpson's rule on any number of samples; an odd last subinterval is integrated as a trapezoid."""
    y = np.asarray(y, dtype=np.float64).ravel()
    n = y.shape[0] - 1
    if n < 1:
        return 0.0
    if n % 2 == 0:
        return simpson(y, delta_x)
    # trailing trapezoid
    tail = 0.5 * delta_x * (y[-2] + y[-1])
    return simpson(y[:-1], delta_x) + float(tail)
