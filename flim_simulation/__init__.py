"""
FLIM Simulation Module

Synthetic time-domain fluorescence lifetime data:
- Ideal and IRF-convolved multi-exponential decays (1D curves and 3D images)
- Gaussian instrument response functions
- Poisson shot noise
"""

from .decay import (
    gaussian_exponential_1d,
    gaussian_exponential_3d,
    ideal_exponential_1d,
    ideal_exponential_3d,
    irf_exponential_1d,
    irf_exponential_3d,
)
from .instrument import gaussian_irf_1d
from .noise import poisson_1d, poisson_3d

__all__ = [
    'ideal_exponential_1d',
    'ideal_exponential_3d',
    'irf_exponential_1d',
    'irf_exponential_3d',
    'gaussian_exponential_1d',
    'gaussian_exponential_3d',
    'gaussian_irf_1d',
    'poisson_1d',
    'poisson_3d',
]
