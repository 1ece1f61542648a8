"""
SACA Colocalization Module

Spatially Adaptive Colocalization Analysis of dual-channel fluorescence images:
- Weighted circular/spherical neighborhood kernels
- Weighted Kendall Tau-b with Knight's O(n log n) merge sort
- Kish effective sample size
- Multiscale propagation-separation loop producing per-pixel z-scores

Positive z-scores mark colocalization, negative ones anti-colocalization.
"""

from .base import (
    DegenerateCorrelationError,
    ImageArrayError,
    InvalidParameterError,
    MismatchedArrayLengthsError,
    MismatchedArrayShapesError,
    PixelStatus,
    SACAConfig,
)
from .kernels import circle, sphere, weighted_circle, weighted_kernel, weighted_sphere
from .weighted_sort import weighted_merge_sort
from .sample_size import effective_sample_size
from .rank_correlation import weighted_kendall_tau_b
from .neighborhood import NeighborhoodBuffer, fill_neighborhood_buffer
from .iteration import SACAIterationEngine, SACAState
from .saca import SACAAnalysis, SACAOrchestrator, SACAResult, saca_2d, saca_3d

__all__ = [
    'ImageArrayError',
    'MismatchedArrayShapesError',
    'MismatchedArrayLengthsError',
    'InvalidParameterError',
    'DegenerateCorrelationError',
    'PixelStatus',
    'SACAConfig',
    'circle',
    'sphere',
    'weighted_circle',
    'weighted_sphere',
    'weighted_kernel',
    'weighted_merge_sort',
    'effective_sample_size',
    'weighted_kendall_tau_b',
    'NeighborhoodBuffer',
    'fill_neighborhood_buffer',
    'SACAState',
    'SACAIterationEngine',
    'SACAOrchestrator',
    'SACAResult',
    'SACAAnalysis',
    'saca_2d',
    'saca_3d',
]
