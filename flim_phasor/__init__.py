"""
FLIM Phasor Module

Phasor analysis of time-domain fluorescence lifetime data:
- Time-domain G/S transform of curves and images, histogram quality
- Phasor plot geometry (modulation, phase, universal semicircle)
- Calibration against a reference lifetime
"""

from . import calibration, plot, time_domain
from .time_domain import histogram_quality, histogram_quality_image, imaginary, real
from .plot import map_mask, modulation, monoexponential_coordinates, phase

__all__ = [
    'calibration',
    'plot',
    'time_domain',
    'real',
    'imaginary',
    'histogram_quality',
    'histogram_quality_image',
    'modulation',
    'phase',
    'monoexponential_coordinates',
    'map_mask',
]
