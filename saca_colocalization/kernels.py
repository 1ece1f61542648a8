"""
Neighborhood kernels

Square (2D) and cubic (3D) kernels centred on the middle cell:
- Boolean circle/sphere masks (cell is True when its Euclidean distance to
  the centre is <= radius)
- Weighted circle/sphere kernels with a linear falloff from `initial_value`
  at the centre, clipped to the radius footprint

Kernels have side length 2 * radius + 1.
"""

from __future__ import annotations

import numpy as np

from .base import InvalidParameterError, check_radius


def _center_distance(radius: int, ndim: int) -> np.ndarray:
    """Euclidean distance of every kernel cell to the centre cell."""
    dim = 2 * radius + 1
    grids = np.indices((dim,) * ndim, dtype=float)
    center = float(radius)
    return np.sqrt(np.sum((grids - center) ** 2, axis=0))


def _boolean_kernel(radius: int, ndim: int) -> np.ndarray:
    dist = _center_distance(radius, ndim)
    return dist <= float(radius)


def _weighted_kernel(radius: int, falloff_radius: float, initial_value: float, ndim: int) -> np.ndarray:
    if falloff_radius <= 0:
        raise InvalidParameterError("falloff_radius", falloff_radius, "must be positive")
    norm_dist = _center_distance(radius, ndim) / falloff_radius
    norm_center = float(radius) / falloff_radius
    weights = np.where(norm_dist >= initial_value, 0.0, initial_value - norm_dist)
    weights[norm_dist > norm_center] = 0.0
    return weights


def circle(radius: int) -> np.ndarray:
    """
    Create a 2D square boolean kernel holding a filled circle.

    Parameters
    ----------
    radius : int
        Circle radius in pixels, must be >= 1.

    Returns
    -------
    kernel : np.ndarray
        Boolean array of shape (2r+1, 2r+1); True inside or on the circle.
    """
    return _boolean_kernel(check_radius(radius), 2)


def sphere(radius: int) -> np.ndarray:
    """Create a 3D cubic boolean kernel holding a filled sphere of `radius` voxels."""
    return _boolean_kernel(check_radius(radius), 3)


def weighted_circle(radius: int, falloff_radius: float, initial_value: float = 1.0) -> np.ndarray:
    """
    Create a 2D square kernel with a weighted circular neighborhood.

    For every cell the distance to the centre `d` is normalized by
    `falloff_radius`. Cells outside the circle of `radius` get 0.0, cells
    whose normalized distance reaches `initial_value` get 0.0, all others get
    `initial_value - d / falloff_radius`.

    Parameters
    ----------
    radius : int
        Circle radius in pixels, must be >= 1.
    falloff_radius : float
        Distance scale of the linear decay. Larger values decay slower.
    initial_value : float
        Weight at the kernel centre (maximum weight).

    Returns
    -------
    kernel : np.ndarray
        Float array of shape (2r+1, 2r+1).
    """
    radius = check_radius(radius)
    return _weighted_kernel(radius, float(falloff_radius), float(initial_value), 2)


def weighted_sphere(radius: int, falloff_radius: float, initial_value: float = 1.0) -> np.ndarray:
    """3D counterpart of `weighted_circle`; returns a (2r+1, 2r+1, 2r+1) array."""
    radius = check_radius(radius)
    return _weighted_kernel(radius, float(falloff_radius), float(initial_value), 3)


def weighted_kernel(radius: int, falloff_radius: float, ndim: int, initial_value: float = 1.0) -> np.ndarray:
    """Dispatch to `weighted_circle` (ndim=2) or `weighted_sphere` (ndim=3)."""
    if ndim == 2:
        return weighted_circle(radius, falloff_radius, initial_value)
    if ndim == 3:
        return weighted_sphere(radius, falloff_radius, initial_value)
    raise InvalidParameterError("ndim", ndim, "must be 2 or 3")
