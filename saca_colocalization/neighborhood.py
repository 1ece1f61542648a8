"""
Neighborhood buffer filling for SACA

For a centre pixel and kernel radius, copies the clamped local window of both
images into flat buffers together with a weight per cell. The weight is the
spatial kernel weight times a consistency factor derived from the previous
iteration: cells whose prior tau differs from the centre's prior tau by more
than the centre's statistical resolution are dropped (propagation-separation).
Cells with an intensity below the channel threshold get weight 0.

Buffers have (2r+1)^ndim slots; slots past the clamped window are zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numba as nb
import numpy as np

from .base import InvalidParameterError, check_matching_shapes, check_radius


@dataclass
class NeighborhoodBuffer:
    """Flat, parallel neighborhood buffers of one pixel."""

    values_a: np.ndarray
    values_b: np.ndarray
    weights: np.ndarray
    filled: int

    def __len__(self) -> int:
        return self.weights.shape[0]


@nb.njit(cache=True)
def _window_bounds(position, radius, length):
    start = position - radius
    if start < 0:
        start = 0
    end = position + radius
    if end >= length:
        end = length - 1
    return start, end


@nb.njit(cache=True)
def _consistency_weight(kernel_w, tau_cell, tau_center, sqrt_n_center, dn):
    """Down-weight a cell by how far its prior tau is from the centre's."""
    diff = abs(tau_cell - tau_center)
    if dn > 0.0:
        scaled = diff * sqrt_n_center / dn
    elif diff == 0.0:
        scaled = 0.0
    else:
        scaled = np.inf
    if scaled < 1.0:
        return kernel_w * (1.0 - scaled) * (1.0 - scaled)
    return 0.0


@nb.njit(cache=True)
def _fill_buffers_2d(image_a, image_b, kernel, old_tau, old_sqrt_n,
                     buf_a, buf_b, buf_w, dn, radius, row, col,
                     threshold_a, threshold_b):
    rows, cols = image_a.shape
    r0, r1 = _window_bounds(row, radius, rows)
    c0, c1 = _window_bounds(col, radius, cols)
    tau_center = old_tau[row, col]
    sqrt_n_center = old_sqrt_n[row, col]

    i = 0
    for r in range(r0, r1 + 1):
        kr = r - row + radius
        for c in range(c0, c1 + 1):
            kc = c - col + radius
            va = image_a[r, c]
            vb = image_b[r, c]
            buf_a[i] = va
            buf_b[i] = vb
            w = _consistency_weight(kernel[kr, kc], old_tau[r, c], tau_center, sqrt_n_center, dn)
            if va < threshold_a or vb < threshold_b:
                w = 0.0
            buf_w[i] = w
            i += 1

    for k in range(i, buf_w.shape[0]):
        buf_a[k] = 0.0
        buf_b[k] = 0.0
        buf_w[k] = 0.0
    return i


@nb.njit(cache=True)
def _fill_buffers_3d(image_a, image_b, kernel, old_tau, old_sqrt_n,
                     buf_a, buf_b, buf_w, dn, radius, pln, row, col,
                     threshold_a, threshold_b):
    plns, rows, cols = image_a.shape
    p0, p1 = _window_bounds(pln, radius, plns)
    r0, r1 = _window_bounds(row, radius, rows)
    c0, c1 = _window_bounds(col, radius, cols)
    tau_center = old_tau[pln, row, col]
    sqrt_n_center = old_sqrt_n[pln, row, col]

    i = 0
    for p in range(p0, p1 + 1):
        kp = p - pln + radius
        for r in range(r0, r1 + 1):
            kr = r - row + radius
            for c in range(c0, c1 + 1):
                kc = c - col + radius
                va = image_a[p, r, c]
                vb = image_b[p, r, c]
                buf_a[i] = va
                buf_b[i] = vb
                w = _consistency_weight(kernel[kp, kr, kc], old_tau[p, r, c], tau_center, sqrt_n_center, dn)
                if va < threshold_a or vb < threshold_b:
                    w = 0.0
                buf_w[i] = w
                i += 1

    for k in range(i, buf_w.shape[0]):
        buf_a[k] = 0.0
        buf_b[k] = 0.0
        buf_w[k] = 0.0
    return i


def fill_neighborhood_buffer(
    position: Sequence[int],
    radius: int,
    image_a: np.ndarray,
    image_b: np.ndarray,
    kernel: np.ndarray,
    old_tau: np.ndarray,
    old_sqrt_n: np.ndarray,
    dn: float,
    threshold_a: float = 0.0,
    threshold_b: float = 0.0,
) -> NeighborhoodBuffer:
    """
    Fill the neighborhood buffers of a single pixel or voxel.

    Parameters
    ----------
    position : sequence of int
        (row, col) for 2D images or (pln, row, col) for 3D images.
    radius : int
        Kernel radius; buffers hold (2r+1)^ndim slots.
    image_a, image_b : np.ndarray
        Source images of identical shape.
    kernel : np.ndarray
        Spatial weights of shape (2r+1,)*ndim, e.g. from `weighted_circle`.
    old_tau, old_sqrt_n : np.ndarray
        Previous iteration's tau and sqrt(effective n) maps.
    dn : float
        Global normalization, 2 * sqrt(ln(number of pixels)).
    threshold_a, threshold_b : float
        Cells with an intensity below the threshold get weight 0.

    Returns
    -------
    buffer : NeighborhoodBuffer
    """
    radius = check_radius(radius)
    a = np.ascontiguousarray(image_a, dtype=np.float64)
    b = np.ascontiguousarray(image_b, dtype=np.float64)
    check_matching_shapes(a, b)
    ndim = a.ndim
    if ndim not in (2, 3):
        raise InvalidParameterError("image ndim", ndim, "must be 2 or 3")
    if len(position) != ndim:
        raise InvalidParameterError("position", tuple(position), f"must have {ndim} coordinates")
    for p, length in zip(position, a.shape):
        if not 0 <= p < length:
            raise InvalidParameterError("position", tuple(position), f"is outside the image shape {a.shape}")
    k = np.ascontiguousarray(kernel, dtype=np.float64)
    if k.shape != (2 * radius + 1,) * ndim:
        raise InvalidParameterError("kernel shape", k.shape, f"must be {(2 * radius + 1,) * ndim}")
    ot = np.ascontiguousarray(old_tau, dtype=np.float64)
    on = np.ascontiguousarray(old_sqrt_n, dtype=np.float64)
    check_matching_shapes(a, ot)
    check_matching_shapes(a, on)

    size = (2 * radius + 1) ** ndim
    buf_a = np.zeros(size, dtype=np.float64)
    buf_b = np.zeros(size, dtype=np.float64)
    buf_w = np.zeros(size, dtype=np.float64)
    if ndim == 2:
        filled = _fill_buffers_2d(
            a, b, k, ot, on, buf_a, buf_b, buf_w, float(dn), radius,
            int(position[0]), int(position[1]), float(threshold_a), float(threshold_b),
        )
    else:
        filled = _fill_buffers_3d(
            a, b, k, ot, on, buf_a, buf_b, buf_w, float(dn), radius,
            int(position[0]), int(position[1]), int(position[2]),
            float(threshold_a), float(threshold_b),
        )
    return NeighborhoodBuffer(values_a=buf_a, values_b=buf_b, weights=buf_w, filled=int(filled))
