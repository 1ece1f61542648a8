"""
Single multiscale SACA iteration

Per pixel (in parallel, no inter-pixel synchronization):
1. Fill the neighborhood buffers with the current kernel
2. sqrt(effective sample size) of the buffer weights
3. Weighted Kendall Tau-b (0.0 when undefined)
4. z-score = tau * sqrt_n * scale
5. Once the stop test is active, freeze pixels whose tau drifted too far
   from the checkpoint and restore their previous (tau, sqrt_n)

The previous-iteration maps are only read during the parallel loop and are
replaced wholesale after it joins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numba as nb
import numpy as np

from .base import InvalidParameterError, PixelStatus, SACAConfig, check_matching_shapes, check_radius
from .kernels import weighted_kernel
from .neighborhood import _fill_buffers_2d, _fill_buffers_3d
from .rank_correlation import _weighted_kendall_tau_b
from .sample_size import _effective_sample_size


_FROZEN = int(PixelStatus.FROZEN)


@dataclass
class SACAState:
    """
    Per-pixel state owned by one SACA run.

    `tau`/`sqrt_n` hold the current iteration's estimates, `old_tau`/
    `old_sqrt_n` the previous iteration's, `status` the ACTIVE/FROZEN tag and
    `checkpoint_tau`/`checkpoint_sqrt_n` the snapshot used by the stop test.
    """

    tau: np.ndarray
    sqrt_n: np.ndarray
    zscore: np.ndarray
    old_tau: np.ndarray
    old_sqrt_n: np.ndarray
    status: np.ndarray
    checkpoint_tau: np.ndarray
    checkpoint_sqrt_n: np.ndarray
    checkpoint_taken: bool = False

    @classmethod
    def new(cls, shape: Tuple[int, ...]) -> "SACAState":
        shape = tuple(int(s) for s in shape)
        return cls(
            tau=np.zeros(shape, dtype=np.float64),
            sqrt_n=np.zeros(shape, dtype=np.float64),
            zscore=np.zeros(shape, dtype=np.float64),
            old_tau=np.zeros(shape, dtype=np.float64),
            old_sqrt_n=np.ones(shape, dtype=np.float64),
            status=np.full(shape, int(PixelStatus.ACTIVE), dtype=np.int8),
            checkpoint_tau=np.zeros(shape, dtype=np.float64),
            checkpoint_sqrt_n=np.zeros(shape, dtype=np.float64),
        )

    @property
    def shape(self) -> Tuple[int, ...]:
        return self.tau.shape

    @property
    def frozen_mask(self) -> np.ndarray:
        return self.status == int(PixelStatus.FROZEN)

    def commit(self) -> None:
        """Replace the previous-iteration maps with this iteration's estimates."""
        self.old_tau = self.tau.copy()
        self.old_sqrt_n = self.sqrt_n.copy()

    def snapshot_checkpoint(self) -> None:
        """Capture the current (tau, sqrt_n) as the stop-test reference."""
        self.checkpoint_tau = self.tau.copy()
        self.checkpoint_sqrt_n = self.sqrt_n.copy()
        self.checkpoint_taken = True


@nb.njit(cache=True)
def _update_pixel(buf_a, buf_b, buf_w, scale):
    sqrt_n = np.sqrt(_effective_sample_size(buf_w))
    if sqrt_n <= 0.0:
        return 0.0, sqrt_n, 0.0
    tau = _weighted_kendall_tau_b(buf_a, buf_b, buf_w)
    if np.isnan(tau):
        tau = 0.0
    return tau, sqrt_n, tau * sqrt_n * scale


@nb.njit(cache=True, parallel=True)
def _iteration_2d(image_a, image_b, threshold_a, threshold_b, kernel, radius, dn,
                  lam, bound_check, scale, tau, sqrt_n, zscore, old_tau,
                  old_sqrt_n, status, checkpoint_tau, checkpoint_sqrt_n):
    rows, cols = image_a.shape
    buf_size = (2 * radius + 1) * (2 * radius + 1)
    for idx in nb.prange(rows * cols):
        row = idx // cols
        col = idx % cols
        if bound_check and status[row, col] == _FROZEN:
            continue
        buf_a = np.zeros(buf_size, dtype=np.float64)
        buf_b = np.zeros(buf_size, dtype=np.float64)
        buf_w = np.zeros(buf_size, dtype=np.float64)
        _fill_buffers_2d(image_a, image_b, kernel, old_tau, old_sqrt_n,
                         buf_a, buf_b, buf_w, dn, radius, row, col,
                         threshold_a, threshold_b)
        t, n, z = _update_pixel(buf_a, buf_b, buf_w, scale)
        zscore[row, col] = z
        if bound_check:
            if abs(checkpoint_tau[row, col] - t) * checkpoint_sqrt_n[row, col] > lam:
                status[row, col] = _FROZEN
                t = old_tau[row, col]
                n = old_sqrt_n[row, col]
        tau[row, col] = t
        sqrt_n[row, col] = n


@nb.njit(cache=True, parallel=True)
def _iteration_3d(image_a, image_b, threshold_a, threshold_b, kernel, radius, dn,
                  lam, bound_check, scale, tau, sqrt_n, zscore, old_tau,
                  old_sqrt_n, status, checkpoint_tau, checkpoint_sqrt_n):
    plns, rows, cols = image_a.shape
    side = 2 * radius + 1
    buf_size = side * side * side
    plane = rows * cols
    for idx in nb.prange(plns * plane):
        pln = idx // plane
        rem = idx % plane
        row = rem // cols
        col = rem % cols
        if bound_check and status[pln, row, col] == _FROZEN:
            continue
        buf_a = np.zeros(buf_size, dtype=np.float64)
        buf_b = np.zeros(buf_size, dtype=np.float64)
        buf_w = np.zeros(buf_size, dtype=np.float64)
        _fill_buffers_3d(image_a, image_b, kernel, old_tau, old_sqrt_n,
                         buf_a, buf_b, buf_w, dn, radius, pln, row, col,
                         threshold_a, threshold_b)
        t, n, z = _update_pixel(buf_a, buf_b, buf_w, scale)
        zscore[pln, row, col] = z
        if bound_check:
            if abs(checkpoint_tau[pln, row, col] - t) * checkpoint_sqrt_n[pln, row, col] > lam:
                status[pln, row, col] = _FROZEN
                t = old_tau[pln, row, col]
                n = old_sqrt_n[pln, row, col]
        tau[pln, row, col] = t
        sqrt_n[pln, row, col] = n


@dataclass
class SACAIterationEngine:
    """Runs one propagation-separation iteration over every pixel of a 2D or 3D image pair."""

    config: SACAConfig = field(default_factory=SACAConfig)

    def kernel_for(self, radius: int, ndim: int) -> np.ndarray:
        falloff = radius * self.config.falloff_factor
        return weighted_kernel(radius, falloff, ndim)

    def run_iteration(
        self,
        image_a: np.ndarray,
        image_b: np.ndarray,
        threshold_a: float,
        threshold_b: float,
        radius: int,
        dn: float,
        lam: float,
        bound_check: bool,
        state: SACAState,
        kernel: Optional[np.ndarray] = None,
    ) -> SACAState:
        """
        Update `state` in place with one iteration at `radius`.

        Parameters
        ----------
        image_a, image_b : np.ndarray
            float64, C-contiguous images of identical 2D or 3D shape.
        threshold_a, threshold_b : float
            Intensity thresholds of the two channels.
        radius : int
            Kernel radius of this iteration.
        dn : float
            Global normalization, 2 * sqrt(ln(number of pixels)).
        lam : float
            Stop threshold of the stability test.
        bound_check : bool
            Skip frozen pixels and run the stop test on the others.
        state : SACAState
            Run state, updated in place; previous maps are replaced after the
            parallel loop joins.
        kernel : np.ndarray, optional
            Precomputed weighted kernel for `radius`.

        Returns
        -------
        state : SACAState
        """
        radius = check_radius(radius)
        image_a = np.ascontiguousarray(image_a, dtype=np.float64)
        image_b = np.ascontiguousarray(image_b, dtype=np.float64)
        check_matching_shapes(image_a, image_b)
        if state.shape != image_a.shape:
            raise InvalidParameterError("state shape", state.shape, f"must match image shape {image_a.shape}")
        ndim = image_a.ndim
        if ndim == 2:
            iterate = _iteration_2d
        elif ndim == 3:
            iterate = _iteration_3d
        else:
            raise InvalidParameterError("image ndim", ndim, "must be 2 or 3")
        if kernel is None:
            kernel = self.kernel_for(radius, ndim)

        iterate(
            image_a, image_b, float(threshold_a), float(threshold_b),
            np.ascontiguousarray(kernel, dtype=np.float64), radius, float(dn),
            float(lam), bool(bound_check), float(self.config.zscore_scale),
            state.tau, state.sqrt_n, state.zscore, state.old_tau,
            state.old_sqrt_n, state.status, state.checkpoint_tau,
            state.checkpoint_sqrt_n,
        )
        state.commit()
        return state
