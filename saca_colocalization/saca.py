"""
Spatially Adaptive Colocalization Analysis (SACA)

Pixel-wise colocalization z-scores from two fluorescence channels. Each pixel
grows a weighted circular (spherical in 3D) neighborhood over a fixed
multiscale schedule. Neighbors are weighted by distance from the centre and by
how consistent their previous local correlation is with the centre's
(propagation-separation). The local colocalization coefficient is the
weighted Kendall Tau-b; its z-score is tau * sqrt(effective n) * 1.5.

Positive z-scores indicate colocalization, negative ones anti-colocalization.

Schedule (defaults of SACAConfig):
- 15 iterations, radius = floor(1.15^s)
- dn = lambda = 2 * sqrt(ln(number of pixels))
- after iteration 8 the (tau, sqrt_n) checkpoint is captured and pixels whose
  tau drifts from it by more than lambda / sqrt_n are frozen

References:
- Wang, S. et al. (2019) "Spatially Adaptive Colocalization Analysis in Dual-Color
  Fluorescence Microscopy" IEEE Trans Image Process 28(9):4471-4485
  https://doi.org/10.1109/TIP.2019.2909194
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
import warnings

import numpy as np
import pandas as pd
from scipy import stats

from .base import (
    InvalidParameterError,
    PixelStatus,
    SACAConfig,
    check_matching_shapes,
)
from .iteration import SACAIterationEngine, SACAState


@dataclass
class SACAResult:
    """Outcome of one SACA run."""

    zscore: np.ndarray
    tau: np.ndarray
    sqrt_n: np.ndarray
    frozen_mask: np.ndarray
    history: List[Dict[str, Any]] = field(default_factory=list)

    def history_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.history)


def normalization_constant(shape) -> float:
    """dn = 2 * sqrt(ln(number of pixels))."""
    n = int(np.prod(shape))
    if n < 1:
        return 0.0
    return float(np.sqrt(np.log(n)) * 2.0)


class SACAOrchestrator:
    """
    Drives the multiscale SACA loop.

    Owns the per-run state, the radius schedule and the activation of the
    stop test; the per-pixel work is delegated to SACAIterationEngine.
    """

    def __init__(self, config: Optional[SACAConfig] = None):
        self.config = (config or SACAConfig()).validate()
        self.engine = SACAIterationEngine(self.config)

    def run_saca(
        self,
        image_a: np.ndarray,
        image_b: np.ndarray,
        threshold_a: float = 0.0,
        threshold_b: float = 0.0,
        ndim: Optional[int] = None,
    ) -> SACAResult:
        """
        Run the full multiscale loop.

        Parameters
        ----------
        image_a, image_b : np.ndarray
            Two channels of identical shape (2D or 3D). Any numeric dtype;
            computation is carried out in float64.
        threshold_a, threshold_b : float
            Neighbors with an intensity below the channel threshold get weight 0.
        ndim : int, optional
            Required dimensionality (2 or 3). Inferred when omitted.

        Returns
        -------
        result : SACAResult
        """
        a = np.asarray(image_a)
        b = np.asarray(image_b)
        check_matching_shapes(a, b)
        expected = a.ndim if ndim is None else ndim
        if expected not in (2, 3):
            raise InvalidParameterError("ndim", expected, "must be 2 or 3")
        if a.ndim != expected:
            raise InvalidParameterError("image ndim", a.ndim, f"must be {expected}")
        a = np.ascontiguousarray(a, dtype=np.float64)
        b = np.ascontiguousarray(b, dtype=np.float64)
        threshold_a = float(threshold_a)
        threshold_b = float(threshold_b)

        if a.size == 1:
            warnings.warn("SACA on a single-pixel image: there is no neighborhood to pool.", UserWarning)
        if a.size > 0 and not np.any((a >= threshold_a) & (b >= threshold_b)):
            warnings.warn(
                f"No pixel reaches both thresholds ({threshold_a:g}, {threshold_b:g}); "
                "every z-score will be 0.",
                UserWarning,
            )

        cfg = self.config
        state = SACAState.new(a.shape)
        dn = normalization_constant(a.shape)
        lam = dn * cfg.lambda_factor
        bound_check = False
        history: List[Dict[str, Any]] = []

        for s, radius in enumerate(cfg.radius_schedule()):
            self.engine.run_iteration(
                a, b, threshold_a, threshold_b, radius, dn, lam, bound_check, state
            )
            history.append(self._iteration_record(s, radius, bound_check, state))
            if s == cfg.checkpoint_iteration:
                bound_check = True
                state.snapshot_checkpoint()

        return SACAResult(
            zscore=state.zscore.copy(),
            tau=state.tau.copy(),
            sqrt_n=state.sqrt_n.copy(),
            frozen_mask=state.frozen_mask,
            history=history,
        )

    def run(self, image_a, image_b, threshold_a=0.0, threshold_b=0.0) -> np.ndarray:
        """Run SACA and return only the z-score map."""
        return self.run_saca(image_a, image_b, threshold_a, threshold_b).zscore

    @staticmethod
    def _iteration_record(s: int, radius: int, bound_check: bool, state: SACAState) -> Dict[str, Any]:
        frozen = int(np.count_nonzero(state.status == int(PixelStatus.FROZEN)))
        return {
            'iteration': s,
            'radius': radius,
            'bound_check': bound_check,
            'active_pixels': int(state.status.size - frozen),
            'frozen_pixels': frozen,
            'mean_tau': float(np.mean(state.tau)) if state.tau.size else 0.0,
            'mean_sqrt_n': float(np.mean(state.sqrt_n)) if state.sqrt_n.size else 0.0,
        }


def saca_2d(image_a, image_b, threshold_a=0.0, threshold_b=0.0, config: Optional[SACAConfig] = None) -> np.ndarray:
    """
    Colocalization z-score map of two 2D images.

    Parameters
    ----------
    image_a, image_b : np.ndarray
        2D images of identical shape.
    threshold_a, threshold_b : float
        Per-channel intensity thresholds.
    config : SACAConfig, optional
        Schedule constants; defaults reproduce the published algorithm.

    Returns
    -------
    zscore : np.ndarray
        float64 map of the input shape; the sign gives co- (+) or
        anti-colocalization (-), the magnitude its strength.

    Raises
    ------
    MismatchedArrayShapesError
        If the two images differ in shape.
    """
    return SACAOrchestrator(config).run_saca(image_a, image_b, threshold_a, threshold_b, ndim=2).zscore


def saca_3d(image_a, image_b, threshold_a=0.0, threshold_b=0.0, config: Optional[SACAConfig] = None) -> np.ndarray:
    """3D (volumetric) counterpart of `saca_2d`, using spherical neighborhoods."""
    return SACAOrchestrator(config).run_saca(image_a, image_b, threshold_a, threshold_b, ndim=3).zscore


def _resolve_threshold(image: np.ndarray, threshold: Union[float, str]) -> float:
    if isinstance(threshold, str):
        if threshold.lower() != 'otsu':
            raise InvalidParameterError("threshold", threshold, "must be a number or 'otsu'")
        from image_utils import otsu_threshold
        return otsu_threshold(image)
    return float(threshold)


class SACAAnalysis:
    """
    SACA analysis returning a result dictionary.

    Wraps the orchestrator with threshold selection, significance testing of
    the z-score map and per-iteration diagnostics.
    """

    def __init__(self, config: Optional[SACAConfig] = None):
        self.config = config or SACAConfig()

    def analyze(
        self,
        image_a: np.ndarray,
        image_b: np.ndarray,
        threshold_a: Union[float, str] = 0.0,
        threshold_b: Union[float, str] = 0.0,
        alpha: float = 0.05,
    ) -> Dict[str, Any]:
        """
        Performs SACA on a 2D image pair or a 3D stack pair.

        Args:
            image_a (np.ndarray): First channel.
            image_b (np.ndarray): Second channel, same shape as `image_a`.
            threshold_a (float or 'otsu'): Intensity threshold of channel A.
            threshold_b (float or 'otsu'): Intensity threshold of channel B.
            alpha (float): False discovery rate for the significance mask.

        Returns:
            dict: A dictionary with the following keys:
                  - 'status': 'success' or 'error'
                  - 'zscore_map', 'tau_map', 'sqrt_n_map', 'frozen_mask'
                  - 'p_value_map': two-sided normal p-value of each z-score
                  - 'significant_mask': Benjamini-Hochberg discoveries at `alpha`
                  - 'colocalized_fraction' / 'anticolocalized_fraction'
                  - 'iteration_history': pd.DataFrame, one row per iteration
                  - 'message'
        """
        try:
            if not 0.0 < alpha < 1.0:
                raise InvalidParameterError("alpha", alpha, "must be in (0, 1)")
            a = np.asarray(image_a)
            b = np.asarray(image_b)
            check_matching_shapes(a, b)
            t_a = _resolve_threshold(a, threshold_a)
            t_b = _resolve_threshold(b, threshold_b)

            result = SACAOrchestrator(self.config).run_saca(a, b, t_a, t_b)
        except ValueError as e:
            return {'status': 'error', 'message': f'SACA analysis failed: {e}'}

        z = result.zscore
        p_values = 2.0 * stats.norm.sf(np.abs(z))
        eligible = (a >= t_a) & (b >= t_b)
        significant = np.zeros(z.shape, dtype=bool)
        if np.any(eligible):
            adjusted = stats.false_discovery_control(p_values[eligible], method='bh')
            significant[eligible] = adjusted <= alpha

        n_eligible = max(int(np.count_nonzero(eligible)), 1)
        return {
            'status': 'success',
            'zscore_map': z,
            'tau_map': result.tau,
            'sqrt_n_map': result.sqrt_n,
            'frozen_mask': result.frozen_mask,
            'p_value_map': p_values,
            'significant_mask': significant,
            'colocalized_fraction': float(np.count_nonzero(significant & (z > 0))) / n_eligible,
            'anticolocalized_fraction': float(np.count_nonzero(significant & (z < 0))) / n_eligible,
            'thresholds': (t_a, t_b),
            'iteration_history': result.history_frame(),
            'message': 'SACA analysis completed successfully.'
        }
