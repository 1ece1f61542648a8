"""
Base definitions for Spatially Adaptive Colocalization Analysis (SACA)

Defines:
- The exception hierarchy shared by the colocalization core and utilities
- The multiscale schedule configuration
- The per-pixel status tags used by the iteration engine
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

import numpy as np


class ImageArrayError(ValueError):
    """Base class for invalid array inputs."""
    pass


class MismatchedArrayShapesError(ImageArrayError):
    """Raised when two images that must be paired have different shapes."""

    def __init__(self, shape_a: Sequence[int], shape_b: Sequence[int]):
        self.shape_a = tuple(int(v) for v in shape_a)
        self.shape_b = tuple(int(v) for v in shape_b)
        super().__init__(
            f"Mismatched array shapes, {list(self.shape_a)} and {list(self.shape_b)}, do not match."
        )


class MismatchedArrayLengthsError(ImageArrayError):
    """Raised when parallel sequences have different lengths."""

    def __init__(self, len_a: int, len_b: int):
        self.len_a = int(len_a)
        self.len_b = int(len_b)
        super().__init__(
            f"Mismatched array lengths, {self.len_a} and {self.len_b}, do not match."
        )


class InvalidParameterError(ImageArrayError):
    """Raised when a parameter value is invalid (e.g. a kernel radius of 0)."""

    def __init__(self, param_name: str, value, reason: str = "is invalid"):
        self.param_name = param_name
        self.value = value
        super().__init__(
            f"Invalid parameter value, the parameter {param_name} {reason} (got {value})."
        )


class DegenerateCorrelationError(ImageArrayError):
    """Raised when a rank correlation is undefined (zero variance in one variable)."""
    pass


class PixelStatus(IntEnum):
    """
    Per-pixel state tag of the multiscale loop.

    ACTIVE pixels are re-estimated every iteration. FROZEN pixels failed the
    stability test once and keep their last stable (tau, sqrt_n) estimate for
    the rest of the run.
    """

    ACTIVE = 0
    FROZEN = 1


@dataclass
class SACAConfig:
    """
    Multiscale schedule of the SACA propagation-separation loop.

    Parameters
    ----------
    total_iterations : int
        Number of iterations run (tu). The loop never terminates early.
    checkpoint_iteration : int
        Iteration (tl) after which the stop test is switched on and the
        (tau, sqrt_n) checkpoint is captured.
    initial_size : float
        Starting value of the size factor; radius = floor(size factor).
    step_size : float
        Geometric growth of the size factor per iteration.
    falloff_factor : float
        Kernel falloff radius as a multiple of the kernel radius.
    zscore_scale : float
        Constant scale applied to tau * sqrt(effective n).
    lambda_factor : float
        Stop threshold as a multiple of dn.
    """

    total_iterations: int = 15
    checkpoint_iteration: int = 8
    initial_size: float = 1.0
    step_size: float = 1.15
    falloff_factor: float = float(np.sqrt(2.5))
    zscore_scale: float = 1.5
    lambda_factor: float = 1.0

    def validate(self) -> "SACAConfig":
        if self.total_iterations < 1:
            raise InvalidParameterError("total_iterations", self.total_iterations, "must be at least 1")
        if not 0 <= self.checkpoint_iteration < self.total_iterations:
            raise InvalidParameterError(
                "checkpoint_iteration",
                self.checkpoint_iteration,
                f"must be in [0, {self.total_iterations})",
            )
        if self.initial_size < 1.0:
            raise InvalidParameterError("initial_size", self.initial_size, "must be at least 1.0")
        if self.step_size <= 1.0:
            raise InvalidParameterError("step_size", self.step_size, "must be greater than 1.0")
        for name in ("falloff_factor", "zscore_scale", "lambda_factor"):
            value = getattr(self, name)
            if value <= 0:
                raise InvalidParameterError(name, value, "must be positive")
        return self

    def radius_schedule(self) -> list:
        """Kernel radius used at each iteration."""
        radii = []
        size_f = float(self.initial_size)
        for _ in range(self.total_iterations):
            radii.append(int(np.floor(size_f)))
            size_f *= self.step_size
        return radii


def check_matching_shapes(image_a: np.ndarray, image_b: np.ndarray) -> None:
    """Raise MismatchedArrayShapesError unless both arrays share one shape."""
    if image_a.shape != image_b.shape:
        raise MismatchedArrayShapesError(image_a.shape, image_b.shape)


def check_radius(radius: int, param_name: str = "radius") -> int:
    """Validate a kernel radius and return it as int."""
    if int(radius) != radius or radius < 1:
        raise InvalidParameterError(param_name, radius, "can not be less than 1")
    return int(radius)
