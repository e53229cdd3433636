"""Tolerances, iteration caps and seeding knobs for the MAT solvers."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Optional

# Sine of a quarter degree.
CROSS_TANGENT_LIMIT = 0.0050


@dataclass
class MatOptions:
    """Configuration shared by the prong solvers and the MAT driver."""

    # 2-prong solver
    max_2prong_iterations: int = 50
    separation_tolerance: float = 1e-3
    one_prong_tolerance: float = 1e-4
    error_tolerance: Optional[float] = None
    cull_threshold: int = 5
    cull_margin: float = 0.1
    enforce_monotonic_convergence: bool = False

    # 3-prong solver
    max_3prong_iterations: int = 10
    three_prong_tolerance: float = 1e-7
    max_backtracks: int = 3

    # corner classification
    cross_tangent_limit: float = CROSS_TANGENT_LIMIT
    standard_fallback_t: float = 0.9

    # shape
    join_tolerance: float = 1e-6
    max_osculating_radius: Optional[float] = None

    # seeding
    seed_spacing: Optional[float] = None
    seed_density: float = 40.0
    min_seeds_per_curve: int = 1
    curvature_samples: int = 16
    smooth: bool = True

    @property
    def squared_separation_tolerance(self) -> float:
        return self.separation_tolerance * self.separation_tolerance

    @property
    def squared_one_prong_tolerance(self) -> float:
        return self.one_prong_tolerance * self.one_prong_tolerance

    @property
    def squared_error_tolerance(self) -> float:
        tol = self.error_tolerance
        if tol is None:
            tol = self.separation_tolerance / 10.0
        return tol * tol


_DEFAULT_OPTIONS = MatOptions()


def get_default_options() -> MatOptions:
    return copy.deepcopy(_DEFAULT_OPTIONS)


def set_default_options(options: MatOptions) -> None:
    global _DEFAULT_OPTIONS
    _DEFAULT_OPTIONS = copy.deepcopy(options)


def resolve_options(options: Optional[MatOptions]) -> MatOptions:
    return options if options is not None else get_default_options()


__all__ = [
    "CROSS_TANGENT_LIMIT",
    "MatOptions",
    "get_default_options",
    "resolve_options",
    "set_default_options",
]
