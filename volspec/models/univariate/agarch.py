# volspec/models/univariate/agarch.py

"""
Asymmetric GARCH (AGARCH) family with per-lag shift and skew.

The AGARCH(p,q) recursion scales each lagged variance by a piecewise-linear
function of the signed distance between the standardized residual and a
per-lag shift λ_i, tilted by a skew ρ_i:

    σ²_t = ω + Σ β_i σ²_{t-i} + Σ α_i (|z_{t-i} - λ_i| - ρ_i (z_{t-i} - λ_i)) σ²_{t-i}

Parameter layout: ``ω; β₁..β_p; α₁..α_q; λ₁..λ_q; ρ₁..ρ_q``.

Under a standard normal shock the expected kernel has the closed form

    κ(λ, ρ) = λ erf(λ/√2) + √(2/π) exp(-λ²/2) + ρ λ

so the unconditional variance is ``ω / (1 - Σβ - Σ α_i κ_i)``. At zero shift
κ reduces to E|z| = √(2/π).

References:
    Hentschel, L. (1995). All in the family: Nesting symmetric and asymmetric
    GARCH models. Journal of Financial Economics, 39(1), 71-104.
"""

import numpy as np
from scipy import special

from volspec.core.config import NumericalConfig, StartingValuesConfig
from volspec.core.parameters import ParameterLayout, VolatilityParameters
from volspec.core.types import BoundsPair, VolatilityFamily
from volspec.models.univariate._core import (
    SQRT2_OV_PI, agarch_recursion, agarch_update
)
from volspec.models.univariate.family import FamilyDefinition, register_family, seed_vector


def agarch_expected_kernel(shift, skew) -> np.ndarray:
    """Vectorized E[|z - λ| - ρ (z - λ)] for z ~ N(0, 1)."""
    shift = np.asarray(shift, dtype=np.float64)
    skew = np.asarray(skew, dtype=np.float64)
    return (shift * special.erf(shift / np.sqrt(2.0))
            + SQRT2_OV_PI * np.exp(-0.5 * shift ** 2)
            + skew * shift)


def agarch_bounds(layout: ParameterLayout, config: NumericalConfig) -> BoundsPair:
    """ω in [ε, ∞); β, α in [0, 1]; λ in [-shift_bound, shift_bound]; ρ in [ε-1, 1-ε]."""
    eps = config.bound_epsilon
    lower = np.zeros(layout.size)
    upper = np.ones(layout.size)
    lower[0] = eps
    upper[0] = np.inf
    lower[layout["shift"].slice] = -config.shift_bound
    upper[layout["shift"].slice] = config.shift_bound
    lower[layout["skew"].slice] = eps - 1.0
    upper[layout["skew"].slice] = 1.0 - eps
    return lower, upper


def agarch_starting_values(layout: ParameterLayout,
                           scale: float,
                           config: StartingValuesConfig,
                           lower: np.ndarray) -> np.ndarray:
    values = seed_vector(layout, config)
    persistence = 0.0
    if layout["beta"].length:
        persistence += values[layout["beta"].start]
    if layout["alpha"].length:
        kappa = agarch_expected_kernel(values[layout["shift"].start], values[layout["skew"].start])
        persistence += values[layout["alpha"].start] * float(kappa)
    values[0] = max(scale * (1.0 - persistence), lower[0])
    return values


def agarch_persistence(params: VolatilityParameters) -> float:
    kappa = agarch_expected_kernel(params.shift, params.skew)
    return float(np.sum(params.beta) + np.sum(params.alpha * kappa))


def agarch_long_run(omega: float, denominator: float) -> float:
    return omega / denominator


AGARCH_DEFINITION = register_family(FamilyDefinition(
    family=VolatilityFamily.AGARCH,
    aux=(("shift", "λ"), ("skew", "ρ")),
    update=agarch_update,
    recursion=agarch_recursion,
    bounds=agarch_bounds,
    starting_values=agarch_starting_values,
    persistence=agarch_persistence,
    long_run=agarch_long_run,
))
