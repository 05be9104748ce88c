# volspec/models/univariate/garch.py

"""
Generalized Autoregressive Conditional Heteroskedasticity (GARCH) family.

The GARCH(p,q) recursion is

    σ²_t = ω + Σ_{i=1..p} β_i σ²_{t-i} + Σ_{i=1..q} α_i ε²_{t-i}

with parameter layout ``ω; β₁..β_p; α₁..α_q``. The expected shock response
is one for every lag, so the unconditional variance is
``ω / (1 - Σβ - Σα)``.

References:
    Bollerslev, T. (1986). Generalized Autoregressive Conditional
    Heteroskedasticity. Journal of Econometrics, 31(3), 307-327.
"""

import numpy as np

from volspec.core.config import NumericalConfig, StartingValuesConfig
from volspec.core.parameters import ParameterLayout, VolatilityParameters
from volspec.core.types import BoundsPair, VolatilityFamily
from volspec.models.univariate._core import garch_recursion, garch_update
from volspec.models.univariate.family import FamilyDefinition, register_family, seed_vector


def garch_bounds(layout: ParameterLayout, config: NumericalConfig) -> BoundsPair:
    """ω in [ε, ∞); every β and α in [0, 1]."""
    lower = np.zeros(layout.size)
    upper = np.ones(layout.size)
    lower[0] = config.bound_epsilon
    upper[0] = np.inf
    return lower, upper


def garch_starting_values(layout: ParameterLayout,
                          scale: float,
                          config: StartingValuesConfig,
                          lower: np.ndarray) -> np.ndarray:
    values = seed_vector(layout, config)
    persistence = 0.0
    if layout["beta"].length:
        persistence += values[layout["beta"].start]
    if layout["alpha"].length:
        persistence += values[layout["alpha"].start]
    values[0] = max(scale * (1.0 - persistence), lower[0])
    return values


def garch_persistence(params: VolatilityParameters) -> float:
    return float(np.sum(params.beta) + np.sum(params.alpha))


def garch_long_run(omega: float, denominator: float) -> float:
    return omega / denominator


GARCH_DEFINITION = register_family(FamilyDefinition(
    family=VolatilityFamily.GARCH,
    aux=(),
    update=garch_update,
    recursion=garch_recursion,
    bounds=garch_bounds,
    starting_values=garch_starting_values,
    persistence=garch_persistence,
    long_run=garch_long_run,
))
