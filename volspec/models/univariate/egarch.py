# volspec/models/univariate/egarch.py

"""
Exponential GARCH (EGARCH) family.

The EGARCH(p,q) recursion runs in log-variance space:

    ln σ²_t = ω + Σ β_i ln σ²_{t-i} + Σ [α_i (|z_{t-i}| - √(2/π)) + γ_i z_{t-i}]

Parameter layout: ``ω; β₁..β_p; α₁..α_q; γ₁..γ_q``. Positivity of the variance
is guaranteed by the exponential, so the intercept is unbounded. The shock
term has zero mean under a standard normal shock, so the unconditional
(log-space) fixed point is ``exp(ω / (1 - Σβ))``.

References:
    Nelson, D.B. (1991). Conditional Heteroskedasticity in Asset Returns: A New
    Approach. Econometrica, 59(2), 347-370.
"""

import numpy as np

from volspec.core.config import NumericalConfig, StartingValuesConfig
from volspec.core.parameters import ParameterLayout, VolatilityParameters
from volspec.core.types import BoundsPair, VolatilityFamily
from volspec.models.univariate._core import egarch_recursion, egarch_update
from volspec.models.univariate.family import FamilyDefinition, register_family, seed_vector

_MIN_SCALE = 1e-12


def egarch_bounds(layout: ParameterLayout, config: NumericalConfig) -> BoundsPair:
    """ω unbounded; β in [ε-1, 1-ε]; α in [0, 1]; γ in [-asymmetry_bound, asymmetry_bound]."""
    eps = config.bound_epsilon
    lower = np.zeros(layout.size)
    upper = np.ones(layout.size)
    lower[0] = -np.inf
    upper[0] = np.inf
    lower[layout["beta"].slice] = eps - 1.0
    upper[layout["beta"].slice] = 1.0 - eps
    lower[layout["gamma"].slice] = -config.asymmetry_bound
    upper[layout["gamma"].slice] = config.asymmetry_bound
    return lower, upper


def egarch_starting_values(layout: ParameterLayout,
                           scale: float,
                           config: StartingValuesConfig,
                           lower: np.ndarray) -> np.ndarray:
    values = seed_vector(layout, config)
    persistence = values[layout["beta"].start] if layout["beta"].length else 0.0
    values[0] = max(np.log(max(scale, _MIN_SCALE)) * (1.0 - persistence), lower[0])
    return values


def egarch_persistence(params: VolatilityParameters) -> float:
    return float(np.sum(params.beta))


def egarch_long_run(omega: float, denominator: float) -> float:
    with np.errstate(over="ignore"):
        return float(np.exp(omega / denominator))


EGARCH_DEFINITION = register_family(FamilyDefinition(
    family=VolatilityFamily.EGARCH,
    aux=(("gamma", "γ"),),
    update=egarch_update,
    recursion=egarch_recursion,
    bounds=egarch_bounds,
    starting_values=egarch_starting_values,
    persistence=egarch_persistence,
    long_run=egarch_long_run,
))
