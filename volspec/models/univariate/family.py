# volspec/models/univariate/family.py
"""
Family definitions and the family registry.

Each volatility family is described by one immutable ``FamilyDefinition``
record bundling its parameter layout, compiled kernels, bounds, starting-value
heuristic and stationarity algebra. The public engine functions look the
record up by ``VolatilityFamily`` tag and never branch on the family
themselves.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, Tuple

import numpy as np

from volspec.core.config import NumericalConfig, StartingValuesConfig
from volspec.core.exceptions import ConfigurationError
from volspec.core.parameters import ParameterLayout, VolatilityParameters
from volspec.core.types import BoundsPair, VolatilityFamily

logger = logging.getLogger("volspec.models.univariate.family")


@dataclass(frozen=True)
class FamilyDefinition:
    """Everything the engine needs to know about one family.

    Attributes:
        family: The family tag
        aux: ``(name, symbol)`` pairs of q-length segments after the shock
            coefficients
        update: Compiled one-step kernel
            ``update(ht, lht, zt, at, t, coefs, p, q, horizon)``
        recursion: Compiled full-sample driver
            ``recursion(resids, coefs, p, q, h0, ht, lht, zt)``
        bounds: ``bounds(layout, numerical_config) -> (lower, upper)``
        starting_values: ``starting_values(layout, scale, sv_config, lower)``
            where ``scale`` is the sample mean absolute residual
        persistence: Implied persistence ``P`` of a parameter vector; the
            stationarity denominator is ``1 - P``
        long_run: Maps ``(intercept, 1 - P)`` to the unconditional variance
    """
    family: VolatilityFamily
    aux: Tuple[Tuple[str, str], ...]
    update: Callable
    recursion: Callable
    bounds: Callable[[ParameterLayout, NumericalConfig], BoundsPair]
    starting_values: Callable[[ParameterLayout, float, StartingValuesConfig, np.ndarray], np.ndarray]
    persistence: Callable[[VolatilityParameters], float]
    long_run: Callable[[float, float], float]


_REGISTRY: Dict[VolatilityFamily, FamilyDefinition] = {}


def register_family(definition: FamilyDefinition) -> FamilyDefinition:
    """Add a family definition to the registry."""
    _REGISTRY[definition.family] = definition
    logger.debug(f"Registered volatility family {definition.family.value}")
    return definition


def get_family_definition(family) -> FamilyDefinition:
    """Return the definition registered for ``family``.

    Raises:
        ConfigurationError: If the family is unknown or has no definition
    """
    family = VolatilityFamily.coerce(family)
    try:
        return _REGISTRY[family]
    except KeyError:
        raise ConfigurationError(
            f"No definition registered for volatility family {family.value}",
            setting="family",
            value=family.value,
            issue="Family not registered",
        ) from None


@lru_cache(maxsize=256)
def build_layout(family: VolatilityFamily, p: int, q: int) -> ParameterLayout:
    """Build (and cache) the parameter layout of a family and order."""
    definition = get_family_definition(family)
    return ParameterLayout.build(p, q, aux=definition.aux)


def seed_vector(layout: ParameterLayout, config: StartingValuesConfig) -> np.ndarray:
    """Return the common part of every starting vector.

    Every non-intercept slot holds ``config.fill``; the first variance-lag
    slot holds ``config.persistence`` and the first shock-lag slot holds
    ``config.response``. The intercept is left at zero for the family to set.
    """
    values = np.full(layout.size, config.fill, dtype=np.float64)
    values[0] = 0.0
    beta = layout["beta"]
    alpha = layout["alpha"]
    if beta.length:
        values[beta.start] = config.persistence
    if alpha.length:
        values[alpha.start] = config.response
    return values
