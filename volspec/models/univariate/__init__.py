'''
volspec - Univariate Volatility Models

The volatility specification engine and the model families built on it:

- GARCH (Generalized Autoregressive Conditional Heteroskedasticity)
- AGARCH (Asymmetric GARCH with shifted, skewed absolute shocks)
- EGARCH (Exponential GARCH)

Families are selected by a ``VolatilityFamily`` tag; the engine dispatches
through a registry of family definitions, so every operation has one entry
point for all families.
'''

import logging

# Set up module-level logger
logger = logging.getLogger("volspec.models.univariate")

from .engine import (
    HistoryBuffers,
    VolatilitySpec,
    coefficient_names,
    constraints,
    filter_variance,
    loglikelihood,
    nparams,
    starting_values,
    subset_mask,
    subset_orders,
    unconditional_variance,
    update,
)
from .family import FamilyDefinition, get_family_definition, register_family
from .base import VolatilityFitResult, VolatilityModel
from .selection import criteria_table, select_model
from .utils import compute_half_life, expected_shock_response, shock_response

__all__ = [
    # Engine
    'VolatilitySpec',
    'HistoryBuffers',
    'nparams',
    'coefficient_names',
    'constraints',
    'subset_mask',
    'subset_orders',
    'starting_values',
    'unconditional_variance',
    'update',
    'filter_variance',
    'loglikelihood',

    # Family registry
    'FamilyDefinition',
    'get_family_definition',
    'register_family',

    # Models
    'VolatilityModel',
    'VolatilityFitResult',
    'select_model',
    'criteria_table',

    # Utilities
    'shock_response',
    'expected_shock_response',
    'compute_half_life',
]
