# volspec/__init__.py
"""
volspec - GARCH-family volatility specification engine

For each model family and order (p, q) volspec defines the number of
parameters and their names, the box constraints for constrained optimization,
starting values, subset masks for order selection, the long-run variance
implied by a parameter vector, and the Numba-compiled recursive update of the
conditional variance. On top of the engine, ``VolatilityModel`` filters,
estimates, simulates and forecasts.

Families:
- GARCH: additive, squared residuals
- AGARCH: additive, shifted and skewed absolute shocks
- EGARCH: exponential, log-variance recursion
"""

import logging

from .version import __version__, get_version_info

# Set up package-wide logger; handlers are attached by the config manager
logger = logging.getLogger("volspec")

from . import core
from . import models
from .core.config import get_config, initialize_config, reset_config, set_config
from .core.exceptions import (
    ConfigurationError, DataError, EstimationError, NonStationaryParameterError,
    NotFittedError, VolSpecError
)
from .core.types import VolatilityFamily
from .models.univariate import (
    VolatilityFitResult, VolatilityModel, VolatilitySpec, coefficient_names,
    constraints, loglikelihood, nparams, select_model, starting_values,
    subset_mask, subset_orders, unconditional_variance, update
)


def get_version() -> str:
    """Return the volspec version string."""
    return __version__


def set_log_level(level) -> None:
    """
    Set the logging level of the ``volspec`` logger.

    Args:
        level: Level name ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
    """
    set_config("logging", "log_level", level.upper() if isinstance(level, str) else logging.getLevelName(level))


initialize_config()

__all__ = [
    # Subpackages
    'core',
    'models',

    # Engine
    'VolatilityFamily',
    'VolatilitySpec',
    'nparams',
    'coefficient_names',
    'constraints',
    'subset_mask',
    'subset_orders',
    'starting_values',
    'unconditional_variance',
    'update',
    'loglikelihood',

    # Models
    'VolatilityModel',
    'VolatilityFitResult',
    'select_model',

    # Errors
    'VolSpecError',
    'ConfigurationError',
    'NonStationaryParameterError',
    'DataError',
    'EstimationError',
    'NotFittedError',

    # Configuration
    'get_config',
    'set_config',
    'reset_config',
    'initialize_config',

    # Version
    '__version__',
    'get_version',
    'get_version_info',
    'set_log_level',
]
