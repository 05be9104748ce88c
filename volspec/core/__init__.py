"""
volspec core module

Foundation shared by every model family: the exception hierarchy,
configuration management, type definitions, input validation and the
parameter layout that maps a flat parameter vector onto named segments.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("volspec.core")

from .config import (
    ConfigManager,
    get_config,
    initialize_config,
    reset_config,
    save_config,
    set_config,
)

from .exceptions import (
    ConfigurationError,
    ConvergenceWarning,
    DataError,
    EstimationError,
    NonStationaryParameterError,
    NotFittedError,
    NumericWarning,
    VolSpecError,
    VolSpecWarning,
)

from .parameters import (
    ParameterError,
    ParameterLayout,
    Segment,
    VolatilityParameters,
)

from .types import (
    BoolMask,
    BoundsPair,
    GARCHOrder,
    ParameterVector,
    TimeSeriesData,
    VolatilityFamily,
)

from .validation import (
    validate_mask,
    validate_order,
    validate_sub_order,
    validate_time_series,
    validate_vector,
)

__all__ = [
    # Configuration
    'ConfigManager',
    'get_config',
    'set_config',
    'reset_config',
    'save_config',
    'initialize_config',

    # Exceptions
    'VolSpecError',
    'ConfigurationError',
    'NonStationaryParameterError',
    'DataError',
    'EstimationError',
    'NotFittedError',
    'VolSpecWarning',
    'ConvergenceWarning',
    'NumericWarning',

    # Parameters
    'ParameterError',
    'ParameterLayout',
    'Segment',
    'VolatilityParameters',

    # Types
    'VolatilityFamily',
    'BoolMask',
    'BoundsPair',
    'GARCHOrder',
    'ParameterVector',
    'TimeSeriesData',

    # Validation
    'validate_order',
    'validate_sub_order',
    'validate_vector',
    'validate_mask',
    'validate_time_series',
]

logger.debug("volspec core module initialized")
