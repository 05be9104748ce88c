# volspec/core/types.py

"""
Core type annotations and custom types for volspec.

Type aliases for arrays, time series and order pairs, and the enumeration of
supported volatility families.
"""

from enum import Enum
from typing import Literal, Tuple, Union

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError

# Array type aliases
BoolMask = np.ndarray  # 1D boolean array over a full parameter vector
ParameterVector = np.ndarray  # Flat vector of model parameters
BoundsPair = Tuple[np.ndarray, np.ndarray]  # (lower, upper)

# Time series type aliases
TimeSeriesData = Union[np.ndarray, pd.Series]  # Single time series

# Model order types
GARCHOrder = Tuple[int, int]  # (p, q) for variance and shock lags

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
SelectionCriterion = Literal["aic", "bic", "loglikelihood"]


class VolatilityFamily(Enum):
    """Enumeration of volatility recursion families.

    GARCH and AGARCH are additive recursions in variance space; EGARCH
    accumulates in log-variance space.
    """
    GARCH = "GARCH"
    AGARCH = "AGARCH"
    EGARCH = "EGARCH"

    @classmethod
    def coerce(cls, value: Union["VolatilityFamily", str]) -> "VolatilityFamily":
        """Return the family named by ``value`` (case-insensitive for strings)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        raise ConfigurationError(
            f"Unknown volatility family: {value!r}",
            setting="family",
            value=value,
            expected=[f.value for f in cls],
            issue="Family not recognized",
        )

    @property
    def is_additive(self) -> bool:
        return self is not VolatilityFamily.EGARCH
