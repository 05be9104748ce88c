"""
volspec models

- univariate: the volatility specification engine, the GARCH, AGARCH and
  EGARCH families, and the ``VolatilityModel`` estimation front end
- distributions: the standard normal innovation distribution
"""

import logging

logger = logging.getLogger("volspec.models")

from . import distributions
from . import univariate

__all__ = ['distributions', 'univariate']
