# volspec/models/univariate/utils.py
"""
Utility functions for univariate volatility models.

Persistence and half-life of a fitted recursion, and a numerical cross-check
of the expected shock response that enters the unconditional variance. The
closed forms used by the solver are family-specific; ``expected_shock_response``
integrates each family's shock kernel against the standard normal density so
that the closed forms can be verified (or replaced for new families).
"""

import logging
from typing import Any

import numpy as np
from scipy import integrate, stats

from volspec.core.types import VolatilityFamily
from volspec.models.univariate._core import SQRT2_OV_PI

logger = logging.getLogger("volspec.models.univariate.utils")


def shock_response(family: Any, z: np.ndarray, shift: float = 0.0, skew: float = 0.0,
                   alpha: float = 1.0, gamma: float = 0.0) -> np.ndarray:
    """Evaluate one lag's shock kernel at standardized residuals ``z``.

    For additive families the kernel multiplies the lagged variance: ``z²``
    for GARCH and ``|z - λ| - ρ (z - λ)`` for AGARCH. For EGARCH it is the
    log-space term ``α (|z| - √(2/π)) + γ z``.

    Args:
        family: The recursion family
        z: Standardized residuals
        shift: AGARCH shift λ
        skew: AGARCH skew ρ
        alpha: EGARCH magnitude coefficient
        gamma: EGARCH asymmetry coefficient
    """
    family = VolatilityFamily.coerce(family)
    z = np.asarray(z, dtype=np.float64)
    if family is VolatilityFamily.GARCH:
        return z ** 2
    if family is VolatilityFamily.AGARCH:
        dev = z - shift
        return np.abs(dev) - skew * dev
    return alpha * (np.abs(z) - SQRT2_OV_PI) + gamma * z


def expected_shock_response(family: Any, shift: float = 0.0, skew: float = 0.0,
                            alpha: float = 1.0, gamma: float = 0.0) -> float:
    """Expectation of ``shock_response`` under a standard normal shock, by quadrature.

    The integral is split at the kernel's kink so that ``quad`` sees two
    smooth pieces.

    Returns:
        float: E[g(z)] for z ~ N(0, 1)
    """
    family = VolatilityFamily.coerce(family)
    kink = shift if family is VolatilityFamily.AGARCH else 0.0

    def integrand(x: float) -> float:
        return float(shock_response(family, x, shift, skew, alpha, gamma)) * stats.norm.pdf(x)

    left, _ = integrate.quad(integrand, -np.inf, kink)
    right, _ = integrate.quad(integrand, kink, np.inf)
    return left + right


def compute_half_life(persistence: float) -> float:
    """
    Compute the half-life of volatility shocks.

    Args:
        persistence: Persistence of the volatility model

    Returns:
        float: Half-life in time periods; infinite for persistence close to 1

    Raises:
        ValueError: If persistence is not in [0, 1)

    Examples:
        >>> from volspec.models.univariate.utils import compute_half_life
        >>> round(compute_half_life(0.95), 2)
        13.51
    """
    if not 0 <= persistence < 1:
        raise ValueError(f"Persistence must be between 0 and 1, got {persistence}")

    if persistence > 0.9999:
        return float('inf')
    if persistence == 0:
        return 0.0

    return float(np.log(0.5) / np.log(persistence))
