# volspec/models/distributions/normal.py
"""
Standard normal innovation distribution for volspec.

The volatility recursions standardize each residual by its conditional
standard deviation and evaluate the likelihood of the standardized shocks
under a standard normal density. The Numba-accelerated log-likelihood works
on the log-variance sequence the recursions already produce, so no extra
logarithms are taken in the optimizer's inner loop.
"""

import math
from typing import Any, Optional, Tuple, Union

import numpy as np
from scipy import stats
from numba import jit

from volspec.core.exceptions import DataError

LOG_2PI = math.log(2.0 * math.pi)


@jit(nopython=True, cache=True)
def _normal_loglikelihood(z: np.ndarray, log_variance: np.ndarray) -> float:
    """Numba-accelerated Gaussian log-likelihood of residuals ``z * sqrt(h)``.

    Args:
        z: Standardized residuals
        log_variance: Natural log of the conditional variances

    Returns:
        float: Log-likelihood value
    """
    ll = 0.0
    for t in range(z.shape[0]):
        ll += LOG_2PI + log_variance[t] + z[t] * z[t]
    return -0.5 * ll


class StandardNormal:
    """Standard normal distribution of standardized residuals.

    Attributes:
        name: A descriptive name for the distribution
    """

    name = "Normal"

    def __repr__(self) -> str:
        return "StandardNormal()"

    @staticmethod
    def standardize(resid: np.ndarray, variance: np.ndarray) -> np.ndarray:
        """Return ``resid / sqrt(variance)``.

        Raises:
            DataError: If the arrays differ in shape
        """
        resid = np.asarray(resid, dtype=np.float64)
        variance = np.asarray(variance, dtype=np.float64)
        if resid.shape != variance.shape:
            raise DataError(
                "Residuals and variances must have the same shape",
                data_name="variance",
                issue=f"shape {variance.shape} != {resid.shape}",
            )
        return resid / np.sqrt(variance)

    def loglikelihood(self,
                      z: np.ndarray,
                      variance: Optional[np.ndarray] = None,
                      log_variance: Optional[np.ndarray] = None) -> float:
        """Log-likelihood of the raw residuals ``z * sqrt(variance)``.

        Args:
            z: Standardized residuals
            variance: Conditional variances
            log_variance: Natural log of the conditional variances; used
                instead of ``variance`` when given

        Returns:
            float: The summed log-density. Without a variance, z is treated
            as unit-variance
        """
        z = np.ascontiguousarray(z, dtype=np.float64)
        if log_variance is None:
            if variance is None:
                log_variance = np.zeros_like(z)
            else:
                log_variance = np.log(np.asarray(variance, dtype=np.float64))
        log_variance = np.ascontiguousarray(log_variance, dtype=np.float64)
        if log_variance.shape != z.shape:
            raise DataError(
                "Standardized residuals and variances must have the same shape",
                data_name="variance",
                issue=f"shape {log_variance.shape} != {z.shape}",
            )
        return float(_normal_loglikelihood(z, log_variance))

    def pdf(self, x: np.ndarray, **kwargs: Any) -> np.ndarray:
        return stats.norm.pdf(x)

    def cdf(self, x: np.ndarray, **kwargs: Any) -> np.ndarray:
        return stats.norm.cdf(x)

    def ppf(self, q: np.ndarray, **kwargs: Any) -> np.ndarray:
        return stats.norm.ppf(q)

    def rvs(self,
            size: Union[int, Tuple[int, ...]],
            random_state: Optional[Union[int, np.random.Generator]] = None) -> np.ndarray:
        """Generate standard normal variates.

        Args:
            size: Number (or shape) of variates to generate
            random_state: Random number generator or seed

        Returns:
            np.ndarray: Random variates
        """
        if isinstance(random_state, np.random.Generator):
            rng = random_state
        else:
            rng = np.random.default_rng(random_state)
        return rng.standard_normal(size=size)
