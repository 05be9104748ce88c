# volspec/models/univariate/engine.py
"""
The volatility specification engine.

For each family and order (p, q) this module answers: how many parameters
exist and what they are called, which box the optimizer searches, where the
optimizer starts, how a reduced order maps onto a mask over the full vector
and back, what long-run variance a parameter vector implies, and how one
conditional variance follows from the history. All functions dispatch on the
``VolatilityFamily`` tag through the family registry.

Validation happens here, once per call, so that the compiled kernels can
trust their inputs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np

from volspec.core.config import get_numerical_config, get_starting_values_config
from volspec.core.exceptions import (
    NonStationaryParameterError, raise_configuration_error, raise_non_stationary
)
from volspec.core.parameters import ParameterLayout, VolatilityParameters
from volspec.core.types import (
    BoolMask, BoundsPair, GARCHOrder, ParameterVector, TimeSeriesData, VolatilityFamily
)
from volspec.core.validation import (
    validate_bounds, validate_mask, validate_order, validate_positive_int, validate_sub_order,
    validate_time_series, validate_vector
)
from volspec.models.distributions.normal import StandardNormal
from volspec.models.univariate.family import (
    FamilyDefinition, build_layout, get_family_definition
)
# Family modules register themselves on import
from volspec.models.univariate import agarch, egarch, garch  # noqa: F401

logger = logging.getLogger("volspec.models.univariate.engine")

FamilyLike = Union[VolatilityFamily, str]

_NORMAL = StandardNormal()


@dataclass(frozen=True)
class VolatilitySpec:
    """Model family descriptor: a family tag and its order.

    Attributes:
        family: The recursion family
        p: Number of lagged variance terms
        q: Number of lagged shock terms
    """
    family: VolatilityFamily
    p: int = 1
    q: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "family", VolatilityFamily.coerce(self.family))
        p, q = validate_order(self.p, self.q)
        object.__setattr__(self, "p", p)
        object.__setattr__(self, "q", q)

    def __str__(self) -> str:
        return f"{self.family.value}({self.p},{self.q})"

    @property
    def layout(self) -> ParameterLayout:
        return build_layout(self.family, self.p, self.q)

    @property
    def definition(self) -> FamilyDefinition:
        return get_family_definition(self.family)

    @property
    def nparams(self) -> int:
        return self.layout.size

    @property
    def presample(self) -> int:
        """Length of the presample prefix, ``max(p, q)``."""
        return max(self.p, self.q)

    def coefficient_names(self):
        return self.layout.coefficient_names()

    def parameters(self, coefs: Any) -> VolatilityParameters:
        """Wrap a flat vector in a validated parameter view.

        Raises:
            ConfigurationError: If the vector length does not match the layout
        """
        if isinstance(coefs, VolatilityParameters) and coefs.layout == self.layout:
            return coefs
        if isinstance(coefs, VolatilityParameters):
            coefs = coefs.values
        validate_vector(coefs, self.nparams, model_type=str(self))
        return VolatilityParameters(self.layout, coefs, model_type=str(self))


def _spec(family: FamilyLike, p: int, q: int) -> VolatilitySpec:
    return VolatilitySpec(family, p, q)


# Parameter layout

def nparams(family: FamilyLike, p: int, q: int,
            subset_mask: Optional[BoolMask] = None) -> int:
    """Number of parameters of a family and order.

    Args:
        family: The recursion family
        p: Number of variance lags
        q: Number of shock lags
        subset_mask: Optional mask over the full vector. When given, the
            result counts the true non-intercept entries plus one for the
            always-present intercept

    Returns:
        int: The parameter count

    Raises:
        ConfigurationError: If the order is negative or the mask has the
            wrong length
    """
    spec = _spec(family, p, q)
    if subset_mask is None:
        return spec.nparams
    mask = np.asarray(subset_mask, dtype=bool)
    if mask.ndim != 1 or mask.shape[0] != spec.nparams:
        raise_configuration_error(
            f"Subset mask has shape {mask.shape}, expected ({spec.nparams},)",
            setting="subset_mask",
            value=mask.shape,
            expected=spec.nparams,
            issue="Length mismatch",
        )
    return int(np.count_nonzero(mask[1:])) + 1


def coefficient_names(family: FamilyLike, p: int, q: int) -> list:
    """Names of the coefficients in vector order, e.g. ``["ω", "β₁", "α₁"]``."""
    return _spec(family, p, q).coefficient_names()


# Constraint provider

def constraints(family: FamilyLike, p: int, q: int,
                dtype: Any = np.float64) -> BoundsPair:
    """Box constraints over the full parameter vector.

    Args:
        family: The recursion family
        p: Number of variance lags
        q: Number of shock lags
        dtype: Floating-point type of the returned arrays

    Returns:
        BoundsPair: Fresh ``(lower, upper)`` arrays with ``lower <= upper``
    """
    spec = _spec(family, p, q)
    lower, upper = validate_bounds(*spec.definition.bounds(spec.layout, get_numerical_config()))
    return lower.astype(dtype), upper.astype(dtype)


# Subset mask engine

def subset_mask(family: FamilyLike, p_max: int, q_max: int,
                orders: Union[GARCHOrder, Sequence[int]]) -> BoolMask:
    """Mask selecting the lowest ``p_sub`` variance lags and ``q_sub`` shock lags.

    The intercept is always included. Every segment tied to the shock lags
    (shift, skew, asymmetry) follows the shock coefficients lag-by-lag. A
    1-tuple ``(q_sub,)`` means ``(0, q_sub)``.

    Raises:
        ConfigurationError: If the reduced order exceeds ``(p_max, q_max)``
    """
    spec = _spec(family, p_max, q_max)
    p_sub, q_sub = validate_sub_order(orders, spec.p, spec.q)
    mask = np.zeros(spec.nparams, dtype=bool)
    for segment in spec.layout:
        if segment.lag is None:
            mask[segment.start] = True
        else:
            keep = p_sub if segment.lag == "p" else q_sub
            mask[segment.start:segment.start + keep] = True
    return mask


def subset_orders(family: FamilyLike, p_max: int, q_max: int,
                  mask: BoolMask) -> GARCHOrder:
    """Recover ``(p_sub, q_sub)`` from a mask built by ``subset_mask``.

    Raises:
        ConfigurationError: If the mask has the wrong length, excludes the
            intercept, selects non-contiguous lags, or masks a shock-tied
            segment differently from the shock coefficients
    """
    spec = _spec(family, p_max, q_max)
    mask = validate_mask(mask, spec.nparams)

    counts = {}
    for segment in spec.layout:
        if segment.lag is None:
            continue
        selected = mask[segment.slice]
        count = int(np.count_nonzero(selected))
        if not selected[:count].all():
            raise_configuration_error(
                f"Subset mask selects non-contiguous lags in segment {segment.name}",
                setting="subset_mask",
                value=selected,
                expected="the lowest-indexed lags",
                issue="Non-contiguous lags",
            )
        counts[segment.name] = count

    p_sub = counts["beta"]
    q_sub = counts["alpha"]
    for segment in spec.layout.aux_segments():
        if counts[segment.name] != q_sub:
            raise_configuration_error(
                f"Segment {segment.name} selects {counts[segment.name]} lags "
                f"but the shock coefficients select {q_sub}",
                setting="subset_mask",
                value=counts[segment.name],
                expected=q_sub,
                issue="Auxiliary segment out of lock-step",
            )
    return p_sub, q_sub


# Starting-value heuristic

def starting_values(family: FamilyLike, p: int, q: int, data: TimeSeriesData,
                    orders: Optional[Union[GARCHOrder, Sequence[int]]] = None) -> ParameterVector:
    """Feasible, non-degenerate starting vector for the optimizer.

    Args:
        family: The recursion family
        p: Number of variance lags
        q: Number of shock lags
        data: Residuals used to scale the intercept
        orders: Optional reduced order. The heuristic is computed for the
            reduced order and scattered into a zero vector of full length

    Returns:
        ParameterVector: A vector inside the bounds of ``constraints``
    """
    spec = _spec(family, p, q)
    data = validate_time_series(data, data_name="data")

    if orders is not None:
        mask = subset_mask(spec.family, spec.p, spec.q, orders)
        p_sub, q_sub = subset_orders(spec.family, spec.p, spec.q, mask)
        values = np.zeros(spec.nparams)
        values[mask] = starting_values(spec.family, p_sub, q_sub, data)
        return values

    lower, upper = constraints(spec.family, spec.p, spec.q)
    scale = float(np.mean(np.abs(data)))
    values = spec.definition.starting_values(spec.layout, scale, get_starting_values_config(), lower)
    values = np.clip(values, lower, upper)
    logger.debug(f"Starting values for {spec}: {np.array2string(values, precision=6)}")
    return values


# Unconditional variance solver

def _unconditional_variance(spec: VolatilitySpec, params: VolatilityParameters) -> float:
    definition = spec.definition
    denominator = 1.0 - definition.persistence(params)
    if not np.isfinite(denominator) or denominator <= 0.0:
        raise_non_stationary(str(spec), denominator, params.values)
    value = definition.long_run(params.omega, denominator)
    if not np.isfinite(value) or value <= 0.0:
        raise_non_stationary(str(spec), denominator, params.values)
    return float(value)


def unconditional_variance(family: FamilyLike, p: int, q: int, coefs: Any) -> float:
    """Long-run variance implied by a parameter vector under standard normal shocks.

    Returns:
        float: The fixed point of the recursion

    Raises:
        ConfigurationError: If the vector length does not match the layout
        NonStationaryParameterError: If the stationarity denominator is not
            strictly positive, or the implied variance is not finite and
            positive
    """
    spec = _spec(family, p, q)
    return _unconditional_variance(spec, spec.parameters(coefs))


# Recursive update kernel

class HistoryBuffers:
    """Aligned, growable, append-only history of one recursion run.

    Holds conditional variances, their logs, standardized residuals and raw
    residuals. A new variance is appended with its shock unobserved; the
    shock can be recorded once with ``observe``. Buffers belong to a single
    likelihood evaluation or simulation and are never shared.
    """

    def __init__(self, capacity: int = 64) -> None:
        capacity = max(int(capacity), 1)
        self._h = np.empty(capacity)
        self._lh = np.empty(capacity)
        self._z = np.empty(capacity)
        self._a = np.empty(capacity)
        self._n = 0

    @classmethod
    def from_arrays(cls, variance: np.ndarray, log_variance: np.ndarray,
                    std_resid: np.ndarray, resid: np.ndarray) -> "HistoryBuffers":
        """Build buffers from the arrays of a completed recursion run."""
        n = variance.shape[0]
        buffers = cls(capacity=n + 16)
        buffers._h[:n] = variance
        buffers._lh[:n] = log_variance
        buffers._z[:n] = std_resid
        buffers._a[:n] = resid
        buffers._n = n
        return buffers

    def __len__(self) -> int:
        return self._n

    def __repr__(self) -> str:
        return f"HistoryBuffers(length={self._n})"

    @property
    def variance(self) -> np.ndarray:
        return self._h[:self._n]

    @property
    def log_variance(self) -> np.ndarray:
        return self._lh[:self._n]

    @property
    def std_resid(self) -> np.ndarray:
        return self._z[:self._n]

    @property
    def resid(self) -> np.ndarray:
        return self._a[:self._n]

    def _reserve(self, size: int) -> None:
        capacity = self._h.shape[0]
        if size <= capacity:
            return
        capacity = max(size, 2 * capacity)
        for name in ("_h", "_lh", "_z", "_a"):
            old = getattr(self, name)
            new = np.empty(capacity)
            new[:self._n] = old[:self._n]
            setattr(self, name, new)

    def append(self, variance: float, resid: Optional[float] = None) -> None:
        """Append a variance set from outside the recursion, e.g. a presample value.

        Raises:
            ConfigurationError: If the variance is not finite and positive
        """
        if not np.isfinite(variance) or variance <= 0.0:
            raise_configuration_error(
                f"History variance must be finite and positive, got {variance}",
                setting="variance",
                value=variance,
                issue="Invalid variance",
            )
        self._reserve(self._n + 1)
        t = self._n
        self._h[t] = variance
        self._lh[t] = np.log(variance)
        self._a[t] = np.nan
        self._z[t] = np.nan
        self._n += 1
        if resid is not None:
            self.observe(resid)

    def observe(self, resid: float) -> float:
        """Record the shock drawn under the most recent variance.

        Returns:
            float: The standardized residual

        Raises:
            ConfigurationError: If the buffers are empty or the most recent
                shock was already recorded
        """
        if self._n == 0:
            raise_configuration_error(
                "Cannot record a shock before any variance",
                setting="history",
                issue="Empty history",
            )
        t = self._n - 1
        if not np.isnan(self._a[t]):
            raise_configuration_error(
                f"Shock at position {t} has already been recorded",
                setting="history",
                value=t,
                issue="History is append-only",
            )
        self._a[t] = resid
        self._z[t] = resid / np.sqrt(self._h[t])
        return float(self._z[t])

    def advance(self, kernel, coefs: np.ndarray, p: int, q: int, horizon: int) -> float:
        """Run one compiled update at the next position and return its variance."""
        t = self._n
        self._reserve(t + 1)
        kernel(self._h, self._lh, self._z, self._a, t, coefs, p, q, horizon)
        self._a[t] = np.nan
        self._z[t] = np.nan
        self._n += 1
        return float(self._h[t])


def update(spec: VolatilitySpec, buffers: HistoryBuffers, coefs: Any,
           horizon: int = 1) -> float:
    """Append the next conditional variance to ``buffers``.

    Args:
        spec: Family and order
        buffers: History holding at least ``max(p, q)`` entries
        coefs: Flat parameter vector or ``VolatilityParameters``
        horizon: Forecast horizon; at horizon ``k`` the ``k - 1`` most recent
            shocks are treated as unobserved and replaced by their expectation

    Returns:
        float: The new conditional variance

    Raises:
        ConfigurationError: If the vector length is wrong, the horizon is not
            positive, the history is shorter than the presample, or a shock
            the kernel reads at this horizon was never observed
    """
    params = spec.parameters(coefs)
    horizon = validate_positive_int(horizon, "horizon")
    if len(buffers) < spec.presample:
        raise_configuration_error(
            f"History of length {len(buffers)} is shorter than the presample "
            f"({spec.presample}) of {spec}",
            setting="history",
            value=len(buffers),
            expected=spec.presample,
            issue="Insufficient history",
        )
    t = len(buffers)
    for i in range(horizon - 1, spec.q):
        if np.isnan(buffers.resid[t - 1 - i]):
            raise_configuration_error(
                f"Unobserved shock at lag {i + 1} of {spec} (position {t - 1 - i}) "
                f"at horizon {horizon}",
                setting="history",
                value=t - 1 - i,
                expected="an observed residual, or a horizon above the lag",
                issue="Unobserved shock",
            )
    return buffers.advance(spec.definition.update, params.values, spec.p, spec.q, horizon)


def filter_variance(spec: VolatilitySpec, coefs: Any, resids: TimeSeriesData,
                    h0: Optional[float] = None) -> HistoryBuffers:
    """Run the full-sample recursion and return its history.

    Args:
        spec: Family and order
        coefs: Flat parameter vector or ``VolatilityParameters``
        resids: Raw residuals
        h0: Presample variance; defaults to the unconditional variance

    Raises:
        NonStationaryParameterError: If ``h0`` is not given and the
            parameters have no finite unconditional variance
    """
    params = spec.parameters(coefs)
    resids = validate_time_series(resids, data_name="resids")
    if h0 is None:
        h0 = _unconditional_variance(spec, params)
    return _run_recursion(spec, params, resids, h0)


def _run_recursion(spec: VolatilitySpec, params: VolatilityParameters,
                   resids: np.ndarray, h0: float) -> HistoryBuffers:
    T = resids.shape[0]
    ht = np.empty(T)
    lht = np.empty(T)
    zt = np.empty(T)
    spec.definition.recursion(resids, params.values, spec.p, spec.q, h0, ht, lht, zt)
    return HistoryBuffers.from_arrays(ht, lht, zt, resids)


def _loglikelihood(spec: VolatilitySpec, params: VolatilityParameters,
                   resids: np.ndarray) -> float:
    try:
        h0 = _unconditional_variance(spec, params)
    except NonStationaryParameterError:
        return -np.inf
    history = _run_recursion(spec, params, resids, h0)
    ll = _NORMAL.loglikelihood(history.std_resid, log_variance=history.log_variance)
    if not np.isfinite(ll):
        return -np.inf
    return ll


def loglikelihood(spec: VolatilitySpec, coefs: Any, resids: TimeSeriesData) -> float:
    """Gaussian log-likelihood of ``resids`` under the recursion.

    The presample is seeded with the unconditional variance. Candidates
    without a finite unconditional variance, and candidates whose recursion
    produces a non-finite likelihood, are rejected with ``-inf``.

    Raises:
        ConfigurationError: If the vector length does not match the layout
        DataError: If the residuals are not a finite 1-D series
    """
    params = spec.parameters(coefs)
    resids = validate_time_series(resids, data_name="resids")
    return _loglikelihood(spec, params, resids)
