# volspec/models/univariate/base.py
"""
Univariate volatility models built on the specification engine.

``VolatilityModel`` binds a family and order to data: it filters conditional
variances, evaluates the likelihood, estimates parameters by bounded
maximum likelihood (optionally restricted to a subset of lags), simulates
and forecasts. The family-specific algebra lives in the engine and the family
modules; this class only orchestrates it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from scipy import optimize

from volspec.core.config import get_config, get_numerical_config
from volspec.core.exceptions import (
    EstimationError, raise_not_fitted_error, warn_convergence, warn_numeric
)
from volspec.core.parameters import VolatilityParameters
from volspec.core.types import GARCHOrder, TimeSeriesData, VolatilityFamily
from volspec.core.validation import validate_positive_int, validate_time_series, validate_vector
from volspec.models.distributions.normal import StandardNormal
from volspec.models.univariate.engine import (
    HistoryBuffers, VolatilitySpec, _loglikelihood, _unconditional_variance,
    constraints, filter_variance, nparams, subset_mask, subset_orders, update
)
from volspec.models.univariate.engine import starting_values as heuristic_starting_values
from volspec.models.univariate.utils import compute_half_life

logger = logging.getLogger("volspec.models.univariate.base")


@dataclass
class VolatilityFitResult:
    """Result container for volatility model estimation.

    Attributes:
        spec: Family and full order of the estimated model
        parameters: Estimated full-length parameter vector; masked-out
            coefficients are exactly zero
        coefficient_names: One name per element of ``parameters``
        loglikelihood: Log-likelihood value at the optimum
        aic: Akaike Information Criterion
        bic: Bayesian Information Criterion
        num_obs: Number of observations used in estimation
        mask: Subset mask of the free coefficients
        orders: Effective ``(p, q)`` recovered from the mask
        convergence: Whether the optimizer reported success
        iterations: Number of optimizer iterations
        conditional_variance: Filtered variances at the estimate
        optimization_result: Full scipy optimization result
    """

    spec: VolatilitySpec
    parameters: np.ndarray
    coefficient_names: List[str]
    loglikelihood: float
    aic: float
    bic: float
    num_obs: int
    mask: np.ndarray
    orders: GARCHOrder
    convergence: bool = True
    iterations: int = 0
    conditional_variance: Optional[np.ndarray] = field(default=None, repr=False)
    optimization_result: Optional[Any] = field(default=None, repr=False)

    @property
    def num_params(self) -> int:
        """Number of free coefficients."""
        return nparams(self.spec.family, self.spec.p, self.spec.q, self.mask)

    @property
    def persistence(self) -> float:
        params = self.spec.parameters(self.parameters)
        return self.spec.definition.persistence(params)

    def summary(self) -> str:
        """Generate a text summary of the estimation results.

        Returns:
            str: A formatted string containing the results summary.
        """
        p_sub, q_sub = self.orders
        title = f"Model: {self.spec.family.value}({p_sub},{q_sub})"
        if (p_sub, q_sub) != (self.spec.p, self.spec.q):
            title += f" within {self.spec}"
        header = title + "\n" + "=" * len(title) + "\n\n"

        header += "Distribution: Normal\n"
        header += f"Number of observations: {self.num_obs}\n"
        header += f"Convergence: {'Yes' if self.convergence else 'No'}\n"
        header += f"Iterations: {self.iterations}\n\n"

        param_table = "Parameter Estimates:\n"
        param_table += "-" * 40 + "\n"
        param_table += f"{'Parameter':<15} {'Estimate':>12} {'Free':>10}\n"
        param_table += "-" * 40 + "\n"
        for name, value, free in zip(self.coefficient_names, self.parameters, self.mask):
            param_table += f"{name:<15} {value:>12.6f} {'yes' if free else 'fixed':>10}\n"
        param_table += "-" * 40 + "\n\n"

        fit_stats = "Model Fit:\n"
        fit_stats += "-" * 30 + "\n"
        fit_stats += f"Log-likelihood: {self.loglikelihood:.6f}\n"
        fit_stats += f"AIC: {self.aic:.6f}\n"
        fit_stats += f"BIC: {self.bic:.6f}\n"
        persistence = self.persistence
        fit_stats += f"Persistence: {persistence:.6f}\n"
        if 0 <= persistence < 1:
            fit_stats += f"Half-life: {compute_half_life(persistence):.2f}\n"
        fit_stats += "-" * 30 + "\n"

        return header + param_table + fit_stats

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result object to a dictionary.

        Returns:
            Dict[str, Any]: Dictionary representation of the result object.
        """
        return {
            "model": str(self.spec),
            "orders": tuple(self.orders),
            "parameters": dict(zip(self.coefficient_names, self.parameters.tolist())),
            "mask": self.mask.tolist(),
            "loglikelihood": self.loglikelihood,
            "aic": self.aic,
            "bic": self.bic,
            "num_obs": self.num_obs,
            "num_params": self.num_params,
            "convergence": self.convergence,
            "iterations": self.iterations,
        }

    def to_frame(self) -> pd.DataFrame:
        """Parameter table with bounds, one row per coefficient."""
        lower, upper = constraints(self.spec.family, self.spec.p, self.spec.q)
        return pd.DataFrame(
            {
                "estimate": self.parameters,
                "lower": lower,
                "upper": upper,
                "free": self.mask,
            },
            index=pd.Index(self.coefficient_names, name="parameter"),
        )


class VolatilityModel:
    """Univariate volatility model for a chosen family and order.

    Attributes:
        spec: Family and order
        name: Model name
    """

    def __init__(self,
                 family: Union[VolatilitySpec, VolatilityFamily, str] = VolatilityFamily.GARCH,
                 p: int = 1,
                 q: int = 1,
                 parameters: Optional[Any] = None,
                 name: Optional[str] = None) -> None:
        """Initialize the volatility model.

        Args:
            family: The recursion family, or a complete ``VolatilitySpec``
            p: Number of lagged variance terms; ignored for a spec
            q: Number of lagged shock terms; ignored for a spec
            parameters: Optional full-length parameter vector
            name: A descriptive name for the model

        Raises:
            ConfigurationError: If the order is invalid or the parameter
                vector has the wrong length
        """
        self.spec = family if isinstance(family, VolatilitySpec) else VolatilitySpec(family, p, q)
        self.name = name or str(self.spec)
        self._parameters = None if parameters is None else self.spec.parameters(parameters)
        self._result: Optional[VolatilityFitResult] = None
        self._data: Optional[np.ndarray] = None

    def __repr__(self) -> str:
        return f"VolatilityModel({self.spec}, fitted={self._result is not None})"

    @property
    def parameters(self) -> Optional[VolatilityParameters]:
        return self._parameters

    @parameters.setter
    def parameters(self, values: Any) -> None:
        self._parameters = self.spec.parameters(values)

    @property
    def result(self) -> Optional[VolatilityFitResult]:
        return self._result

    def _require_parameters(self, operation: str) -> VolatilityParameters:
        if self._parameters is None:
            raise_not_fitted_error(
                f"Model parameters must be set or estimated before {operation}.",
                model_type=self.name,
                operation=operation,
            )
        return self._parameters

    def filter(self, data: TimeSeriesData, parameters: Optional[Any] = None) -> Union[np.ndarray, pd.Series]:
        """Conditional variances of ``data``.

        Args:
            data: Residuals
            parameters: Parameter vector; defaults to the model's parameters

        Returns:
            Conditional variances, as a Series when ``data`` is a Series

        Raises:
            NonStationaryParameterError: If the parameters imply no finite
                unconditional variance
        """
        params = self.spec.parameters(parameters) if parameters is not None \
            else self._require_parameters("filter")
        history = filter_variance(self.spec, params, data)
        variance = history.variance.copy()
        if isinstance(data, pd.Series):
            return pd.Series(variance, index=data.index, name="variance")
        return variance

    def loglikelihood(self, data: TimeSeriesData, parameters: Optional[Any] = None) -> float:
        """Gaussian log-likelihood of ``data``; ``-inf`` for rejected parameters."""
        params = self.spec.parameters(parameters) if parameters is not None \
            else self._require_parameters("loglikelihood")
        resids = validate_time_series(data, data_name="data")
        return _loglikelihood(self.spec, params, resids)

    def fit(self,
            data: TimeSeriesData,
            subset: Optional[Union[GARCHOrder, Sequence[int]]] = None,
            starting_values: Optional[Any] = None,
            options: Optional[Dict[str, Any]] = None) -> VolatilityFitResult:
        """Estimate parameters by bounded maximum likelihood.

        Args:
            data: Residuals
            subset: Optional reduced order ``(p_sub, q_sub)``. Coefficients
                outside the subset are pinned to zero by collapsing their
                bounds; the search space keeps its full length
            starting_values: Optional full-length starting vector; entries
                outside the subset are ignored and set to zero
            options: Additional options for ``scipy.optimize.minimize``

        Returns:
            VolatilityFitResult: The estimation results

        Raises:
            ConfigurationError: If the subset or starting values are invalid
            ParameterError: If a free starting value lies outside its bounds
            DataError: If the data are unusable
            EstimationError: If the optimizer fails or no feasible point is found
        """
        spec = self.spec
        resids = validate_time_series(data, min_length=spec.presample + 1, data_name="data")
        config = get_numerical_config()

        lower, upper = constraints(spec.family, spec.p, spec.q)
        if subset is None:
            mask = np.ones(spec.nparams, dtype=bool)
        else:
            mask = subset_mask(spec.family, spec.p, spec.q, subset)
        lower[~mask] = 0.0
        upper[~mask] = 0.0

        if starting_values is None:
            x0 = heuristic_starting_values(spec.family, spec.p, spec.q, resids, subset)
        else:
            x0 = validate_vector(starting_values, spec.nparams, "starting_values", str(spec))
            x0 = np.where(mask, x0, 0.0)
            VolatilityParameters(spec.layout, x0, model_type=str(spec)).validate(lower, upper)

        layout = spec.layout
        penalty = config.penalty

        def neg_loglikelihood(x: np.ndarray) -> float:
            ll = _loglikelihood(spec, VolatilityParameters(layout, x), resids)
            if not np.isfinite(ll):
                return penalty
            return -ll

        optimizer_options = {"maxiter": config.max_iterations, "disp": False}
        if options:
            optimizer_options.update(options)

        logger.debug(f"Fitting {self.name} with mask {mask.astype(int)} from {x0}")
        try:
            optimization_result = optimize.minimize(
                neg_loglikelihood,
                x0,
                method=config.optimization_method,
                bounds=optimize.Bounds(lower, upper),
                tol=config.optimization_tol,
                options=optimizer_options,
            )
        except (ValueError, ArithmeticError, np.linalg.LinAlgError) as e:
            raise EstimationError(
                f"Error during model estimation: {e}",
                model_type=self.name,
                estimation_method=config.optimization_method,
                issue=str(e),
            ) from e

        estimate = np.where(mask, optimization_result.x, 0.0)
        params = VolatilityParameters(layout, estimate, model_type=str(spec))
        loglikelihood = _loglikelihood(spec, params, resids)
        if not np.isfinite(loglikelihood):
            raise EstimationError(
                "Optimization did not reach a parameter vector with finite likelihood",
                model_type=self.name,
                estimation_method=config.optimization_method,
                issue="Infeasible estimate",
            )

        iterations = int(optimization_result.get("nit", 0))
        if not optimization_result.success:
            warn_convergence(
                f"{self.name} optimization did not report convergence.",
                iterations=iterations,
                final_value=float(optimization_result.fun),
                details=str(optimization_result.message),
            )

        persistence = spec.definition.persistence(params)
        if persistence > 0.999:
            warn_numeric(
                f"{self.name} estimate is close to integrated.",
                operation="fit",
                issue="Persistence near one",
                value=persistence,
            )

        k = nparams(spec.family, spec.p, spec.q, mask)
        n = resids.shape[0]
        history = filter_variance(spec, params, resids)

        result = VolatilityFitResult(
            spec=spec,
            parameters=params.to_array(),
            coefficient_names=spec.coefficient_names(),
            loglikelihood=float(loglikelihood),
            aic=float(-2 * loglikelihood + 2 * k),
            bic=float(-2 * loglikelihood + k * np.log(n)),
            num_obs=n,
            mask=mask,
            orders=subset_orders(spec.family, spec.p, spec.q, mask),
            convergence=bool(optimization_result.success),
            iterations=iterations,
            conditional_variance=history.variance.copy(),
            optimization_result=optimization_result,
        )

        self._parameters = params
        self._result = result
        self._data = resids
        logger.debug(f"Fitted {self.name}: loglikelihood={loglikelihood:.6f}")
        return result

    def simulate(self,
                 n_periods: int,
                 burn: int = 500,
                 random_state: Optional[Union[int, np.random.Generator]] = None) -> Tuple[np.ndarray, np.ndarray]:
        """Simulate residuals and conditional variances from the model.

        The presample holds the unconditional variance; every later variance
        is produced by one call to the update kernel.

        Args:
            n_periods: Number of periods to return
            burn: Number of initial periods to discard
            random_state: Random number generator or seed; defaults to the
                configured ``core.random_seed``

        Returns:
            Tuple[np.ndarray, np.ndarray]: Simulated residuals and variances

        Raises:
            NotFittedError: If the model has no parameters
            NonStationaryParameterError: If the parameters imply no finite
                unconditional variance
        """
        params = self._require_parameters("simulate")
        n_periods = validate_positive_int(n_periods, "n_periods")
        burn = validate_positive_int(burn, "burn", allow_zero=True)
        if random_state is None:
            random_state = get_config("core", "random_seed")

        spec = self.spec
        r = spec.presample
        total = r + burn + n_periods
        shocks = StandardNormal().rvs(total, random_state=random_state)

        h0 = _unconditional_variance(spec, params)
        buffers = HistoryBuffers(capacity=total)
        for t in range(r):
            buffers.append(h0, resid=np.sqrt(h0) * shocks[t])
        for t in range(r, total):
            variance = update(spec, buffers, params)
            buffers.observe(np.sqrt(variance) * shocks[t])

        start = r + burn
        return buffers.resid[start:].copy(), buffers.variance[start:].copy()

    def forecast(self, steps: int, data: Optional[TimeSeriesData] = None) -> np.ndarray:
        """Multi-step conditional variance forecasts.

        Forecasts run the update kernel past the end of the sample with the
        horizon argument, so unobserved shocks enter through their
        expectation. For EGARCH this yields the exponential of the expected
        log-variance.

        Args:
            steps: Number of steps ahead
            data: Residuals to condition on; defaults to the estimation sample

        Returns:
            np.ndarray: Forecasts for horizons 1..steps

        Raises:
            NotFittedError: If the model has no parameters or no data to
                condition on
        """
        params = self._require_parameters("forecast")
        steps = validate_positive_int(steps, "steps")
        if data is None:
            if self._data is None:
                raise_not_fitted_error(
                    "Forecasting requires data; fit the model or pass data.",
                    model_type=self.name,
                    operation="forecast",
                )
            data = self._data

        history = filter_variance(self.spec, params, data)
        forecasts = np.empty(steps)
        for k in range(1, steps + 1):
            forecasts[k - 1] = update(self.spec, history, params, horizon=k)
        return forecasts

    def summary(self) -> str:
        """Summary of the estimation results, or of the specification if not fitted."""
        if self._result is not None:
            return self._result.summary()
        text = f"Model: {self.name}\n"
        text += f"Coefficients: {', '.join(self.spec.coefficient_names())}\n"
        if self._parameters is None:
            text += "Parameters: not set\n"
        else:
            for name, value in self._parameters.to_dict().items():
                text += f"  {name:<10} {value:>12.6f}\n"
        return text

