# volspec/models/univariate/selection.py
"""
Order selection over subset masks.

Every candidate order ``(p_sub, q_sub)`` up to ``(p_max, q_max)`` is estimated
as a masked model over the full parameter space of ``(p_max, q_max)``, so
all candidates share one likelihood function and one box.
"""

import logging
from typing import Any, List, Optional, Tuple

import numpy as np

from volspec.core.exceptions import EstimationError, raise_configuration_error
from volspec.core.types import SelectionCriterion, TimeSeriesData
from volspec.core.validation import validate_order, validate_time_series
from volspec.models.univariate.base import VolatilityFitResult, VolatilityModel
from volspec.models.univariate.engine import VolatilitySpec

logger = logging.getLogger("volspec.models.univariate.selection")

_CRITERIA = ("aic", "bic", "loglikelihood")


def _score(result: VolatilityFitResult, criterion: str) -> float:
    if criterion == "loglikelihood":
        return -result.loglikelihood
    return getattr(result, criterion)


def select_model(family: Any,
                 p_max: int,
                 q_max: int,
                 data: TimeSeriesData,
                 criterion: SelectionCriterion = "bic",
                 return_all: bool = False) -> Any:
    """Fit every subset order and return the best result.

    Args:
        family: The recursion family
        p_max: Largest number of variance lags
        q_max: Largest number of shock lags
        data: Residuals
        criterion: ``"aic"``, ``"bic"`` (minimized) or ``"loglikelihood"``
            (maximized)
        return_all: Also return every successful fit

    Returns:
        The best ``VolatilityFitResult``; with ``return_all`` a tuple of the
        best result and the list of all results

    Raises:
        ConfigurationError: If the criterion or orders are invalid
        EstimationError: If no candidate could be estimated
    """
    if criterion not in _CRITERIA:
        raise_configuration_error(
            f"Unknown selection criterion {criterion!r}",
            setting="criterion",
            value=criterion,
            expected=", ".join(_CRITERIA),
            issue="Invalid criterion",
        )
    p_max, q_max = validate_order(p_max, q_max)
    spec = VolatilitySpec(family, p_max, q_max)
    resids = validate_time_series(data, min_length=spec.presample + 1, data_name="data")

    results: List[VolatilityFitResult] = []
    best: Optional[VolatilityFitResult] = None
    for p_sub in range(p_max + 1):
        for q_sub in range(q_max + 1):
            model = VolatilityModel(spec)
            try:
                result = model.fit(resids, subset=(p_sub, q_sub))
            except EstimationError as e:
                logger.warning(f"Skipping {spec.family.value}({p_sub},{q_sub}): {e.message}")
                continue
            logger.debug(
                f"{spec.family.value}({p_sub},{q_sub}): "
                f"{criterion}={_score(result, criterion):.6f}"
            )
            results.append(result)
            if best is None or _score(result, criterion) < _score(best, criterion):
                best = result

    if best is None:
        raise EstimationError(
            f"No candidate order of {spec} could be estimated",
            model_type=str(spec),
            estimation_method="subset search",
            issue="All candidates failed",
        )

    logger.info(f"Selected {spec.family.value}{tuple(best.orders)} by {criterion}")
    if return_all:
        return best, results
    return best


def criteria_table(results: List[VolatilityFitResult]) -> Tuple[np.ndarray, List[Tuple[int, int]]]:
    """Stack ``(loglikelihood, aic, bic)`` of several fits, one row per fit."""
    orders = [tuple(result.orders) for result in results]
    table = np.array([[r.loglikelihood, r.aic, r.bic] for r in results], dtype=np.float64)
    return table.reshape(len(results), 3), orders
