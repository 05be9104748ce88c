# volspec/core/validation.py

"""
Validation utilities for volspec.

Setup-time checks for model orders, parameter vectors, subset masks and
residual series. Failures that indicate a caller bug raise
ConfigurationError; unusable residual input raises DataError. None of these
helpers is called from inside the recursion.
"""

from numbers import Integral
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from volspec.core.exceptions import (
    ConfigurationError, raise_configuration_error, raise_data_error,
    raise_length_mismatch
)
from volspec.core.types import BoolMask, GARCHOrder, ParameterVector


def validate_order(p: Any, q: Any, name: str = "order") -> GARCHOrder:
    """Validate a (p, q) order pair.

    Args:
        p: Number of variance lags
        q: Number of shock lags
        name: Name of the order for error messages

    Returns:
        GARCHOrder: The order as a tuple of Python ints

    Raises:
        ConfigurationError: If either order is not a non-negative integer
    """
    for label, value in (("p", p), ("q", q)):
        if isinstance(value, bool) or not isinstance(value, Integral):
            raise_configuration_error(
                f"{name} {label} must be an integer, got {type(value).__name__}",
                setting=f"{name}.{label}",
                value=value,
                expected="non-negative integer",
                issue="Invalid type",
            )
        if value < 0:
            raise_configuration_error(
                f"{name} {label} must be non-negative, got {value}",
                setting=f"{name}.{label}",
                value=value,
                expected="non-negative integer",
                issue="Negative order",
            )
    return int(p), int(q)


def validate_sub_order(sub_order: Union[Sequence[int], GARCHOrder],
                       p_max: int,
                       q_max: int) -> GARCHOrder:
    """Validate a reduced order request against the full order.

    A 1-tuple ``(q_sub,)`` is read as ``(0, q_sub)``.

    Raises:
        ConfigurationError: If the request has the wrong arity or exceeds
            ``(p_max, q_max)``
    """
    try:
        sub = tuple(sub_order)
    except TypeError as e:
        raise ConfigurationError(
            "Subset order must be a tuple of integers",
            setting="subset_order",
            value=sub_order,
            issue="Not a sequence",
        ) from e

    if len(sub) == 1:
        sub = (0, sub[0])
    if len(sub) != 2:
        raise_configuration_error(
            f"Subset order must have one or two entries, got {len(sub)}",
            setting="subset_order",
            value=sub,
            expected="(p_sub, q_sub) or (q_sub,)",
            issue="Wrong arity",
        )

    p_sub, q_sub = validate_order(sub[0], sub[1], name="subset order")
    if p_sub > p_max or q_sub > q_max:
        raise_configuration_error(
            f"Subset order ({p_sub}, {q_sub}) exceeds model order ({p_max}, {q_max})",
            setting="subset_order",
            value=(p_sub, q_sub),
            expected=f"(p_sub, q_sub) <= ({p_max}, {q_max})",
            issue="Subset order out of range",
        )
    return p_sub, q_sub


def validate_vector(vector: Any,
                    expected_length: Optional[int] = None,
                    vector_name: str = "parameters",
                    model_type: Optional[str] = None) -> ParameterVector:
    """Validate a parameter vector and return it as a float64 array.

    Args:
        vector: Vector to validate
        expected_length: Expected length, or None for any
        vector_name: Name of the vector for error messages
        model_type: Model family name added to the error context

    Returns:
        ParameterVector: The validated vector

    Raises:
        ConfigurationError: If the vector is not 1-dimensional numeric or has
            the wrong length
    """
    try:
        array = np.asarray(vector, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"{vector_name} must be numeric",
            setting=vector_name,
            issue=str(e),
        ) from e

    if array.ndim == 2 and 1 in array.shape:
        array = array.ravel()
    elif array.ndim != 1:
        raise_configuration_error(
            f"{vector_name} must be 1-dimensional, got shape {array.shape}",
            setting=vector_name,
            value=array.shape,
            expected="1D vector",
            issue="Wrong dimension",
        )

    if expected_length is not None and array.shape[0] != expected_length:
        raise_length_mismatch(vector_name, expected_length, array.shape[0], model_type)

    return array


def validate_mask(mask: Any, expected_length: int) -> BoolMask:
    """Validate a subset mask and return it as a boolean array.

    Raises:
        ConfigurationError: If the mask is not 1-dimensional, has the wrong
            length or excludes the intercept
    """
    array = np.asarray(mask)
    if array.ndim != 1:
        raise_configuration_error(
            f"Subset mask must be 1-dimensional, got shape {array.shape}",
            setting="subset_mask",
            value=array.shape,
            issue="Wrong dimension",
        )
    if array.dtype != np.bool_:
        if not np.all(np.isin(array, (0, 1))):
            raise_configuration_error(
                "Subset mask must contain only boolean values",
                setting="subset_mask",
                issue="Non-boolean entries",
            )
        array = array.astype(bool)
    if array.shape[0] != expected_length:
        raise_length_mismatch("subset_mask", expected_length, array.shape[0])
    if expected_length > 0 and not array[0]:
        raise_configuration_error(
            "Subset mask must include the intercept",
            setting="subset_mask",
            value=array,
            issue="Intercept excluded",
        )
    return array


def validate_time_series(data: Any,
                         min_length: int = 1,
                         data_name: str = "data") -> np.ndarray:
    """Validate a residual series and return it as a float64 array.

    Args:
        data: NumPy array, pandas Series or sequence of numbers
        min_length: Minimum required length
        data_name: Name of the data for error messages

    Returns:
        np.ndarray: The validated series

    Raises:
        DataError: If data is not 1-dimensional numeric, is too short, or
            contains NaN or infinite values
    """
    if data is None:
        raise_data_error(f"{data_name} cannot be None", data_name=data_name, issue="missing")

    if isinstance(data, pd.DataFrame):
        if data.shape[1] != 1:
            raise_data_error(
                f"{data_name} must have a single column, got {data.shape[1]}",
                data_name=data_name,
                issue="multiple columns",
            )
        data = data.iloc[:, 0]

    values = data.to_numpy() if isinstance(data, pd.Series) else data
    try:
        array = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError):
        raise_data_error(
            f"{data_name} must be numeric",
            data_name=data_name,
            issue="non-numeric values",
        )

    if array.ndim == 2 and 1 in array.shape:
        array = array.ravel()
    if array.ndim != 1:
        raise_data_error(
            f"{data_name} must be 1-dimensional, got shape {array.shape}",
            data_name=data_name,
            issue="wrong dimension",
        )

    if array.shape[0] < min_length:
        raise_data_error(
            f"{data_name} is too short (length {array.shape[0]}), "
            f"minimum required length is {min_length}",
            data_name=data_name,
            issue=f"insufficient length: {array.shape[0]} < {min_length}",
        )

    if np.isnan(array).any():
        raise_data_error(
            f"{data_name} contains NaN values",
            data_name=data_name,
            issue="contains NaN values",
            index=int(np.flatnonzero(np.isnan(array))[0]),
        )
    if np.isinf(array).any():
        raise_data_error(
            f"{data_name} contains infinite values",
            data_name=data_name,
            issue="contains infinite values",
            index=int(np.flatnonzero(np.isinf(array))[0]),
        )

    return array


def validate_positive_int(value: Any, name: str, allow_zero: bool = False) -> int:
    """Validate a count argument such as a forecast horizon.

    Raises:
        ConfigurationError: If ``value`` is not a (strictly) positive integer
    """
    minimum = 0 if allow_zero else 1
    if isinstance(value, bool) or not isinstance(value, Integral) or value < minimum:
        raise_configuration_error(
            f"{name} must be an integer >= {minimum}, got {value!r}",
            setting=name,
            value=value,
            expected=f"integer >= {minimum}",
            issue="Invalid count",
        )
    return int(value)


def validate_bounds(lower: np.ndarray, upper: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Validate that ``lower <= upper`` element-wise.

    Raises:
        ConfigurationError: If the arrays differ in shape or cross
    """
    if lower.shape != upper.shape:
        raise_configuration_error(
            f"Bounds have mismatched shapes {lower.shape} and {upper.shape}",
            setting="bounds",
            issue="Shape mismatch",
        )
    crossed = np.flatnonzero(lower > upper)
    if crossed.size:
        raise_configuration_error(
            f"Lower bound exceeds upper bound at index {int(crossed[0])}",
            setting="bounds",
            value=(float(lower[crossed[0]]), float(upper[crossed[0]])),
            issue="Crossed bounds",
        )
    return lower, upper
