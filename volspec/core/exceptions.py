'''
Custom exception and warning classes for volspec.

The hierarchy is rooted at VolSpecError. Every error carries a primary message,
optional details and a context dictionary, all rendered into the final
message so that failures raised deep inside model setup remain readable.

Three categories matter to the volatility specification engine:

- ConfigurationError: a caller bug (wrong parameter-vector length, invalid
  order pair, inconsistent subset mask). Always fatal and raised while a model
  is being set up, never from inside the recursion.
- NonStationaryParameterError: a candidate parameter vector whose implied
  unconditional variance is not finite and positive. Recoverable; the
  likelihood driver converts it into a rejected candidate.
- Numerical degeneracy inside the recursion is corrected silently and has no
  exception class.
'''

import inspect
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np


def _caller_location() -> Optional[str]:
    """Return ``file:line`` of the first frame outside this module."""
    frame = inspect.currentframe()
    try:
        while frame is not None and frame.f_code.co_filename == __file__:
            frame = frame.f_back
        if frame is None:
            return None
        return f"{Path(frame.f_code.co_filename).name}:{frame.f_lineno}"
    finally:
        del frame


def _render(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        return np.array2string(value, precision=6)
    return value


class _ContextMixin:
    """
    Shared message construction for errors and warnings.

    ``_labels`` maps attribute names to the labels shown in the Context
    block. Attributes that are None or empty are left out.
    """

    _labels: Tuple[Tuple[str, str], ...] = ()

    def _build(self,
               message: str,
               details: Optional[str],
               context: Optional[Dict[str, Any]]) -> str:
        self.message = message
        self.details = details
        self.context = dict(context or {})
        for attr, label in self._labels:
            value = getattr(self, attr, None)
            if value is not None and not (isinstance(value, str) and not value):
                self.context[label] = _render(value)

        text = message
        if details:
            text += f"\n\nDetails: {details}"
        if self.context:
            lines = "\n".join(f"  {k}: {v}" for k, v in self.context.items())
            text += f"\n\nContext:\n{lines}"
        location = _caller_location()
        if location:
            text += f"\n\nLocation: {location}"
        return text


class VolSpecError(_ContextMixin, Exception):
    """Base exception class for all volspec errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Contextual information rendered below the message
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(self._build(message, details, context))


class ConfigurationError(VolSpecError):
    """Exception raised for invalid model or package configuration.

    Used for parameter-vector length mismatches, invalid order pairs,
    inconsistent subset masks, unknown model families and invalid settings
    in the configuration manager.

    Attributes:
        setting: The setting or argument that caused the error
        value: The invalid value
        expected: Description of what was expected
        issue: Description of the issue
    """

    _labels = (("setting", "Setting"), ("value", "Value"),
               ("expected", "Expected"), ("issue", "Issue"))

    def __init__(self,
                 message: str,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 expected: Optional[Any] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.setting = setting
        self.value = value
        self.expected = expected
        self.issue = issue
        super().__init__(message, details, context)


class NonStationaryParameterError(VolSpecError):
    """Exception raised when a parameter vector implies no finite long-run variance.

    Attributes:
        model_type: The model family
        denominator: The non-positive or non-finite denominator of the solver
        parameters: The offending parameter vector
    """

    _labels = (("model_type", "Model Type"), ("denominator", "Denominator"),
               ("parameters", "Parameters"))

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 denominator: Optional[float] = None,
                 parameters: Optional[np.ndarray] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.denominator = denominator
        self.parameters = None if parameters is None else np.asarray(parameters)
        super().__init__(message, details, context)


class DataError(VolSpecError):
    """Residual input that cannot be filtered (wrong shape, NaN, too short)."""

    _labels = (("data_name", "Data"), ("issue", "Issue"), ("index", "Index"))

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index
        super().__init__(message, details, context)


class EstimationError(VolSpecError):
    """The optimizer could not produce a usable estimate."""

    _labels = (("model_type", "Model Type"), ("estimation_method", "Estimation Method"),
               ("issue", "Issue"))

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 estimation_method: Optional[str] = None,
                 issue: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.estimation_method = estimation_method
        self.issue = issue
        super().__init__(message, details, context)


class NotFittedError(VolSpecError):
    """An operation needs coefficients and the model has none."""

    _labels = (("model_type", "Model Type"), ("operation", "Operation"))

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 operation: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.operation = operation
        super().__init__(message, details, context)


class VolSpecWarning(_ContextMixin, Warning):
    """Base warning class for all volspec warnings."""

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(self._build(message, details, context))


class ConvergenceWarning(VolSpecWarning):
    """Warning issued when the optimizer stops without reporting success.

    Attributes:
        iterations: The number of iterations performed
        final_value: The final objective value
    """

    _labels = (("iterations", "Iterations"), ("final_value", "Final Value"))

    def __init__(self,
                 message: str,
                 iterations: Optional[int] = None,
                 final_value: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.iterations = iterations
        self.final_value = final_value
        super().__init__(message, details, context)


class NumericWarning(VolSpecWarning):
    """Numerical issue that does not stop the computation, such as a near-integrated fit."""

    _labels = (("operation", "Operation"), ("issue", "Issue"), ("value", "Value"))

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.issue = issue
        self.value = value
        super().__init__(message, details, context)


# Helpers raising with consistent formatting

def raise_configuration_error(message: str,
                              setting: Optional[str] = None,
                              value: Optional[Any] = None,
                              expected: Optional[Any] = None,
                              issue: Optional[str] = None,
                              details: Optional[str] = None,
                              context: Optional[Dict[str, Any]] = None) -> None:
    raise ConfigurationError(message, setting, value, expected, issue, details, context)


def raise_length_mismatch(setting: str,
                          expected: int,
                          actual: int,
                          model_type: Optional[str] = None) -> None:
    """Raise a ConfigurationError for a vector whose length does not match its layout.

    Raises:
        ConfigurationError: Always
    """
    context = {"Model Type": model_type} if model_type else None
    raise ConfigurationError(
        f"{setting} has length {actual}, expected {expected}",
        setting=setting,
        value=actual,
        expected=expected,
        issue="Length mismatch",
        context=context,
    )


def raise_non_stationary(model_type: str,
                         denominator: float,
                         parameters: Sequence[float]) -> None:
    """Raise a NonStationaryParameterError for a failed stationarity check.

    Raises:
        NonStationaryParameterError: Always
    """
    raise NonStationaryParameterError(
        f"{model_type} parameters do not imply a finite, positive unconditional variance",
        model_type=model_type,
        denominator=denominator,
        parameters=np.asarray(parameters),
    )


def raise_data_error(message: str,
                     data_name: Optional[str] = None,
                     issue: Optional[str] = None,
                     index: Optional[Union[int, Tuple[int, ...], str]] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    raise DataError(message, data_name, issue, index, details, context)


def raise_not_fitted_error(message: str,
                           model_type: Optional[str] = None,
                           operation: Optional[str] = None) -> None:
    raise NotFittedError(message, model_type, operation)


# Helpers issuing warnings attributed to the code that called the warning site

def warn_convergence(message: str,
                     iterations: Optional[int] = None,
                     final_value: Optional[float] = None,
                     details: Optional[str] = None) -> None:
    warnings.warn(ConvergenceWarning(message, iterations, final_value, details), stacklevel=3)


def warn_numeric(message: str,
                 operation: Optional[str] = None,
                 issue: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None) -> None:
    warnings.warn(NumericWarning(message, operation, issue, value, details), stacklevel=3)
