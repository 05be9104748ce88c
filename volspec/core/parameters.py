# volspec/core/parameters.py

"""
Parameter layouts and parameter containers for volspec.

Every volatility family stores its coefficients in one flat vector made of
contiguous named segments: the intercept, ``p`` variance-lag coefficients,
``q`` shock-lag coefficients and, for asymmetric families, further
``q``-length segments tied lag-by-lag to the shock coefficients. A
``ParameterLayout`` describes those segments once per (family, p, q) and is
the single source of index arithmetic for names, bounds, starting values and
subset masks. ``VolatilityParameters`` is a validated view over a flat vector
that exposes the segments by name.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from volspec.core.exceptions import VolSpecError, raise_length_mismatch

_SUBSCRIPT_DIGITS = str.maketrans("0123456789", "₀₁₂₃₄₅₆₇₈₉")


def subscript(index: int) -> str:
    """Render a non-negative integer with unicode subscript digits."""
    return str(index).translate(_SUBSCRIPT_DIGITS)


class ParameterError(VolSpecError):
    """Exception raised for parameter constraint violations.

    Attributes:
        param_name: Name of the offending coefficient
        param_value: Its value
    """

    _labels = (("param_name", "Parameter"), ("param_value", "Value"))

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[float] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        super().__init__(message, details, context)


def validate_range(value: float, param_name: str,
                   min_value: Optional[float] = None,
                   max_value: Optional[float] = None) -> float:
    """Validate that a parameter is within a specified range.

    Args:
        value: Parameter value to validate
        param_name: Name of the parameter for error messages
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive)

    Returns:
        float: The validated parameter value

    Raises:
        ParameterError: If the parameter is outside the specified range
    """
    if np.isnan(value):
        raise ParameterError(f"Parameter {param_name} is NaN", param_name, value)
    if min_value is not None and value < min_value:
        raise ParameterError(
            f"Parameter {param_name} must be at least {min_value}, got {value}",
            param_name, value
        )
    if max_value is not None and value > max_value:
        raise ParameterError(
            f"Parameter {param_name} must be at most {max_value}, got {value}",
            param_name, value
        )
    return value


@dataclass(frozen=True)
class Segment:
    """A contiguous, named sub-range of a flat parameter vector.

    Attributes:
        name: Attribute name of the segment (``omega``, ``beta``, ...)
        symbol: Greek symbol used in coefficient names
        start: Index of the first element
        length: Number of elements
        lag: Order the segment is tied to: ``None`` for the intercept, ``"p"``
            for variance lags, ``"q"`` for shock lags and their companions
    """
    name: str
    symbol: str
    start: int
    length: int
    lag: Optional[str] = None

    @property
    def stop(self) -> int:
        return self.start + self.length

    @property
    def slice(self) -> slice:
        return slice(self.start, self.stop)

    def coefficient_names(self) -> List[str]:
        if self.lag is None:
            return [self.symbol]
        return [f"{self.symbol}{subscript(i + 1)}" for i in range(self.length)]


class ParameterLayout:
    """Segment layout of a flat parameter vector.

    Layouts are immutable and built once per (family, p, q); they are safe
    to share across concurrent evaluations.
    """

    __slots__ = ("_segments", "_by_name", "_size")

    def __init__(self, segments: Sequence[Segment]) -> None:
        position = 0
        for segment in segments:
            if segment.start != position or segment.length < 0:
                raise ValueError(f"Segment {segment.name} is not contiguous with its predecessor")
            position = segment.stop
        self._segments = tuple(segments)
        self._by_name = {segment.name: segment for segment in self._segments}
        self._size = position

    @classmethod
    def build(cls, p: int, q: int, intercept: str = "ω",
              aux: Sequence[Tuple[str, str]] = ()) -> "ParameterLayout":
        """Build the standard layout ``intercept; β(p); α(q); aux(q)...``.

        Args:
            p: Number of variance lags
            q: Number of shock lags
            intercept: Symbol of the intercept
            aux: ``(name, symbol)`` pairs of further q-length segments, in order
        """
        segments = [Segment("omega", intercept, 0, 1)]
        spec = [("beta", "β", p, "p"), ("alpha", "α", q, "q")]
        spec += [(name, symbol, q, "q") for name, symbol in aux]
        start = 1
        for name, symbol, length, lag in spec:
            segments.append(Segment(name, symbol, start, length, lag))
            start += length
        return cls(segments)

    @property
    def size(self) -> int:
        return self._size

    @property
    def segments(self) -> Tuple[Segment, ...]:
        return self._segments

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __getitem__(self, name: str) -> Segment:
        try:
            return self._by_name[name]
        except KeyError:
            raise KeyError(f"Layout has no segment named {name!r}") from None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParameterLayout):
            return NotImplemented
        return self._segments == other._segments

    def __hash__(self) -> int:
        return hash(self._segments)

    def __repr__(self) -> str:
        parts = ", ".join(f"{s.name}[{s.start}:{s.stop}]" for s in self._segments)
        return f"ParameterLayout({parts})"

    def coefficient_names(self) -> List[str]:
        """Return one name per element, in vector order."""
        names: List[str] = []
        for segment in self._segments:
            names.extend(segment.coefficient_names())
        return names

    def aux_segments(self) -> Tuple[Segment, ...]:
        """Segments that follow the shock coefficients and share their lag index."""
        return tuple(
            s for s in self._segments if s.lag == "q" and s.name != "alpha"
        )


class VolatilityParameters:
    """Validated, segment-addressable view over a flat parameter vector.

    The vector length is checked against the layout once, here; the
    recursion never re-checks it.

    Attributes:
        layout: The parameter layout
        values: The flat float64 vector (a private copy)
    """

    def __init__(self, layout: ParameterLayout, values: Any,
                 model_type: Optional[str] = None) -> None:
        array = np.array(values, dtype=np.float64).ravel()
        if array.shape[0] != layout.size:
            raise_length_mismatch("parameters", layout.size, array.shape[0], model_type)
        self.layout = layout
        self.values = array
        self.values.setflags(write=False)

    def __getattr__(self, name: str) -> Any:
        layout = self.__dict__.get("layout")
        if layout is None or name not in layout:
            raise AttributeError(f"{type(self).__name__} has no attribute {name!r}")
        segment = layout[name]
        if segment.lag is None:
            return float(self.values[segment.start])
        return self.values[segment.slice]

    def __len__(self) -> int:
        return self.values.shape[0]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_dict()})"

    def to_array(self) -> np.ndarray:
        """Return a writable copy of the flat vector."""
        return self.values.copy()

    def to_dict(self) -> Dict[str, float]:
        return dict(zip(self.layout.coefficient_names(), self.values.tolist()))

    def validate(self, lower: np.ndarray, upper: np.ndarray) -> None:
        """Check every coefficient against a bounds pair.

        Raises:
            ParameterError: If any coefficient lies outside its bounds
        """
        for name, value, lo, hi in zip(self.layout.coefficient_names(), self.values, lower, upper):
            validate_range(float(value), name, float(lo), float(hi))
