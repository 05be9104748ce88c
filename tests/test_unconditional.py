# tests/test_unconditional.py
"""
Tests for the unconditional variance solver, the expected shock responses
and the persistence utilities.
"""

import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from volspec.core.exceptions import ConfigurationError, NonStationaryParameterError
from volspec.models.univariate.agarch import agarch_expected_kernel
from volspec.models.univariate.engine import (
    HistoryBuffers, VolatilitySpec, unconditional_variance, update
)
from volspec.models.univariate.utils import (
    compute_half_life, expected_shock_response, shock_response
)

SQRT_2_OVER_PI = math.sqrt(2.0 / math.pi)


class TestSolver:
    """Closed-form long-run variances."""

    def test_garch(self, garch_coefs):
        assert unconditional_variance("GARCH", 1, 1, garch_coefs) == pytest.approx(1.0)

    def test_garch_multiple_lags(self):
        coefs = [0.2, 0.3, 0.2, 0.1, 0.1, 0.1]
        assert unconditional_variance("GARCH", 2, 3, coefs) == pytest.approx(0.2 / 0.2)

    def test_agarch(self, agarch_coefs):
        omega, beta, alpha, shift, skew = agarch_coefs
        kappa = (shift * math.erf(shift / math.sqrt(2))
                 + SQRT_2_OVER_PI * math.exp(-shift ** 2 / 2)
                 + skew * shift)
        expected = omega / (1 - beta - alpha * kappa)
        assert unconditional_variance("AGARCH", 1, 1, agarch_coefs) == pytest.approx(expected, rel=1e-12)

    def test_agarch_zero_shift(self):
        coefs = [0.05, 0.85, 0.05, 0.0, 0.0]
        expected = 0.05 / (1 - 0.85 - 0.05 * SQRT_2_OVER_PI)
        assert unconditional_variance("AGARCH", 1, 1, coefs) == pytest.approx(expected, rel=1e-12)

    def test_egarch(self, egarch_coefs):
        assert unconditional_variance("EGARCH", 1, 1, egarch_coefs) == pytest.approx(math.exp(-2.0))

    def test_intercept_only(self):
        assert unconditional_variance("GARCH", 0, 0, [0.7]) == pytest.approx(0.7)
        assert unconditional_variance("EGARCH", 0, 0, [0.0]) == pytest.approx(1.0)

    @pytest.mark.parametrize("family, coefs", [
        ("GARCH", [0.1, 0.6, 0.4]),
        ("GARCH", [0.1, 0.9, 0.2]),
        ("AGARCH", [0.1, 0.9, 0.5, 0.0, 0.0]),
        ("EGARCH", [0.0, 1.0, 0.1, 0.0]),
        ("EGARCH", [0.0, 1.2, 0.1, 0.0]),
    ])
    def test_non_stationary(self, family, coefs):
        with pytest.raises(NonStationaryParameterError) as excinfo:
            unconditional_variance(family, 1, 1, coefs)
        assert excinfo.value.denominator <= 0

    def test_non_finite_denominator(self):
        with pytest.raises(NonStationaryParameterError):
            unconditional_variance("GARCH", 1, 1, [0.1, np.nan, 0.1])

    def test_non_positive_value(self):
        with pytest.raises(NonStationaryParameterError):
            unconditional_variance("GARCH", 1, 1, [-0.1, 0.5, 0.1])

    def test_egarch_overflow(self):
        with pytest.raises(NonStationaryParameterError):
            unconditional_variance("EGARCH", 1, 1, [10.0, 0.99, 0.1, 0.0])

    def test_length_mismatch(self):
        with pytest.raises(ConfigurationError):
            unconditional_variance("AGARCH", 1, 1, [0.1, 0.8, 0.1])


class TestExpectedShockResponse:
    """Quadrature cross-checks of the closed-form expectations."""

    @pytest.mark.parametrize("shift, skew", [
        (0.0, 0.0), (0.5, 0.0), (-1.2, 0.3), (2.0, -0.7), (0.3, 0.9),
    ])
    def test_agarch_kernel(self, shift, skew):
        numerical = expected_shock_response("AGARCH", shift=shift, skew=skew)
        assert numerical == pytest.approx(float(agarch_expected_kernel(shift, skew)), abs=1e-7)

    def test_garch_kernel(self):
        assert expected_shock_response("GARCH") == pytest.approx(1.0, abs=1e-7)

    def test_egarch_kernel(self):
        assert expected_shock_response("EGARCH", alpha=0.3, gamma=-0.2) == pytest.approx(0.0, abs=1e-7)

    def test_shock_response_values(self):
        z = np.array([-1.0, 0.0, 2.0])
        assert_allclose(shock_response("GARCH", z), [1.0, 0.0, 4.0])
        assert_allclose(shock_response("AGARCH", z, shift=0.5, skew=0.2),
                        [1.5 + 0.2 * 1.5, 0.5 + 0.2 * 0.5, 1.5 - 0.2 * 1.5])
        assert_allclose(shock_response("EGARCH", z, alpha=0.1, gamma=-0.1),
                        0.1 * (np.abs(z) - SQRT_2_OVER_PI) - 0.1 * z)


class TestFixedPoint:
    """The long-run variance is a fixed point of the recursion."""

    @staticmethod
    def run(spec, coefs, h0, z, steps=5):
        buffers = HistoryBuffers()
        for _ in range(spec.presample):
            buffers.append(h0, resid=z * math.sqrt(h0))
        values = []
        for _ in range(steps):
            h = update(spec, buffers, coefs)
            buffers.observe(z * math.sqrt(h))
            values.append(h)
        return np.array(values)

    @pytest.mark.parametrize("p, q", [(1, 1), (2, 2), (0, 1), (1, 0)])
    def test_garch(self, p, q):
        spec = VolatilitySpec("GARCH", p, q)
        coefs = np.concatenate([[0.1], np.full(p, 0.6 / max(p, 1)), np.full(q, 0.2 / max(q, 1))])
        h0 = unconditional_variance("GARCH", p, q, coefs)
        assert_allclose(self.run(spec, coefs, h0, 1.0), h0, rtol=1e-12)

    @pytest.mark.parametrize("p, q", [(1, 1), (2, 2)])
    @pytest.mark.parametrize("shift, skew", [(0.0, 0.0), (0.4, -0.3), (-0.8, 0.5)])
    def test_agarch(self, p, q, shift, skew):
        spec = VolatilitySpec("AGARCH", p, q)
        coefs = np.concatenate([
            [0.1], np.full(p, 0.5 / p), np.full(q, 0.1 / q),
            np.full(q, shift), np.full(q, skew),
        ])
        h0 = unconditional_variance("AGARCH", p, q, coefs)
        kappa = float(agarch_expected_kernel(shift, skew))
        # above the shift, |z - λ| - ρ (z - λ) = (1 - ρ)(z - λ)
        z = shift + kappa / (1.0 - skew)
        assert_allclose(self.run(spec, coefs, h0, z), h0, rtol=1e-12)

    def test_agarch_zero_response(self):
        spec = VolatilitySpec("AGARCH", 1, 1)
        coefs = np.array([0.2, 0.6, 0.0, 0.3, 0.1])
        h0 = unconditional_variance("AGARCH", 1, 1, coefs)
        assert_allclose(self.run(spec, coefs, h0, 0.0), h0, rtol=1e-12)

    @pytest.mark.parametrize("p, q", [(1, 1), (2, 1)])
    @pytest.mark.parametrize("gamma", [0.0, -0.1, 0.1])
    def test_egarch(self, p, q, gamma):
        spec = VolatilitySpec("EGARCH", p, q)
        alpha = 0.2
        coefs = np.concatenate([[-0.1], np.full(p, 0.9 / p), np.full(q, alpha), np.full(q, gamma)])
        h0 = unconditional_variance("EGARCH", p, q, coefs)
        # α (|z| - √(2/π)) + γ z = 0 for z > 0
        z = alpha * SQRT_2_OVER_PI / (alpha + gamma)
        assert_allclose(self.run(spec, coefs, h0, z), h0, rtol=1e-10)

    def test_egarch_zero_response(self):
        spec = VolatilitySpec("EGARCH", 1, 1)
        coefs = np.array([-0.2, 0.9, 0.0, 0.0])
        h0 = unconditional_variance("EGARCH", 1, 1, coefs)
        assert_allclose(self.run(spec, coefs, h0, 0.0), h0, rtol=1e-10)


class TestHalfLife:
    """Tests for compute_half_life."""

    def test_values(self):
        assert compute_half_life(0.5) == pytest.approx(1.0)
        assert compute_half_life(0.95) == pytest.approx(math.log(0.5) / math.log(0.95))
        assert compute_half_life(0.0) == 0.0
        assert compute_half_life(0.99999) == float("inf")

    @pytest.mark.parametrize("persistence", [-0.1, 1.0, 1.5])
    def test_invalid(self, persistence):
        with pytest.raises(ValueError):
            compute_half_life(persistence)
