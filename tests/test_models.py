# tests/test_models.py
"""
Tests for VolatilityModel (filtering, estimation, simulation, forecasting)
and for order selection over subset masks.
"""

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from volspec.core.config import set_config
from volspec.core.exceptions import (
    ConfigurationError, ConvergenceWarning, DataError, NonStationaryParameterError,
    NotFittedError
)
from volspec.core.parameters import ParameterError
from volspec.models.univariate import (
    VolatilityFitResult, VolatilityModel, VolatilitySpec, constraints,
    criteria_table, loglikelihood, select_model
)


# ---- Construction, filtering and likelihood ----

class TestVolatilityModel:
    """Tests that do not run the optimizer."""

    def test_construct_from_family(self):
        model = VolatilityModel("agarch", 2, 1)
        assert model.spec == VolatilitySpec("AGARCH", 2, 1)
        assert model.name == "AGARCH(2,1)"
        assert model.parameters is None

    def test_construct_from_spec(self, egarch_coefs):
        spec = VolatilitySpec("EGARCH", 1, 1)
        model = VolatilityModel(spec, parameters=egarch_coefs)
        assert model.spec is spec
        assert model.parameters.to_dict() == {"ω": -0.1, "β₁": 0.95, "α₁": 0.2, "γ₁": -0.1}

    def test_parameter_length_checked_at_construction(self):
        with pytest.raises(ConfigurationError):
            VolatilityModel("GARCH", 1, 1, parameters=[0.1, 0.8])

    def test_parameter_setter(self, garch_coefs):
        model = VolatilityModel("GARCH", 1, 1)
        model.parameters = garch_coefs
        assert_array_equal(model.parameters.to_array(), garch_coefs)
        with pytest.raises(ConfigurationError):
            model.parameters = [1.0]

    def test_filter_array(self, garch_coefs, univariate_normal_data):
        model = VolatilityModel("GARCH", 1, 1, parameters=garch_coefs)
        variance = model.filter(univariate_normal_data)
        assert isinstance(variance, np.ndarray)
        assert variance.shape == univariate_normal_data.shape
        assert variance[0] == pytest.approx(1.0)

    def test_filter_series_keeps_index(self, garch_coefs, univariate_normal_data):
        index = pd.date_range("2020-01-01", periods=univariate_normal_data.size, freq="D")
        data = pd.Series(univariate_normal_data, index=index)
        variance = VolatilityModel("GARCH", 1, 1, parameters=garch_coefs).filter(data)
        assert isinstance(variance, pd.Series)
        assert variance.index.equals(index)

    def test_filter_requires_parameters(self, univariate_normal_data):
        with pytest.raises(NotFittedError):
            VolatilityModel("GARCH", 1, 1).filter(univariate_normal_data)

    def test_loglikelihood_matches_engine(self, agarch_coefs, univariate_normal_data):
        model = VolatilityModel("AGARCH", 1, 1, parameters=agarch_coefs)
        expected = loglikelihood(model.spec, agarch_coefs, univariate_normal_data)
        assert model.loglikelihood(univariate_normal_data) == pytest.approx(expected)

    def test_loglikelihood_explicit_parameters(self, univariate_normal_data):
        model = VolatilityModel("GARCH", 1, 1)
        assert model.loglikelihood(univariate_normal_data, [0.1, 0.6, 0.5]) == -np.inf

    def test_summary_before_fit(self, garch_coefs):
        text = VolatilityModel("GARCH", 1, 1, parameters=garch_coefs).summary()
        assert "GARCH(1,1)" in text
        assert "β₁" in text
        assert "Parameters: not set" in VolatilityModel("GARCH", 1, 1).summary()


# ---- Simulation and forecasting ----

class TestSimulation:
    """Tests for simulate and forecast."""

    def test_shapes_and_positivity(self, agarch_coefs):
        model = VolatilityModel("AGARCH", 1, 1, parameters=agarch_coefs)
        resid, variance = model.simulate(500, burn=100, random_state=1)
        assert resid.shape == variance.shape == (500,)
        assert np.all(variance > 0)
        assert np.all(np.isfinite(resid))

    def test_reproducible(self, egarch_coefs):
        model = VolatilityModel("EGARCH", 1, 1, parameters=egarch_coefs)
        first = model.simulate(200, random_state=3)
        second = model.simulate(200, random_state=np.random.default_rng(3))
        assert_array_equal(first[0], second[0])
        assert_array_equal(first[1], second[1])

    def test_configured_seed(self, garch_coefs):
        set_config("core", "random_seed", 11)
        model = VolatilityModel("GARCH", 1, 1, parameters=garch_coefs)
        assert_array_equal(model.simulate(50)[0], model.simulate(50)[0])

    def test_simulated_variances_follow_recursion(self, garch_coefs):
        model = VolatilityModel("GARCH", 1, 1, parameters=garch_coefs)
        resid, variance = model.simulate(300, burn=0, random_state=5)
        omega, beta, alpha = garch_coefs
        assert_allclose(variance[1:], omega + beta * variance[:-1] + alpha * resid[:-1] ** 2,
                        rtol=1e-12)

    def test_sample_variance_near_long_run(self):
        model = VolatilityModel("GARCH", 1, 1, parameters=[0.05, 0.85, 0.1])
        resid, _ = model.simulate(50000, random_state=2024)
        assert resid.var() == pytest.approx(1.0, rel=0.2)

    def test_non_stationary_parameters(self):
        model = VolatilityModel("GARCH", 1, 1, parameters=[0.1, 0.7, 0.4])
        with pytest.raises(NonStationaryParameterError):
            model.simulate(10)

    def test_requires_parameters(self):
        with pytest.raises(NotFittedError):
            VolatilityModel("GARCH", 1, 1).simulate(10)

    @pytest.mark.parametrize("n_periods, burn", [(0, 10), (10, -1), (2.5, 0)])
    def test_invalid_lengths(self, garch_coefs, n_periods, burn):
        model = VolatilityModel("GARCH", 1, 1, parameters=garch_coefs)
        with pytest.raises(ConfigurationError):
            model.simulate(n_periods, burn=burn)

    def test_garch_forecast(self, garch_coefs, univariate_normal_data):
        model = VolatilityModel("GARCH", 1, 1, parameters=garch_coefs)
        omega, beta, alpha = garch_coefs
        last_h = model.filter(univariate_normal_data)[-1]
        h1 = omega + beta * last_h + alpha * univariate_normal_data[-1] ** 2

        forecasts = model.forecast(300, univariate_normal_data)
        persistence = alpha + beta
        expected = 1.0 + persistence ** np.arange(300) * (h1 - 1.0)
        assert_allclose(forecasts, expected, rtol=1e-10)

    def test_forecast_converges_to_long_run(self, egarch_coefs, univariate_normal_data):
        model = VolatilityModel("EGARCH", 1, 1, parameters=egarch_coefs)
        forecasts = model.forecast(2000, univariate_normal_data)
        assert forecasts[-1] == pytest.approx(np.exp(-2.0), rel=1e-6)

    def test_forecast_requires_data(self, garch_coefs):
        with pytest.raises(NotFittedError):
            VolatilityModel("GARCH", 1, 1, parameters=garch_coefs).forecast(5)


# ---- Estimation ----

class TestEstimation:
    """Tests that run the optimizer."""

    def test_garch_recovers_parameters(self, garch11_process):
        returns, _ = garch11_process
        model = VolatilityModel("GARCH", 1, 1)
        result = model.fit(returns)

        assert isinstance(result, VolatilityFitResult)
        omega, beta, alpha = result.parameters
        assert beta == pytest.approx(0.8, abs=0.15)
        assert alpha == pytest.approx(0.1, abs=0.08)
        assert result.loglikelihood >= model.loglikelihood(returns, [0.05, 0.8, 0.1]) - 1e-3
        assert result.num_obs == returns.size
        assert result.num_params == 3
        assert result.orders == (1, 1)
        assert result.aic == pytest.approx(-2 * result.loglikelihood + 6)
        assert result.bic == pytest.approx(-2 * result.loglikelihood + 3 * np.log(returns.size))
        assert_allclose(result.conditional_variance, model.filter(returns))

    def test_estimate_inside_bounds(self, garch11_process):
        returns, _ = garch11_process
        result = VolatilityModel("AGARCH", 1, 1).fit(returns)
        lower, upper = constraints("AGARCH", 1, 1)
        assert np.all(result.parameters >= lower)
        assert np.all(result.parameters <= upper)
        assert np.isfinite(result.loglikelihood)

    def test_egarch_asymmetry(self, egarch11_process):
        returns, _ = egarch11_process
        result = VolatilityModel("EGARCH", 1, 1).fit(returns)
        omega, beta, alpha, gamma = result.parameters
        assert beta > 0.8
        assert gamma == pytest.approx(-0.1, abs=0.1)

    def test_subset_fit_pins_masked_coefficients(self, garch11_process):
        returns, _ = garch11_process
        model = VolatilityModel("GARCH", 2, 2)
        result = model.fit(returns, subset=(1, 1))
        assert_array_equal(result.mask, [True, True, False, True, False])
        assert result.parameters[2] == 0.0
        assert result.parameters[4] == 0.0
        assert result.orders == (1, 1)
        assert result.num_params == 3
        assert len(result.parameters) == 5
        assert "GARCH(1,1) within GARCH(2,2)" in result.summary()

    def test_subset_fit_agarch(self, garch11_process):
        returns, _ = garch11_process
        result = VolatilityModel("AGARCH", 1, 2).fit(returns, subset=(1, 1))
        #  ω, β₁, α₁, α₂, λ₁, λ₂, ρ₁, ρ₂
        assert_array_equal(result.parameters[[3, 5, 7]], 0.0)
        assert result.num_params == 5

    def test_explicit_starting_values(self, garch11_process):
        returns, _ = garch11_process
        result = VolatilityModel("GARCH", 1, 1).fit(returns, starting_values=[0.1, 0.7, 0.1])
        assert np.isfinite(result.loglikelihood)

    def test_starting_values_length(self, garch11_process):
        returns, _ = garch11_process
        with pytest.raises(ConfigurationError):
            VolatilityModel("GARCH", 1, 1).fit(returns, starting_values=[0.1, 0.7])

    @pytest.mark.parametrize("values", [[0.1, 1.5, 0.1], [0.0, 0.7, 0.1], [0.1, 0.7, -0.2]])
    def test_starting_values_outside_bounds(self, garch11_process, values):
        returns, _ = garch11_process
        with pytest.raises(ParameterError):
            VolatilityModel("GARCH", 1, 1).fit(returns, starting_values=values)

    def test_starting_values_outside_subset_ignored(self, garch11_process):
        returns, _ = garch11_process
        result = VolatilityModel("GARCH", 2, 1).fit(
            returns, subset=(1, 1), starting_values=[0.1, 0.7, 5.0, 0.1]
        )
        assert result.parameters[2] == 0.0
        assert result.orders == (1, 1)

    def test_invalid_subset(self, garch11_process):
        returns, _ = garch11_process
        with pytest.raises(ConfigurationError):
            VolatilityModel("GARCH", 1, 1).fit(returns, subset=(2, 0))

    def test_short_data(self):
        with pytest.raises(DataError):
            VolatilityModel("GARCH", 2, 2).fit(np.array([0.1, 0.2]))

    def test_convergence_warning(self, garch11_process):
        returns, _ = garch11_process
        set_config("numerical", "max_iterations", 1)
        with pytest.warns(ConvergenceWarning):
            result = VolatilityModel("GARCH", 1, 1).fit(returns)
        assert not result.convergence

    def test_series_input_and_forecast_after_fit(self, garch11_process):
        returns, _ = garch11_process
        model = VolatilityModel("GARCH", 1, 1)
        model.fit(pd.Series(returns))
        forecasts = model.forecast(3)
        assert forecasts.shape == (3,)
        assert np.all(forecasts > 0)

    def test_result_reporting(self, garch11_process):
        returns, _ = garch11_process
        model = VolatilityModel("GARCH", 1, 1)
        result = model.fit(returns)

        frame = result.to_frame()
        assert list(frame.index) == ["ω", "β₁", "α₁"]
        assert list(frame.columns) == ["estimate", "lower", "upper", "free"]
        assert_allclose(frame["estimate"].to_numpy(), result.parameters)

        info = result.to_dict()
        assert info["model"] == "GARCH(1,1)"
        assert set(info["parameters"]) == {"ω", "β₁", "α₁"}
        assert info["num_params"] == 3

        text = model.summary()
        assert "Log-likelihood" in text
        assert "Persistence" in text
        assert "Half-life" in text
        assert 0 < result.persistence < 1


# ---- Order selection ----

class TestSelection:
    """Tests for select_model."""

    def test_selects_true_order(self, garch11_process):
        returns, _ = garch11_process
        best, results = select_model("GARCH", 1, 1, returns, criterion="bic", return_all=True)
        assert best.orders == (1, 1)
        assert len(results) == 4
        assert {r.orders for r in results} == {(0, 0), (0, 1), (1, 0), (1, 1)}
        assert all(r.spec == VolatilitySpec("GARCH", 1, 1) for r in results)

    def test_loglikelihood_criterion_prefers_largest_model(self, garch11_process):
        returns, _ = garch11_process
        best, results = select_model("GARCH", 1, 1, returns, criterion="loglikelihood",
                                     return_all=True)
        assert best.loglikelihood == max(r.loglikelihood for r in results)

    def test_criteria_table(self, garch11_process):
        returns, _ = garch11_process
        _, results = select_model("GARCH", 0, 1, returns, criterion="aic", return_all=True)
        table, orders = criteria_table(results)
        assert table.shape == (2, 3)
        assert orders == [(0, 0), (0, 1)]
        assert_allclose(table[:, 1], [r.aic for r in results])

    def test_invalid_criterion(self, garch11_process):
        returns, _ = garch11_process
        with pytest.raises(ConfigurationError):
            select_model("GARCH", 1, 1, returns, criterion="hqic")
