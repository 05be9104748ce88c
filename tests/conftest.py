'''
Pytest configuration and fixtures for the volspec test suite.

Provides seeded data generators, reference parameter vectors for every family,
hypothesis strategies for orders and a fixture that restores the default
configuration after each test.
'''

import math
from typing import Tuple

import numpy as np
import pytest
from hypothesis import HealthCheck, settings, strategies as st

from volspec.core.config import reset_config
from volspec.core.types import VolatilityFamily


settings.register_profile(
    "volspec",
    max_examples=50,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)
settings.load_profile("volspec")

ALL_FAMILIES = list(VolatilityFamily)


# ---- Configuration isolation ----

@pytest.fixture(autouse=True)
def default_config():
    """Restore the default configuration after every test."""
    yield
    reset_config()


# ---- Basic Data Generation Fixtures ----

@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def sample_size() -> int:
    """Default sample size for test data."""
    return 1000


@pytest.fixture
def univariate_normal_data(rng: np.random.Generator, sample_size: int) -> np.ndarray:
    """Generate univariate normal random data for testing."""
    return rng.standard_normal(sample_size)


@pytest.fixture
def garch11_process(rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    """Generate a GARCH(1,1) process for testing.

    Returns:
        Tuple containing (returns, conditional_variances)
    """
    sample_size = 2000
    omega = 0.05
    alpha = 0.1
    beta = 0.8

    returns = np.zeros(sample_size)
    variances = np.zeros(sample_size)

    variances[0] = omega / (1 - alpha - beta)
    returns[0] = np.sqrt(variances[0]) * rng.standard_normal()

    for t in range(1, sample_size):
        variances[t] = omega + alpha * returns[t-1]**2 + beta * variances[t-1]
        returns[t] = np.sqrt(variances[t]) * rng.standard_normal()

    return returns, variances


@pytest.fixture
def egarch11_process(rng: np.random.Generator) -> Tuple[np.ndarray, np.ndarray]:
    """Generate an EGARCH(1,1) process for testing.

    Returns:
        Tuple containing (returns, conditional_variances)
    """
    sample_size = 2000
    omega = -0.1
    alpha = 0.2
    gamma = -0.1
    beta = 0.95

    returns = np.zeros(sample_size)
    log_variances = np.zeros(sample_size)
    variances = np.zeros(sample_size)

    log_variances[0] = omega / (1 - beta)
    variances[0] = np.exp(log_variances[0])
    returns[0] = np.sqrt(variances[0]) * rng.standard_normal()

    for t in range(1, sample_size):
        z = returns[t-1] / np.sqrt(variances[t-1])
        log_variances[t] = (omega + beta * log_variances[t-1]
                            + alpha * (np.abs(z) - math.sqrt(2 / math.pi)) + gamma * z)
        variances[t] = np.exp(log_variances[t])
        returns[t] = np.sqrt(variances[t]) * rng.standard_normal()

    return returns, variances


# ---- Reference parameter vectors ----

@pytest.fixture
def garch_coefs() -> np.ndarray:
    """GARCH(1,1): ω, β₁, α₁."""
    return np.array([0.05, 0.85, 0.1])


@pytest.fixture
def agarch_coefs() -> np.ndarray:
    """AGARCH(1,1): ω, β₁, α₁, λ₁, ρ₁."""
    return np.array([0.05, 0.8, 0.1, 0.3, -0.2])


@pytest.fixture
def egarch_coefs() -> np.ndarray:
    """EGARCH(1,1): ω, β₁, α₁, γ₁."""
    return np.array([-0.1, 0.95, 0.2, -0.1])


@pytest.fixture
def family_coefs(garch_coefs, agarch_coefs, egarch_coefs):
    """Feasible (1,1) parameter vectors keyed by family."""
    return {
        VolatilityFamily.GARCH: garch_coefs,
        VolatilityFamily.AGARCH: agarch_coefs,
        VolatilityFamily.EGARCH: egarch_coefs,
    }


# ---- Hypothesis Strategies for Property-Based Testing ----

families = st.sampled_from(ALL_FAMILIES)
orders = st.tuples(st.integers(min_value=0, max_value=6), st.integers(min_value=0, max_value=6))


@st.composite
def order_with_subset(draw):
    """Draw ``(p, q)`` and a reduced order ``(a, b)`` with ``a <= p`` and ``b <= q``."""
    p, q = draw(orders)
    a = draw(st.integers(min_value=0, max_value=p))
    b = draw(st.integers(min_value=0, max_value=q))
    return (p, q), (a, b)
