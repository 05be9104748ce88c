import math

from numba import jit


"""
Performance-critical recursions for the volatility families, accelerated with Numba.

Every family provides two compiled functions:

- ``<family>_update(ht, lht, zt, at, t, coefs, p, q, horizon)`` computes the
  conditional variance at position ``t`` from the lags ``t-1-i`` of the
  aligned history buffers and writes ``ht[t]`` and ``lht[t]``. Nothing else
  is written.
- ``<family>_recursion(resids, coefs, p, q, h0, ht, lht, zt)`` assigns the
  presample variance ``h0`` to the first ``max(p, q)`` positions, runs the
  update once per remaining observation and standardizes every residual.

The parameter vector is flat: ``coefs[0]`` is the intercept, ``coefs[1:1+p]``
the variance-lag coefficients, ``coefs[1+p:1+p+q]`` the shock-lag
coefficients and any further ``q``-length segments follow in order. Lengths
are validated before these functions are reached.

``horizon`` supports multi-step forecasting: at horizon ``k`` the shocks at
lags ``i < k - 1`` have not been observed and their shock term is replaced by
its expectation under a standard normal shock.
"""

# Floor applied to the negated raw update when it is not strictly positive
MIN_VARIANCE = 1e-300

SQRT2_OV_PI = 0.79788456080286541  # sqrt(2/pi)
SQRT2 = 1.4142135623730951


@jit(nopython=True, cache=True)
def _positive_variance(value):
    """Map a raw additive update onto a strictly positive variance.

    Non-positive values are replaced by their negation, floored at
    MIN_VARIANCE. NaN passes through.
    """
    if not value > 0.0:
        value = -value
        if value < MIN_VARIANCE:
            value = MIN_VARIANCE
    return value


@jit(nopython=True, cache=True)
def agarch_kappa(shift, skew):
    """E[|z - shift| - skew * (z - shift)] for z ~ N(0, 1)."""
    return (shift * math.erf(shift / SQRT2)
            + SQRT2_OV_PI * math.exp(-0.5 * shift * shift)
            + skew * shift)


# GARCH model core functions
@jit(nopython=True, cache=True)
def garch_update(ht, lht, zt, at, t, coefs, p, q, horizon):
    """GARCH(p,q) update.

    h_t = ω + Σ β_i h_{t-i} + Σ α_i a²_{t-i}
    """
    mht = coefs[0]
    for i in range(p):
        mht += coefs[1 + i] * ht[t - 1 - i]
    for i in range(q):
        if i < horizon - 1:
            mht += coefs[1 + p + i] * ht[t - 1 - i]
        else:
            mht += coefs[1 + p + i] * at[t - 1 - i] * at[t - 1 - i]
    mht = _positive_variance(mht)
    ht[t] = mht
    lht[t] = math.log(mht)


@jit(nopython=True, cache=True)
def garch_recursion(resids, coefs, p, q, h0, ht, lht, zt):
    """Compute GARCH(p,q) conditional variances over a full sample.

    Args:
        resids: Raw residuals
        coefs: Flat parameter vector
        p: Number of variance lags
        q: Number of shock lags
        h0: Presample variance
        ht: Pre-allocated array for conditional variances
        lht: Pre-allocated array for log variances
        zt: Pre-allocated array for standardized residuals
    """
    T = resids.shape[0]
    r = max(p, q)
    lh0 = math.log(h0)
    for t in range(T):
        if t < r:
            ht[t] = h0
            lht[t] = lh0
        else:
            garch_update(ht, lht, zt, resids, t, coefs, p, q, 1)
        zt[t] = resids[t] / math.sqrt(ht[t])


# AGARCH model core functions
@jit(nopython=True, cache=True)
def agarch_update(ht, lht, zt, at, t, coefs, p, q, horizon):
    """Asymmetric GARCH(p,q) update with per-lag shift and skew.

    h_t = ω + Σ β_i h_{t-i} + Σ α_i (|z_{t-i} - λ_i| - ρ_i (z_{t-i} - λ_i)) h_{t-i}
    """
    mht = coefs[0]
    for i in range(p):
        mht += coefs[1 + i] * ht[t - 1 - i]
    a0 = 1 + p
    l0 = a0 + q
    r0 = l0 + q
    for i in range(q):
        alpha = coefs[a0 + i]
        shift = coefs[l0 + i]
        skew = coefs[r0 + i]
        if i < horizon - 1:
            mht += alpha * agarch_kappa(shift, skew) * ht[t - 1 - i]
        else:
            dev = zt[t - 1 - i] - shift
            mht += alpha * (abs(dev) - skew * dev) * ht[t - 1 - i]
    mht = _positive_variance(mht)
    ht[t] = mht
    lht[t] = math.log(mht)


@jit(nopython=True, cache=True)
def agarch_recursion(resids, coefs, p, q, h0, ht, lht, zt):
    """Compute AGARCH(p,q) conditional variances over a full sample.

    Args:
        resids: Raw residuals
        coefs: Flat parameter vector
        p: Number of variance lags
        q: Number of shock lags
        h0: Presample variance
        ht: Pre-allocated array for conditional variances
        lht: Pre-allocated array for log variances
        zt: Pre-allocated array for standardized residuals
    """
    T = resids.shape[0]
    r = max(p, q)
    lh0 = math.log(h0)
    for t in range(T):
        if t < r:
            ht[t] = h0
            lht[t] = lh0
        else:
            agarch_update(ht, lht, zt, resids, t, coefs, p, q, 1)
        zt[t] = resids[t] / math.sqrt(ht[t])


# EGARCH model core functions
@jit(nopython=True, cache=True)
def egarch_update(ht, lht, zt, at, t, coefs, p, q, horizon):
    """EGARCH(p,q) update in log-variance space.

    ln h_t = ω + Σ β_i ln h_{t-i} + Σ [α_i (|z_{t-i}| - √(2/π)) + γ_i z_{t-i}]
    """
    lh = coefs[0]
    for i in range(p):
        lh += coefs[1 + i] * lht[t - 1 - i]
    a0 = 1 + p
    g0 = a0 + q
    for i in range(horizon - 1, q):
        z = zt[t - 1 - i]
        lh += coefs[a0 + i] * (abs(z) - SQRT2_OV_PI) + coefs[g0 + i] * z
    lht[t] = lh
    ht[t] = math.exp(lh)


@jit(nopython=True, cache=True)
def egarch_recursion(resids, coefs, p, q, h0, ht, lht, zt):
    """Compute EGARCH(p,q) conditional variances over a full sample.

    Args:
        resids: Raw residuals
        coefs: Flat parameter vector
        p: Number of variance lags
        q: Number of shock lags
        h0: Presample variance
        ht: Pre-allocated array for conditional variances
        lht: Pre-allocated array for log variances
        zt: Pre-allocated array for standardized residuals
    """
    T = resids.shape[0]
    r = max(p, q)
    lh0 = math.log(h0)
    for t in range(T):
        if t < r:
            ht[t] = h0
            lht[t] = lh0
        else:
            egarch_update(ht, lht, zt, resids, t, coefs, p, q, 1)
        zt[t] = resids[t] / math.sqrt(ht[t])

