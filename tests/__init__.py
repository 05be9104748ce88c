"""
volspec test suite

Tests for the volatility specification engine (layouts, constraints, subset
masks, starting values, unconditional variance, update kernels) and for the
estimation, simulation and forecasting front end built on it.
"""
