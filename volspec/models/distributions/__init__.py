"""
Innovation distributions for volspec.

Only the standard normal is provided; it evaluates the likelihood of the
standardized residuals produced by the variance recursions.
"""

from .normal import StandardNormal

__all__ = ['StandardNormal']
