# volspec/version.py
"""
volspec version information.

Centralizes version tracking so that it is accessible programmatically via
``volspec.__version__``. volspec follows semantic versioning
(MAJOR.MINOR.PATCH).
"""

from typing import Tuple

# Version components
VERSION_MAJOR = 1
VERSION_MINOR = 0
VERSION_PATCH = 0

# Full version string
__version__ = f"{VERSION_MAJOR}.{VERSION_MINOR}.{VERSION_PATCH}"

# Package metadata
__title__ = "volspec"
__description__ = "GARCH-family volatility specification engine"
__license__ = "MIT"

__python_requires__ = ">=3.9"

__dependencies__ = {
    "numpy": ">=1.26.0",
    "scipy": ">=1.11.3",
    "pandas": ">=2.1.1",
    "numba": ">=0.58.0",
}

VERSION_HISTORY = [
    {
        "version": "1.0.0",
        "changes": [
            "GARCH, AGARCH and EGARCH families behind one specification engine",
            "Numba-compiled update kernels with forecast horizons",
            "Subset masks for order selection over a fixed parameter space",
            "Bounded maximum likelihood estimation, simulation and forecasting",
        ],
    },
]


def get_version_info() -> Tuple[int, int, int]:
    """Return the version as a ``(major, minor, patch)`` tuple."""
    return VERSION_MAJOR, VERSION_MINOR, VERSION_PATCH

