"""
Core TWAP oracle algorithms
"""

from .cpmm import (
    swap_exact_in,
    compute_lp_mint,
    compute_lp_burn,
    geometric_mean,
)
from .fixed_point import (
    Q112,
    RESOLUTION,
    FixedPointOverflow,
    UQ112x112,
    UQ144x112,
    fdiv,
    isqrt,
)

__all__ = [
    "swap_exact_in",
    "compute_lp_mint",
    "compute_lp_burn",
    "geometric_mean",
    "Q112",
    "RESOLUTION",
    "FixedPointOverflow",
    "UQ112x112",
    "UQ144x112",
    "fdiv",
    "isqrt",
]
