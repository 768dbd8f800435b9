"""Pure arithmetic for the TWAP oracle kernel.

Every function is stateless and operates on plain Python ints. Elapsed time
and accumulator deltas are computed with wrapping (modular) subtraction; a
wrapped timestamp or accumulator is normal, not an error.
"""

from __future__ import annotations

from ..cpmm import geometric_mean
from ..fixed_point import (
    Q112,
    UQ112x112,
    fdiv,
    is_at_or_after_u32,
    isqrt,
    to_u32,
    wrapping_sub_u256,
    wrapping_sub_u32,
)

# Canonical 18-decimal output scale.
ONE_E18: int = 10**18
HALF_RESOLUTION: int = 1 << 56


def elapsed_seconds(now: int, last_sample_time: int) -> int:
    """
    ``(now - last_sample_time) mod 2**32``; ``now`` may be any wall-clock value.

    A ``now`` that trails the sample (the pool's clock ran ahead of ours)
    counts as zero elapsed seconds.
    """
    current = to_u32(now)
    if is_at_or_after_u32(last_sample_time, current):
        return 0
    return wrapping_sub_u32(current, last_sample_time)


def sample_moves_backwards(timestamp: int, last_sample_time: int) -> bool:
    """True when ``timestamp`` is strictly earlier than the stored sample."""
    return timestamp != last_sample_time and is_at_or_after_u32(last_sample_time, timestamp)


def window_elapsed(elapsed: int, time_period: int) -> bool:
    """True when a new sample may be taken (``elapsed >= time_period``)."""
    return elapsed >= time_period


def within_tolerance(elapsed: int, time_period: int, non_update_tolerance: int) -> bool:
    """True while a stored average may still be served; the boundary is inclusive."""
    return elapsed <= time_period + non_update_tolerance


def average_price(cumulative_now: int, cumulative_last: int, elapsed: int) -> UQ112x112:
    """
    TWAP over ``elapsed`` seconds, reinterpreted directly as Q112.112.

    The accumulator already integrates a Q112.112 price over seconds, so the
    integer quotient needs no rescaling. The quotient is truncated to 224 bits.
    """
    if elapsed <= 0:
        raise ZeroDivisionError("elapsed must be positive")
    delta = wrapping_sub_u256(cumulative_now, cumulative_last)
    return UQ112x112.from_truncated(delta // elapsed)


def sqrt_k_per_share(reserve0: int, reserve1: int, total_supply: int) -> int:
    """``sqrt(reserve0 * reserve1) / total_supply`` as a Q112.112 int."""
    return fdiv(geometric_mean(reserve0, reserve1), total_supply)


def fair_lp_value_q112(sqrt_k: int, px0: int, px1: int) -> int:
    """
    ``2 * sqrt_k * sqrt(px0) * sqrt(px1)`` in Q112.112.

    Each square root of a Q112.112 price carries a 2**56 scale; dividing by
    2**56 after each multiply keeps the intermediate at Q112.112 instead of
    squaring the scale.
    """
    fair = sqrt_k * 2
    fair = fair * isqrt(px0) // HALF_RESOLUTION
    fair = fair * isqrt(px1) // HALF_RESOLUTION
    return fair


def q112_to_e18(value: int) -> int:
    """Convert a Q112.112 int to the 18-decimal convention (floor)."""
    return (value * ONE_E18) // Q112
