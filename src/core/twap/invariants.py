"""Invariant checkers for the TWAP oracle kernel.

Each function returns True when the invariant holds, and `check_all()` returns
the list of violated invariant IDs (empty = all pass).
"""

from __future__ import annotations

from typing import Callable

from ..fixed_point import UINT224_MAX, UINT256_MAX, UINT32_MAX, UQ112x112
from .types import OracleState


def _is_uint(value: object, max_value: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= max_value


def inv_uninitialized_zeroed(s: OracleState) -> bool:
    if s.initialized:
        return True
    return s == OracleState()


def inv_cumulative_range(s: OracleState) -> bool:
    return _is_uint(s.cumulative_a_last, UINT256_MAX) and _is_uint(s.cumulative_b_last, UINT256_MAX)


def inv_timestamp_range(s: OracleState) -> bool:
    return _is_uint(s.last_sample_time, UINT32_MAX)


def inv_average_range(s: OracleState) -> bool:
    for avg in (s.average_a, s.average_b):
        if not isinstance(avg, UQ112x112) or not _is_uint(avg.raw, UINT224_MAX):
            return False
    return True


def inv_params_range(s: OracleState) -> bool:
    return _is_uint(s.time_period, UINT256_MAX) and _is_uint(s.non_update_tolerance, UINT256_MAX)


def inv_distinct_tokens(s: OracleState) -> bool:
    if not s.initialized:
        return True
    return bool(s.token_a) and bool(s.token_b) and s.token_a != s.token_b


def inv_admin_set(s: OracleState) -> bool:
    if not s.initialized:
        return True
    return bool(s.admin)


# ---------------------------------------------------------------------------
# Registry + check_all
# ---------------------------------------------------------------------------

INVARIANT_REGISTRY: dict[str, Callable[[OracleState], bool]] = {
    "inv_uninitialized_zeroed": inv_uninitialized_zeroed,
    "inv_cumulative_range": inv_cumulative_range,
    "inv_timestamp_range": inv_timestamp_range,
    "inv_average_range": inv_average_range,
    "inv_params_range": inv_params_range,
    "inv_distinct_tokens": inv_distinct_tokens,
    "inv_admin_set": inv_admin_set,
}


def check_all(state: OracleState) -> list[str]:
    """Return list of violated invariant IDs (empty = all pass)."""
    return [
        inv_id
        for inv_id, check_fn in INVARIANT_REGISTRY.items()
        if not check_fn(state)
    ]
