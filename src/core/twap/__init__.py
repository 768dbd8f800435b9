"""`twap`: pure-Python TWAP oracle over a constant-product pair's price accumulators.

Two collaborating parts share one immutable `OracleState`:
- the accumulator tracker (``engine.step``): initialize, update, admin setters;
- the query engine (``queries``): consult, raw averages, 18-decimal prices and
  fair LP-share value, all gated by the staleness window.

Properties:
- deterministic, integer-only transitions (Q112.112 fixed point, no floats),
- immutable state (frozen dataclasses),
- fail-closed guards and invariant checks; a rejected step leaves state unchanged.

Public API:
- `initial_state() -> OracleState`
- `step(state, params) -> StepResult`
- `step_or_raise(state, params) -> StepResult` (raises on rejection)
- `consult`, `get_raw_average`, `get_price`, `get_lp_fair_price`, `is_fresh`
"""

from .engine import error_for_rejection, step, step_or_raise
from .errors import (
    AlreadyInitialized,
    InvalidToken,
    NoLiquidity,
    NotAdmin,
    NotInitialized,
    OracleError,
    OracleInvariantError,
    OracleParamError,
    PeriodNotElapsed,
    PoolMismatch,
    PriceZero,
    StaleAverage,
)
from .queries import (
    consult,
    get_eth_price_in_rdpx,
    get_lp_fair_price,
    get_lp_price_in_a,
    get_lp_price_in_b,
    get_lp_price_in_eth,
    get_lp_price_in_rdpx,
    get_price,
    get_raw_average,
    get_rdpx_price_in_eth,
    get_token_a_price_in_b,
    get_token_b_price_in_a,
    is_fresh,
)
from .state import initial_state, state_from_dict, state_to_dict
from .types import (
    DEFAULT_NON_UPDATE_TOLERANCE,
    DEFAULT_TIME_PERIOD,
    Action,
    ActionParams,
    Effect,
    Event,
    OracleState,
    StepResult,
)

__all__ = [
    "step",
    "step_or_raise",
    "error_for_rejection",
    "initial_state",
    "state_from_dict",
    "state_to_dict",
    "consult",
    "get_raw_average",
    "get_price",
    "get_token_a_price_in_b",
    "get_token_b_price_in_a",
    "get_rdpx_price_in_eth",
    "get_eth_price_in_rdpx",
    "get_lp_fair_price",
    "get_lp_price_in_a",
    "get_lp_price_in_b",
    "get_lp_price_in_eth",
    "get_lp_price_in_rdpx",
    "is_fresh",
    "Action",
    "ActionParams",
    "Effect",
    "Event",
    "OracleState",
    "StepResult",
    "DEFAULT_TIME_PERIOD",
    "DEFAULT_NON_UPDATE_TOLERANCE",
    "OracleError",
    "AlreadyInitialized",
    "NotInitialized",
    "NoLiquidity",
    "NotAdmin",
    "PeriodNotElapsed",
    "PoolMismatch",
    "InvalidToken",
    "PriceZero",
    "StaleAverage",
    "OracleParamError",
    "OracleInvariantError",
]
