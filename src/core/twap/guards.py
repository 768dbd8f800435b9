"""Guard functions for the TWAP oracle kernel.

One pure function per action. Each returns ``None`` when the action is
allowed in the given PRE-state, or the rejection code of the first failed
precondition (see ``errors.py`` for the code -> exception mapping).

Parameter domains (presence of an observation, ranges) are checked by the
engine before any guard runs.
"""

from __future__ import annotations

from ...state.pair import PairObservation, current_cumulative_prices
from .errors import (
    AlreadyInitialized,
    NoLiquidity,
    NotAdmin,
    NotInitialized,
    PeriodNotElapsed,
    PoolMismatch,
)
from .math import elapsed_seconds, sample_moves_backwards, window_elapsed
from .types import ActionParams, OracleState


def _observation(params: ActionParams) -> PairObservation:
    if params.observation is None:
        raise TypeError(f"{params.action.value} requires an observation")
    return params.observation


def _guard_admin(state: OracleState, params: ActionParams) -> str | None:
    if not state.initialized:
        return NotInitialized.code
    if params.caller != state.admin:
        return NotAdmin.code
    return None


def guard_initialize(state: OracleState, params: ActionParams) -> str | None:
    if state.initialized:
        return AlreadyInitialized.code
    obs = _observation(params)
    if obs.reserve0 == 0 or obs.reserve1 == 0:
        return NoLiquidity.code
    return None


def guard_set_time_period(state: OracleState, params: ActionParams) -> str | None:
    return _guard_admin(state, params)


def guard_set_non_update_tolerance(state: OracleState, params: ActionParams) -> str | None:
    return _guard_admin(state, params)


def guard_update(state: OracleState, params: ActionParams) -> str | None:
    if not state.initialized:
        return NotInitialized.code
    obs = _observation(params)
    if obs.token0 != state.token_a or obs.token1 != state.token_b:
        return PoolMismatch.code
    _p0, _p1, timestamp = current_cumulative_prices(obs, params.now)
    if sample_moves_backwards(timestamp, state.last_sample_time):
        return PeriodNotElapsed.code
    if not window_elapsed(elapsed_seconds(timestamp, state.last_sample_time), state.time_period):
        return PeriodNotElapsed.code
    return None
