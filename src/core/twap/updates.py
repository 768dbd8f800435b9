"""State transition functions for the TWAP oracle kernel.

One pure function per action. Each returns a new `OracleState` computed from
the PRE-state via `dataclasses.replace()`; guards have already passed.
"""

from __future__ import annotations

from dataclasses import replace

from ...state.pair import current_cumulative_prices
from .math import average_price, elapsed_seconds
from .types import ActionParams, OracleState


def apply_initialize(state: OracleState, params: ActionParams) -> OracleState:
    obs = params.observation
    assert obs is not None
    # Baseline is the pair's own last accrual, not a counterfactual one.
    return replace(
        state,
        pool_ref=params.pool_ref,
        token_a=obs.token0,
        token_b=obs.token1,
        cumulative_a_last=obs.price0_cumulative_last,
        cumulative_b_last=obs.price1_cumulative_last,
        last_sample_time=obs.block_timestamp_last,
        time_period=params.time_period,
        non_update_tolerance=params.non_update_tolerance,
        initialized=True,
        admin=params.admin,
    )


def apply_set_time_period(state: OracleState, params: ActionParams) -> OracleState:
    return replace(state, time_period=params.time_period)


def apply_set_non_update_tolerance(state: OracleState, params: ActionParams) -> OracleState:
    return replace(state, non_update_tolerance=params.non_update_tolerance)


def apply_update(state: OracleState, params: ActionParams) -> OracleState:
    obs = params.observation
    assert obs is not None
    cumulative_a, cumulative_b, timestamp = current_cumulative_prices(obs, params.now)
    elapsed = elapsed_seconds(timestamp, state.last_sample_time)

    average_a = state.average_a
    average_b = state.average_b
    # elapsed == 0 only when time_period == 0: nothing to average over.
    if elapsed > 0:
        average_a = average_price(cumulative_a, state.cumulative_a_last, elapsed)
        average_b = average_price(cumulative_b, state.cumulative_b_last, elapsed)

    return replace(
        state,
        cumulative_a_last=cumulative_a,
        cumulative_b_last=cumulative_b,
        last_sample_time=timestamp,
        average_a=average_a,
        average_b=average_b,
    )
