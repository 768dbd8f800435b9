"""Effect functions for the TWAP oracle kernel.

One pure function per action. Each computes the ``Effect`` from the
POST-state (effects observe the state *after* updates).
"""

from __future__ import annotations

from .types import ActionParams, Effect, Event, OracleState


def _update_payload(state: OracleState) -> dict[str, int]:
    return dict(
        average_a=state.average_a.raw,
        average_b=state.average_b.raw,
        cumulative_a=state.cumulative_a_last,
        cumulative_b=state.cumulative_b_last,
        timestamp=state.last_sample_time,
    )


def effect_initialize(state: OracleState, params: ActionParams) -> Effect:
    return Effect(
        event=Event.INITIALIZED,
        time_period=state.time_period,
        non_update_tolerance=state.non_update_tolerance,
        **_update_payload(state),
    )


def effect_set_time_period(state: OracleState, params: ActionParams) -> Effect:
    return Effect(event=Event.TIME_PERIOD_UPDATED, time_period=state.time_period)


def effect_set_non_update_tolerance(state: OracleState, params: ActionParams) -> Effect:
    return Effect(
        event=Event.NON_UPDATE_TOLERANCE_UPDATED,
        non_update_tolerance=state.non_update_tolerance,
    )


def effect_update(state: OracleState, params: ActionParams) -> Effect:
    return Effect(event=Event.UPDATED, **_update_payload(state))
