"""Dispatch-table engine for the TWAP oracle kernel.

``step(state, params)`` is the single entry point for mutating actions. It:

1. Validates parameter domains.
2. Dispatches to the correct guard / update / effect functions.
3. Checks all invariants on the post-state.
4. Returns a ``StepResult`` (accepted or rejected with reason).

A rejected step never produces a state: the caller keeps the PRE-state.
"""

from __future__ import annotations

from typing import Callable, Optional

from ...state.pair import PairObservation
from ..fixed_point import UINT112_MAX, UINT256_MAX, UINT32_MAX
from .effects import (
    effect_initialize,
    effect_set_non_update_tolerance,
    effect_set_time_period,
    effect_update,
)
from .errors import ERRORS_BY_CODE, OracleError, OracleInvariantError, OracleParamError
from .guards import (
    guard_initialize,
    guard_set_non_update_tolerance,
    guard_set_time_period,
    guard_update,
)
from .invariants import check_all
from .types import Action, ActionParams, Effect, OracleState, StepResult
from .updates import (
    apply_initialize,
    apply_set_non_update_tolerance,
    apply_set_time_period,
    apply_update,
)

GuardFn = Callable[[OracleState, ActionParams], Optional[str]]
UpdateFn = Callable[[OracleState, ActionParams], OracleState]
EffectFn = Callable[[OracleState, ActionParams], Effect]

_DISPATCH: dict[Action, tuple[GuardFn, UpdateFn, EffectFn]] = {
    Action.INITIALIZE: (
        guard_initialize, apply_initialize, effect_initialize,
    ),
    Action.SET_TIME_PERIOD: (
        guard_set_time_period, apply_set_time_period, effect_set_time_period,
    ),
    Action.SET_NON_UPDATE_TOLERANCE: (
        guard_set_non_update_tolerance, apply_set_non_update_tolerance, effect_set_non_update_tolerance,
    ),
    Action.UPDATE: (
        guard_update, apply_update, effect_update,
    ),
}

# -- Parameter domain bounds -------------------------------------------------

# Per-action int bounds: list of (field_name, min_val, max_val).
_PARAM_BOUNDS: dict[Action, list[tuple[str, int, int]]] = {
    Action.INITIALIZE: [
        ("time_period", 0, UINT256_MAX),
        ("non_update_tolerance", 0, UINT256_MAX),
    ],
    Action.SET_TIME_PERIOD: [
        ("time_period", 0, UINT256_MAX),
    ],
    Action.SET_NON_UPDATE_TOLERANCE: [
        ("non_update_tolerance", 0, UINT256_MAX),
    ],
    Action.UPDATE: [
        ("now", 0, UINT256_MAX),
    ],
}

_OBSERVATION_BOUNDS: list[tuple[str, int, int]] = [
    ("reserve0", 0, UINT112_MAX),
    ("reserve1", 0, UINT112_MAX),
    ("block_timestamp_last", 0, UINT32_MAX),
    ("price0_cumulative_last", 0, UINT256_MAX),
    ("price1_cumulative_last", 0, UINT256_MAX),
    ("total_supply", 0, UINT256_MAX),
]

_NEEDS_OBSERVATION = frozenset({Action.INITIALIZE, Action.UPDATE})


def _out_of_range(val: object, lo: int, hi: int) -> bool:
    if not isinstance(val, int) or isinstance(val, bool):
        return True
    return val < lo or val > hi


def _validate_observation(obs: object) -> str | None:
    if not isinstance(obs, PairObservation):
        return "param_domain:observation"
    if not obs.token0 or not obs.token1 or obs.token0 == obs.token1:
        return "param_domain:observation.tokens"
    for field, lo, hi in _OBSERVATION_BOUNDS:
        if _out_of_range(getattr(obs, field), lo, hi):
            return f"param_domain:observation.{field}"
    return None


def _validate_params(params: ActionParams) -> str | None:
    """Check parameter domain bounds. Returns rejection reason or None."""
    for field, lo, hi in _PARAM_BOUNDS.get(params.action, []):
        if _out_of_range(getattr(params, field), lo, hi):
            return f"param_domain:{field}"
    if params.action == Action.INITIALIZE:
        if not isinstance(params.pool_ref, str) or not params.pool_ref:
            return "param_domain:pool_ref"
        if not isinstance(params.admin, str) or not params.admin:
            return "param_domain:admin"
    if params.action in _NEEDS_OBSERVATION:
        return _validate_observation(params.observation)
    return None


def step(state: OracleState, params: ActionParams) -> StepResult:
    """Execute one action against the given state.

    Returns ``StepResult`` with ``accepted=True`` on success,
    or ``accepted=False`` with a ``rejection`` reason string.
    """
    entry = _DISPATCH.get(params.action)
    if entry is None:
        return StepResult(accepted=False, rejection=f"unknown_action:{params.action}")

    domain_err = _validate_params(params)
    if domain_err is not None:
        return StepResult(accepted=False, rejection=domain_err)

    guard_fn, update_fn, effect_fn = entry

    rejection = guard_fn(state, params)
    if rejection is not None:
        return StepResult(accepted=False, rejection=rejection)

    new_state = update_fn(state, params)

    violations = check_all(new_state)
    if violations:
        return StepResult(
            accepted=False,
            rejection=f"invariant:{','.join(violations)}",
        )

    effect = effect_fn(new_state, params)
    return StepResult(accepted=True, state=new_state, effect=effect)


def error_for_rejection(reason: str) -> OracleError:
    """Map a ``StepResult.rejection`` string to the matching exception instance."""
    if reason.startswith("param_domain:"):
        return OracleParamError(reason)
    if reason.startswith("invariant:"):
        return OracleInvariantError(reason.removeprefix("invariant:").split(","))
    cls = ERRORS_BY_CODE.get(reason)
    if cls is None:
        return OracleError(reason)
    return cls(reason)


def step_or_raise(state: OracleState, params: ActionParams) -> StepResult:
    """Like ``step()`` but raises on rejection instead of returning a result.

    Raises:
        OracleParamError: Parameter outside its domain.
        OracleInvariantError: Post-state violates one or more invariants.
        OracleError: The matching subclass for a failed guard
            (``AlreadyInitialized``, ``NoLiquidity``, ``NotAdmin``, ...).
    """
    result = step(state, params)
    if result.accepted:
        return result
    raise error_for_rejection(result.rejection or "")
