"""Read-only queries over an `OracleState` (price and LP fair-value lookups).

Queries never mutate state. They raise the typed errors from ``errors.py``:
- ``NotInitialized`` before the oracle is bound to a pair,
- ``InvalidToken`` for a token outside the tracked pair,
- ``StaleAverage`` once ``time_period + non_update_tolerance`` seconds have
  passed since the last sample (the boundary itself is still fresh),
- ``PriceZero`` when the resolved price is zero (no update has happened yet).

``consult`` skips the staleness and zero checks: it is
the raw conversion primitive and returns 0 before the first update.
"""

from __future__ import annotations

from ...state.pair import PairObservation
from ..fixed_point import Q112, UQ112x112
from .errors import InvalidToken, NoLiquidity, NotInitialized, PoolMismatch, PriceZero, StaleAverage
from .math import (
    ONE_E18,
    elapsed_seconds,
    fair_lp_value_q112,
    q112_to_e18,
    sqrt_k_per_share,
    within_tolerance,
)
from .types import OracleState


def _average_for(state: OracleState, token: str) -> UQ112x112:
    if not state.initialized:
        raise NotInitialized("oracle is not initialized")
    if token == state.token_a:
        return state.average_a
    if token == state.token_b:
        return state.average_b
    raise InvalidToken(f"token {token!r} is not tracked by this oracle")


def is_fresh(state: OracleState, now: int) -> bool:
    """True while the stored averages are within the staleness window."""
    if not state.initialized:
        return False
    elapsed = elapsed_seconds(now, state.last_sample_time)
    return within_tolerance(elapsed, state.time_period, state.non_update_tolerance)


def _require_fresh(state: OracleState, now: int) -> None:
    if not is_fresh(state, now):
        raise StaleAverage(
            f"average older than time_period + non_update_tolerance "
            f"({state.time_period} + {state.non_update_tolerance}s)"
        )


def consult(state: OracleState, token: str, amount_in: int) -> int:
    """Output amount for ``amount_in`` of ``token`` at the stored average."""
    return _average_for(state, token).mul(amount_in).decode144()


def get_raw_average(state: OracleState, token: str, now: int) -> int:
    """Raw Q112.112 average (price of ``token`` in the other token)."""
    average = _average_for(state, token)
    _require_fresh(state, now)
    if average.is_zero:
        raise PriceZero(f"no average price for {token!r}")
    return average.raw


def get_price(state: OracleState, token: str, now: int) -> int:
    """Price of one whole ``token`` in the other token, 18-decimal scaled."""
    _average_for(state, token)
    _require_fresh(state, now)
    price = consult(state, token, ONE_E18)
    if price == 0:
        raise PriceZero(f"price of {token!r} resolves to zero")
    return price


def get_token_a_price_in_b(state: OracleState, now: int) -> int:
    return get_price(state, state.token_a, now)


def get_token_b_price_in_a(state: OracleState, now: int) -> int:
    return get_price(state, state.token_b, now)


def _price_in_quote_q112(state: OracleState, token: str, quote_token: str, now: int) -> int:
    if token == quote_token:
        return Q112
    return get_raw_average(state, token, now)


def get_lp_fair_price(
    state: OracleState,
    quote_token: str,
    now: int,
    observation: PairObservation,
) -> int:
    """
    Manipulation-resistant value of one pool share in ``quote_token`` (18 decimals).

    Uses the geometric mean of the reserves (``sqrt(k)``) and the TWAP prices
    instead of the spot reserve ratio:

        fair = 2 * sqrt(r0 * r1) / supply * sqrt(px0) * sqrt(px1)

    where ``px0``/``px1`` are the Q112.112 prices of each reserve token in the
    quote token (the quote token's own price is exactly 1).
    """
    _average_for(state, quote_token)
    if observation.token0 != state.token_a or observation.token1 != state.token_b:
        raise PoolMismatch("observation does not belong to the tracked pair")
    if observation.total_supply == 0:
        raise NoLiquidity("pool has no outstanding shares")

    sqrt_k = sqrt_k_per_share(observation.reserve0, observation.reserve1, observation.total_supply)
    px0 = _price_in_quote_q112(state, state.token_a, quote_token, now)
    px1 = _price_in_quote_q112(state, state.token_b, quote_token, now)
    return q112_to_e18(fair_lp_value_q112(sqrt_k, px0, px1))


def get_lp_price_in_b(state: OracleState, now: int, observation: PairObservation) -> int:
    return get_lp_fair_price(state, state.token_b, now, observation)


def get_lp_price_in_a(state: OracleState, now: int, observation: PairObservation) -> int:
    return get_lp_fair_price(state, state.token_a, now, observation)


# Names used by the rDPX/ETH deployment, where token_a is rDPX and token_b is WETH.
get_rdpx_price_in_eth = get_token_a_price_in_b
get_eth_price_in_rdpx = get_token_b_price_in_a
get_lp_price_in_eth = get_lp_price_in_b
get_lp_price_in_rdpx = get_lp_price_in_a
