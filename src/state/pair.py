"""
Constant-product pair as seen by the oracle.

The oracle consumes a pool strictly through point-in-time reads:
- the two constituent token ids,
- reserves of both tokens,
- the cumulative price accumulators and the timestamp they were last advanced,
- total outstanding share supply.

`PairReader` is that read interface. `SimulatedPair` is an in-memory pool that
implements it (used by tests and `tools/twap_oracle_sim.py`); it accrues its
accumulators exactly like an on-chain x*y=k pair: before every reserve change,
each accumulator grows by ``reserve_other / reserve_self`` (Q112.112) times
the seconds elapsed since the previous change, all in wrapping u32/u256 space.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Protocol, Tuple

from ..core.cpmm import MIN_LP_LOCK, compute_lp_burn, compute_lp_mint
from ..core.cpmm import swap_exact_in as cpmm_swap_exact_in
from ..core.fixed_point import (
    UINT112_MAX,
    UQ112x112,
    is_at_or_after_u32,
    to_u32,
    wrapping_add_u256,
    wrapping_sub_u32,
)


LOCK_HOLDER = "0x" + "00" * 20


@dataclass(frozen=True)
class PairObservation:
    """Point-in-time read of a pair."""

    token0: str
    token1: str
    reserve0: int
    reserve1: int
    block_timestamp_last: int
    price0_cumulative_last: int
    price1_cumulative_last: int
    total_supply: int


class PairReader(Protocol):
    def observe(self) -> PairObservation:
        ...


def _accrue(
    price0_cumulative: int,
    price1_cumulative: int,
    reserve0: int,
    reserve1: int,
    elapsed: int,
) -> Tuple[int, int]:
    if elapsed == 0 or reserve0 == 0 or reserve1 == 0:
        return price0_cumulative, price1_cumulative
    p0 = wrapping_add_u256(price0_cumulative, UQ112x112.fraction(reserve1, reserve0).raw * elapsed)
    p1 = wrapping_add_u256(price1_cumulative, UQ112x112.fraction(reserve0, reserve1).raw * elapsed)
    return p0, p1


def current_cumulative_prices(observation: PairObservation, now: int) -> Tuple[int, int, int]:
    """
    Cumulative prices as of ``now`` without requiring the pair to be touched.

    If the pair's last accrual is older than ``now``, the counterfactual growth
    since then (at the current reserves) is added. A pair whose timestamp is at
    or ahead of ``now`` is taken as-is, stamped with its own timestamp. Returns
    ``(price0_cumulative, price1_cumulative, timestamp_u32)``.
    """
    timestamp = to_u32(now)
    pool_timestamp = observation.block_timestamp_last
    p0 = observation.price0_cumulative_last
    p1 = observation.price1_cumulative_last
    if is_at_or_after_u32(pool_timestamp, timestamp):
        return p0, p1, pool_timestamp
    elapsed = wrapping_sub_u32(timestamp, pool_timestamp)
    p0, p1 = _accrue(p0, p1, observation.reserve0, observation.reserve1, elapsed)
    return p0, p1, timestamp


@dataclass
class SimulatedPair:
    """
    Mutable in-memory x*y=k pair exposing the `PairReader` interface.

    `now` arguments are wall-clock seconds; they are reduced to u32 internally.
    """

    token0: str
    token1: str
    fee_bps: int = 30
    reserve0: int = 0
    reserve1: int = 0
    total_supply: int = 0
    block_timestamp_last: int = 0
    price0_cumulative_last: int = 0
    price1_cumulative_last: int = 0
    _lp: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.token0 or not self.token1:
            raise ValueError("token ids must be non-empty")
        if self.token0 == self.token1:
            raise ValueError("token0 and token1 must differ")

    def observe(self) -> PairObservation:
        return PairObservation(
            token0=self.token0,
            token1=self.token1,
            reserve0=self.reserve0,
            reserve1=self.reserve1,
            block_timestamp_last=self.block_timestamp_last,
            price0_cumulative_last=self.price0_cumulative_last,
            price1_cumulative_last=self.price1_cumulative_last,
            total_supply=self.total_supply,
        )

    def lp_balance(self, owner: str) -> int:
        return self._lp.get(owner, 0)

    def _update(self, balance0: int, balance1: int, now: int) -> None:
        if balance0 > UINT112_MAX or balance1 > UINT112_MAX:
            raise ValueError("reserve overflow: balances must fit in 112 bits")
        timestamp = to_u32(now)
        elapsed = wrapping_sub_u32(timestamp, self.block_timestamp_last)
        # Accrue at the *old* reserves: the price held over the elapsed span.
        self.price0_cumulative_last, self.price1_cumulative_last = _accrue(
            self.price0_cumulative_last,
            self.price1_cumulative_last,
            self.reserve0,
            self.reserve1,
            elapsed,
        )
        self.reserve0 = balance0
        self.reserve1 = balance1
        self.block_timestamp_last = timestamp

    def sync(self, now: int) -> None:
        """Advance the accumulators to ``now`` without changing reserves."""
        self._update(self.reserve0, self.reserve1, now)

    def mint(self, to: str, amount0: int, amount1: int, now: int) -> int:
        liquidity = compute_lp_mint(
            reserve0=self.reserve0,
            reserve1=self.reserve1,
            amount0=amount0,
            amount1=amount1,
            lp_supply=self.total_supply,
        )
        if self.total_supply == 0:
            self._lp[LOCK_HOLDER] = MIN_LP_LOCK
            self.total_supply = MIN_LP_LOCK
        self._lp[to] = self._lp.get(to, 0) + liquidity
        self.total_supply += liquidity
        self._update(self.reserve0 + amount0, self.reserve1 + amount1, now)
        return liquidity

    def burn(self, owner: str, lp_amount: int, now: int) -> Tuple[int, int]:
        held = self._lp.get(owner, 0)
        if lp_amount > held:
            raise ValueError(f"insufficient LP balance: {held} < {lp_amount}")
        amount0, amount1 = compute_lp_burn(
            lp_amount=lp_amount,
            reserve0=self.reserve0,
            reserve1=self.reserve1,
            lp_supply=self.total_supply,
        )
        if amount0 == 0 or amount1 == 0:
            raise ValueError("insufficient liquidity burned")
        self._lp[owner] = held - lp_amount
        self.total_supply -= lp_amount
        self._update(self.reserve0 - amount0, self.reserve1 - amount1, now)
        return amount0, amount1

    def swap_exact_in(self, token_in: str, amount_in: int, now: int) -> int:
        if token_in == self.token0:
            amount_out, (new_in, new_out) = cpmm_swap_exact_in(
                self.reserve0, self.reserve1, amount_in, self.fee_bps,
            )
            self._update(new_in, new_out, now)
        elif token_in == self.token1:
            amount_out, (new_in, new_out) = cpmm_swap_exact_in(
                self.reserve1, self.reserve0, amount_in, self.fee_bps,
            )
            self._update(new_out, new_in, now)
        else:
            raise ValueError(f"unknown token: {token_in}")
        return amount_out
