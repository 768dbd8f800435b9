"""
Constant Product Market Maker (CPMM) math.

Integer-only swap and liquidity formulas for an x*y=k pool. The oracle never
calls these; they drive `src/state/pair.py`, the in-memory pool the oracle is
exercised against.

Rounding rules:
- fees round up (ceil) so the pool never undercharges,
- outputs and LP amounts round down (floor) so the pool never overpays.
"""

from __future__ import annotations

from typing import Tuple

from .fixed_point import isqrt


# Minimum LP lock to prevent division by zero attacks
MIN_LP_LOCK = 1000
BPS_DENOM = 10_000


def compute_fee_total(gross_amount: int, fee_bps: int) -> int:
    """``fee_total = ceil(gross_amount * fee_bps / 10_000)``."""
    if gross_amount < 0:
        raise ValueError(f"gross_amount must be non-negative: {gross_amount}")
    if not (0 <= fee_bps <= BPS_DENOM):
        raise ValueError(f"fee_bps must be in [0, {BPS_DENOM}]: {fee_bps}")
    return (gross_amount * fee_bps + BPS_DENOM - 1) // BPS_DENOM


def swap_exact_in(
    reserve_in: int,
    reserve_out: int,
    amount_in: int,
    fee_bps: int,
) -> Tuple[int, Tuple[int, int]]:
    """
    Compute output amount for an exact-in swap.

        fee = ceil(amount_in * fee_bps / 10_000)
        net_in = amount_in - fee
        amount_out = floor(reserve_out * net_in / (reserve_in + net_in))

    The fee stays in the pool, so ``new_reserve_in * new_reserve_out >= k``.

    Returns:
        Tuple of (amount_out, (new_reserve_in, new_reserve_out))

    Raises:
        ValueError: If inputs are invalid or would violate invariants
    """
    if reserve_in <= 0 or reserve_out <= 0:
        raise ValueError(f"Reserves must be positive: ({reserve_in}, {reserve_out})")
    if amount_in <= 0:
        raise ValueError(f"amount_in must be positive: {amount_in}")

    fee = compute_fee_total(amount_in, fee_bps)
    net_in = amount_in - fee
    amount_out = (reserve_out * net_in) // (reserve_in + net_in)
    if amount_out <= 0:
        raise ValueError(f"Swap output rounds to zero for amount_in={amount_in}")

    new_reserve_in = reserve_in + amount_in
    new_reserve_out = reserve_out - amount_out
    if new_reserve_in * new_reserve_out < reserve_in * reserve_out:
        raise ValueError("Invariant violation: k decreased")

    return amount_out, (new_reserve_in, new_reserve_out)


def compute_lp_mint(
    reserve0: int,
    reserve1: int,
    amount0: int,
    amount1: int,
    lp_supply: int,
) -> int:
    """
    Compute LP tokens to mint for a liquidity deposit.

    For first deposit (lp_supply == 0):
        lp = floor(sqrt(amount0 * amount1)) - MIN_LP_LOCK

    For subsequent deposits:
        lp = min(floor(amount0 * lp_supply / reserve0), floor(amount1 * lp_supply / reserve1))
    """
    if reserve0 < 0 or reserve1 < 0:
        raise ValueError(f"Reserves must be non-negative: ({reserve0}, {reserve1})")
    if amount0 <= 0 or amount1 <= 0:
        raise ValueError(f"Deposit amounts must be positive: ({amount0}, {amount1})")
    if lp_supply < 0:
        raise ValueError(f"LP supply must be non-negative: {lp_supply}")

    if lp_supply == 0:
        lp = isqrt(amount0 * amount1)
        if lp <= MIN_LP_LOCK:
            raise ValueError("Insufficient initial liquidity: sqrt(amount0*amount1) <= MIN_LP_LOCK")
        return lp - MIN_LP_LOCK

    if reserve0 == 0 or reserve1 == 0:
        raise ValueError("Cannot add liquidity to empty pool")
    lp = min((amount0 * lp_supply) // reserve0, (amount1 * lp_supply) // reserve1)
    if lp <= 0:
        raise ValueError(f"Computed LP amount is non-positive: {lp}")
    return lp


def compute_lp_burn(
    lp_amount: int,
    reserve0: int,
    reserve1: int,
    lp_supply: int,
) -> Tuple[int, int]:
    """Pro-rata amounts returned for burning ``lp_amount`` shares (floor)."""
    if lp_amount <= 0:
        raise ValueError(f"LP amount must be positive: {lp_amount}")
    if lp_supply <= 0:
        raise ValueError(f"LP supply must be positive: {lp_supply}")
    if lp_amount > lp_supply:
        raise ValueError(f"Cannot burn more LP than supply: {lp_amount} > {lp_supply}")
    if reserve0 < 0 or reserve1 < 0:
        raise ValueError(f"Reserves must be non-negative: ({reserve0}, {reserve1})")
    return (lp_amount * reserve0) // lp_supply, (lp_amount * reserve1) // lp_supply


def geometric_mean(reserve0: int, reserve1: int) -> int:
    """``floor(sqrt(reserve0 * reserve1))``; the pool's ``sqrt(k)``."""
    if reserve0 < 0 or reserve1 < 0:
        raise ValueError(f"Reserves must be non-negative: ({reserve0}, {reserve1})")
    return isqrt(reserve0 * reserve1)
