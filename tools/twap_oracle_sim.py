#!/usr/bin/env python3
"""
Offline TWAP oracle simulation.

Seeds an in-memory pair, initializes the oracle against it, then alternates
swaps with oracle updates on a simulated clock and reports the TWAP, spot and
fair LP prices after every step.

Example:
  python3 tools/twap_oracle_sim.py --reserve0 1000000 --reserve1 2000000 --steps 6 --json
"""

from __future__ import annotations

import argparse
from dataclasses import replace
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.core.twap.errors import OracleError, PeriodNotElapsed
from src.integration.config import OracleServiceConfig, load_config
from src.integration.logging_config import get_logger, setup_logging
from src.integration.oracle_service import TwapOracleService
from src.state.pair import SimulatedPair

TOKEN0 = "RDPX"
TOKEN1 = "WETH"
PROVIDER = "lp-provider"
START_TIME = 1_700_000_000


class SimClock:
    def __init__(self, start: int) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


def run_simulation(
    *,
    reserve0: int,
    reserve1: int,
    steps: int,
    step_seconds: int,
    swap_amount: int,
    config: OracleServiceConfig,
) -> List[Dict[str, Any]]:
    log = get_logger("sim")
    clock = SimClock(START_TIME)
    pair = SimulatedPair(token0=TOKEN0, token1=TOKEN1)
    pair.mint(PROVIDER, reserve0, reserve1, clock.now)

    service = TwapOracleService(pair, config=config, clock=clock)
    service.initialize(pool_ref=config.pool_ref or f"{TOKEN0}/{TOKEN1}", admin=config.admin or "sim-admin")

    rows: List[Dict[str, Any]] = []
    for i in range(steps):
        clock.advance(step_seconds)
        if swap_amount > 0:
            token_in = TOKEN0 if i % 2 == 0 else TOKEN1
            pair.swap_exact_in(token_in, swap_amount, clock.now)

        updated = True
        try:
            service.update()
        except PeriodNotElapsed:
            updated = False

        row: Dict[str, Any] = {
            "step": i + 1,
            "time": clock.now,
            "updated": updated,
            "reserve0": pair.reserve0,
            "reserve1": pair.reserve1,
            "spot_price0": (pair.reserve1 * 10**18) // pair.reserve0,
            "fresh": service.is_fresh(),
        }
        try:
            row["twap_price0"] = service.get_token_a_price_in_b()
            row["twap_price1"] = service.get_token_b_price_in_a()
            row["lp_price_in_token1"] = service.get_lp_price_in_b()
        except OracleError as exc:
            row["error"] = exc.code
            log.debug("step %d: query failed: %s", i + 1, exc.code)
        rows.append(row)
    return rows


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Simulate a TWAP oracle over an in-memory constant-product pair.")
    p.add_argument("--reserve0", type=int, default=1_000_000, help="Initial token0 reserve (default: 1000000)")
    p.add_argument("--reserve1", type=int, default=2_000_000, help="Initial token1 reserve (default: 2000000)")
    p.add_argument("--period", type=int, default=None, help="Oracle time period in seconds (overrides config)")
    p.add_argument("--tolerance", type=int, default=None, help="Non-update tolerance in seconds (overrides config)")
    p.add_argument("--steps", type=int, default=8, help="Number of simulation steps (default: 8)")
    p.add_argument("--step-seconds", type=int, default=None, help="Seconds per step (default: the oracle period)")
    p.add_argument("--swap-amount", type=int, default=10_000, help="token amount swapped each step (default: 10000)")
    p.add_argument("--config", type=Path, default=None, help="Optional YAML service config")
    p.add_argument("--json", action="store_true", help="Emit one JSON document instead of text lines")
    args = p.parse_args(argv)

    config = load_config(args.config)
    overrides: Dict[str, Any] = {}
    if args.period is not None:
        overrides["time_period"] = args.period
    if args.tolerance is not None:
        overrides["non_update_tolerance"] = args.tolerance
    if overrides:
        config = replace(config, **overrides)

    # Keep stdout parseable in --json mode.
    setup_logging("WARNING" if args.json else config.log_level, structured=config.structured_logs)

    if args.steps < 0 or args.swap_amount < 0:
        p.error("--steps and --swap-amount must be non-negative")
    step_seconds = config.time_period if args.step_seconds is None else args.step_seconds
    if step_seconds < 0:
        p.error("--step-seconds must be non-negative")

    try:
        rows = run_simulation(
            reserve0=args.reserve0,
            reserve1=args.reserve1,
            steps=args.steps,
            step_seconds=step_seconds,
            swap_amount=args.swap_amount,
            config=config,
        )
    except (OracleError, ValueError) as exc:
        print(f"[twap-sim] FAIL: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps({"steps": rows}, indent=2, sort_keys=True))
        return 0

    for row in rows:
        twap = row.get("twap_price0", row.get("error"))
        print(
            f"[twap-sim] step={row['step']} t={row['time']} updated={row['updated']} "
            f"spot0={row['spot_price0']} twap0={twap} lp={row.get('lp_price_in_token1', '-')}"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
