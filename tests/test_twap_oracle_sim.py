from __future__ import annotations

import json
import logging

import pytest

from src.integration.config import OracleServiceConfig
from src.integration.logging_config import LOGGER_ROOT


@pytest.fixture(autouse=True)
def _restore_logger():
    logger = logging.getLogger(LOGGER_ROOT)
    handlers, level = list(logger.handlers), logger.level
    yield
    for h in logger.handlers:
        if h not in handlers:
            h.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)


def test_run_simulation_updates_every_window() -> None:
    from tools.twap_oracle_sim import run_simulation

    rows = run_simulation(
        reserve0=1_000_000,
        reserve1=2_000_000,
        steps=4,
        step_seconds=1800,
        swap_amount=10_000,
        config=OracleServiceConfig(),
    )
    assert [r["step"] for r in rows] == [1, 2, 3, 4]
    assert all(r["updated"] for r in rows)
    assert all(r["fresh"] for r in rows)
    assert all(r["twap_price0"] > 0 and r["lp_price_in_token1"] > 0 for r in rows)


def test_run_simulation_short_steps_skip_updates() -> None:
    from tools.twap_oracle_sim import run_simulation

    rows = run_simulation(
        reserve0=1_000_000,
        reserve1=2_000_000,
        steps=3,
        step_seconds=600,
        swap_amount=0,
        config=OracleServiceConfig(),
    )
    assert [r["updated"] for r in rows] == [False, False, True]
    # No update yet: the stored averages are still zero.
    assert rows[0]["error"] == "price_zero"
    # Constant reserves: TWAP equals spot.
    assert rows[2]["twap_price0"] == rows[2]["spot_price0"] == 2 * 10**18


def test_main_json_output(capsys) -> None:
    from tools.twap_oracle_sim import main

    assert main(["--steps", "2", "--period", "60", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out["steps"]) == 2
    assert out["steps"][0]["time"] - 60 == 1_700_000_000


def test_main_rejects_empty_pool(capsys) -> None:
    from tools.twap_oracle_sim import main

    assert main(["--reserve0", "0", "--steps", "1"]) == 1
    assert "FAIL" in capsys.readouterr().err
