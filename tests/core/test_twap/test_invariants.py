"""Tests for src/core/twap/invariants.py."""

from dataclasses import replace

from src.core.fixed_point import UINT256_MAX, UINT32_MAX
from src.core.twap.invariants import INVARIANT_REGISTRY, check_all
from src.core.twap.state import initial_state
from src.core.twap.types import OracleState


def _live() -> OracleState:
    return replace(
        initial_state(),
        pool_ref="p",
        token_a="A",
        token_b="B",
        time_period=1800,
        non_update_tolerance=300,
        initialized=True,
        admin="admin",
    )


class TestCheckAll:
    def test_initial_state_clean(self):
        assert check_all(initial_state()) == []

    def test_live_state_clean(self):
        assert check_all(_live()) == []

    def test_registry_ids_are_function_names(self):
        for inv_id, fn in INVARIANT_REGISTRY.items():
            assert fn.__name__ == inv_id


class TestViolations:
    def test_uninitialized_must_be_zeroed(self):
        s = replace(initial_state(), time_period=5)
        assert check_all(s) == ["inv_uninitialized_zeroed"]

    def test_cumulative_range(self):
        s = replace(_live(), cumulative_a_last=UINT256_MAX + 1)
        assert "inv_cumulative_range" in check_all(s)

    def test_timestamp_range(self):
        s = replace(_live(), last_sample_time=UINT32_MAX + 1)
        assert "inv_timestamp_range" in check_all(s)

    def test_params_range(self):
        s = replace(_live(), non_update_tolerance=-1)
        assert "inv_params_range" in check_all(s)

    def test_distinct_tokens(self):
        s = replace(_live(), token_b="A")
        assert check_all(s) == ["inv_distinct_tokens"]

    def test_admin_set(self):
        s = replace(_live(), admin="")
        assert check_all(s) == ["inv_admin_set"]
