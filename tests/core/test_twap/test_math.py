"""Tests for src/core/twap/math.py: pure arithmetic functions."""

import pytest

from src.core.cpmm import geometric_mean
from src.core.fixed_point import Q112, UINT256_MAX, UINT32_MOD
from src.core.twap.math import (
    ONE_E18,
    average_price,
    elapsed_seconds,
    fair_lp_value_q112,
    q112_to_e18,
    sqrt_k_per_share,
    window_elapsed,
    within_tolerance,
)


# ---------------------------------------------------------------------------
# Elapsed time
# ---------------------------------------------------------------------------

class TestElapsed:
    def test_plain(self):
        assert elapsed_seconds(1900, 100) == 1800

    def test_wall_clock_reduced_to_u32(self):
        assert elapsed_seconds(UINT32_MOD + 5, 0) == 5

    def test_wraps(self):
        assert elapsed_seconds(UINT32_MOD + 5, UINT32_MOD - 5) == 10

    def test_now_behind_sample_is_zero(self):
        assert elapsed_seconds(1895, 1900) == 0
        assert elapsed_seconds(UINT32_MOD - 5, 5) == 0

    def test_window_boundary(self):
        assert window_elapsed(1800, 1800) is True
        assert window_elapsed(1799, 1800) is False

    def test_zero_period_always_elapsed(self):
        assert window_elapsed(0, 0) is True


# ---------------------------------------------------------------------------
# Staleness
# ---------------------------------------------------------------------------

class TestTolerance:
    def test_exact_boundary_is_fresh(self):
        assert within_tolerance(2100, 1800, 300) is True

    def test_one_past_boundary(self):
        assert within_tolerance(2101, 1800, 300) is False

    def test_zero_tolerance(self):
        assert within_tolerance(1800, 1800, 0) is True
        assert within_tolerance(1801, 1800, 0) is False


# ---------------------------------------------------------------------------
# Average price
# ---------------------------------------------------------------------------

class TestAveragePrice:
    def test_constant_price(self):
        assert average_price(2 * Q112 * 1800, 0, 1800).raw == 2 * Q112

    def test_accumulator_wrap(self):
        last = UINT256_MAX - 99
        now = (last + 3 * Q112 * 60) % (UINT256_MAX + 1)
        assert average_price(now, last, 60).raw == 3 * Q112

    def test_floor_division(self):
        assert average_price(10, 0, 3).raw == 3

    def test_zero_elapsed(self):
        with pytest.raises(ZeroDivisionError):
            average_price(1, 0, 0)


# ---------------------------------------------------------------------------
# LP fair value
# ---------------------------------------------------------------------------

class TestFairValue:
    def test_sqrt_k_per_share(self):
        assert sqrt_k_per_share(1000, 4000, 2000) == Q112
        assert sqrt_k_per_share(1000, 4000, 1000) == 2 * Q112

    def test_sqrt_k_floors_geometric_mean(self):
        assert sqrt_k_per_share(2, 3, 1) == geometric_mean(2, 3) * Q112 == 2 * Q112

    def test_unit_prices(self):
        assert fair_lp_value_q112(Q112, Q112, Q112) == 2 * Q112

    def test_price_scales_with_sqrt(self):
        assert fair_lp_value_q112(Q112, 4 * Q112, Q112) == 4 * Q112

    def test_q112_to_e18(self):
        assert q112_to_e18(Q112) == ONE_E18
        assert q112_to_e18(Q112 // 2) == ONE_E18 // 2
        assert q112_to_e18(0) == 0
