from __future__ import annotations

import json
from dataclasses import replace

import pytest

from src.core.fixed_point import Q112, UQ112x112
from src.core.twap.state import initial_state
from src.core.twap.types import OracleState
from src.integration.oracle_snapshot import (
    ORACLE_SNAPSHOT_VERSION,
    snapshot_from_state,
    state_from_snapshot,
)


def _live_state() -> OracleState:
    return replace(
        initial_state(),
        pool_ref="RDPX/WETH",
        token_a="RDPX",
        token_b="WETH",
        cumulative_a_last=2**256 - 1,
        cumulative_b_last=12345,
        last_sample_time=1_700_000_000,
        average_a=UQ112x112(4 * Q112),
        average_b=UQ112x112(Q112 // 4),
        time_period=1800,
        non_update_tolerance=300,
        initialized=True,
        admin="admin",
    )


def test_round_trip() -> None:
    state = _live_state()
    snap = snapshot_from_state(state, admin_nonce=3)
    decoded, nonce = state_from_snapshot(json.loads(snap.canonical_bytes()))
    assert decoded == state
    assert nonce == 3


def test_uninitialized_round_trip() -> None:
    snap = snapshot_from_state(initial_state())
    assert state_from_snapshot(snap.data) == (initial_state(), 0)


def test_large_ints_encoded_as_decimal_strings() -> None:
    data = snapshot_from_state(_live_state()).data
    assert data["version"] == ORACLE_SNAPSHOT_VERSION
    assert data["oracle"]["cumulative_a_last"] == str(2**256 - 1)
    assert data["oracle"]["average_a"] == str(4 * Q112)
    assert data["oracle"]["initialized"] is True


def test_canonical_bytes_compact_and_sorted() -> None:
    raw = snapshot_from_state(_live_state()).canonical_bytes()
    assert b" " not in raw
    assert raw.index(b'"admin_nonce"') < raw.index(b'"oracle"') < raw.index(b'"version"')


def test_commitment_deterministic_and_state_sensitive() -> None:
    a = snapshot_from_state(_live_state())
    b = snapshot_from_state(_live_state())
    c = snapshot_from_state(replace(_live_state(), time_period=60))
    assert a.commitment_hex() == b.commitment_hex()
    assert a.commitment_hex() != c.commitment_hex()
    assert a.commitment_hex() == "0x" + a.commitment_bytes().hex()


def test_unsupported_version() -> None:
    data = snapshot_from_state(_live_state()).data
    data["version"] = 2
    with pytest.raises(ValueError, match="unsupported snapshot version"):
        state_from_snapshot(data)


def test_missing_oracle_object() -> None:
    with pytest.raises(TypeError):
        state_from_snapshot({"version": 1})


def test_missing_field() -> None:
    data = snapshot_from_state(_live_state()).data
    del data["oracle"]["admin"]
    with pytest.raises(ValueError, match="missing"):
        state_from_snapshot(data)


def test_unknown_field() -> None:
    data = snapshot_from_state(_live_state()).data
    data["oracle"]["extra"] = "1"
    with pytest.raises(ValueError, match="unknown"):
        state_from_snapshot(data)


@pytest.mark.parametrize("bad", ["-1", "01", "1e3", "", " 5"])
def test_malformed_decimal(bad: str) -> None:
    data = snapshot_from_state(_live_state()).data
    data["oracle"]["time_period"] = bad
    with pytest.raises(ValueError):
        state_from_snapshot(data)


def test_raw_int_rejected() -> None:
    data = snapshot_from_state(_live_state()).data
    data["oracle"]["time_period"] = 1800
    with pytest.raises(TypeError):
        state_from_snapshot(data)


def test_average_out_of_range() -> None:
    data = snapshot_from_state(_live_state()).data
    data["oracle"]["average_a"] = str(1 << 224)
    with pytest.raises(ValueError):
        state_from_snapshot(data)


def test_invariant_violation_rejected() -> None:
    data = snapshot_from_state(_live_state()).data
    data["oracle"]["token_b"] = "RDPX"
    with pytest.raises(ValueError, match="inv_distinct_tokens"):
        state_from_snapshot(data)


def test_negative_admin_nonce() -> None:
    with pytest.raises(ValueError):
        snapshot_from_state(_live_state(), admin_nonce=-1)
