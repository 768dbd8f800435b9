"""
Oracle state snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / persistence across restarts.
- Round-trippable into the functional-core `OracleState`.
- Explicit versioning.

Accumulators and averages exceed JSON's safe integer range, so every numeric
oracle field is written as a decimal string.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..core.twap.invariants import check_all
from ..core.twap.state import state_from_dict, state_to_dict
from ..core.twap.types import OracleState
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex


ORACLE_SNAPSHOT_VERSION = 1

_MAX_DECIMAL_DIGITS = 80  # 2**256 has 78 digits
_MAX_STR_LEN = 512


@dataclass(frozen=True)
class OracleSnapshot:
    """
    Deterministic, versioned snapshot of `OracleState` plus the admin nonce.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def _commitment_payload(self) -> bytes:
        return domain_sep_bytes("twap_oracle_snapshot", version=self.version) + self.canonical_bytes()

    def commitment_bytes(self) -> bytes:
        return hashlib.sha256(self._commitment_payload()).digest()

    def commitment_hex(self) -> str:
        return sha256_hex(self._commitment_payload())


def snapshot_from_state(
    state: OracleState,
    *,
    admin_nonce: int = 0,
    version: int = ORACLE_SNAPSHOT_VERSION,
) -> OracleSnapshot:
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("version must be a positive int")
    if not isinstance(admin_nonce, int) or isinstance(admin_nonce, bool) or admin_nonce < 0:
        raise ValueError("admin_nonce must be a non-negative int")

    oracle_obj: Dict[str, Any] = {}
    for name, value in state_to_dict(state).items():
        if isinstance(value, int) and not isinstance(value, bool):
            oracle_obj[name] = str(value)
        else:
            oracle_obj[name] = value

    data: Dict[str, Any] = {
        "version": int(version),
        "oracle": oracle_obj,
        "admin_nonce": int(admin_nonce),
    }
    return OracleSnapshot(version=version, data=data)


def _decode_uint(value: Any, *, name: str) -> int:
    if not isinstance(value, str):
        raise TypeError(f"{name} must be a decimal string")
    if not value or len(value) > _MAX_DECIMAL_DIGITS or not value.isdigit() or not value.isascii():
        raise ValueError(f"{name} must be a non-negative decimal string")
    if len(value) > 1 and value[0] == "0":
        raise ValueError(f"{name} must not have leading zeros")
    return int(value)


def _decode_oracle(obj: Mapping[str, Any]) -> OracleState:
    template = state_to_dict(OracleState())
    missing = sorted(set(template) - set(obj))
    if missing:
        raise ValueError(f"snapshot.oracle missing fields: {', '.join(missing)}")
    unknown = sorted(set(obj) - set(template))
    if unknown:
        raise ValueError(f"snapshot.oracle has unknown fields: {', '.join(unknown)}")

    decoded: Dict[str, Any] = {}
    for name, default in template.items():
        raw = obj[name]
        if isinstance(default, bool):
            if not isinstance(raw, bool):
                raise TypeError(f"oracle.{name} must be a bool")
            decoded[name] = raw
        elif isinstance(default, int):
            decoded[name] = _decode_uint(raw, name=f"oracle.{name}")
        else:
            if not isinstance(raw, str):
                raise TypeError(f"oracle.{name} must be a string")
            if len(raw) > _MAX_STR_LEN:
                raise ValueError(f"oracle.{name} too large")
            decoded[name] = raw

    try:
        state = state_from_dict(decoded)
    except ValueError as exc:
        raise ValueError(f"snapshot.oracle out of range: {exc}") from exc
    violations = check_all(state)
    if violations:
        raise ValueError(f"snapshot.oracle violates invariants: {', '.join(violations)}")
    return state


def state_from_snapshot(snapshot: Mapping[str, Any]) -> tuple[OracleState, int]:
    """Decode a snapshot mapping. Returns ``(state, admin_nonce)``."""
    if not isinstance(snapshot, Mapping):
        raise TypeError("snapshot must be a mapping")

    version = snapshot.get("version", ORACLE_SNAPSHOT_VERSION)
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError("snapshot.version must be a positive int")
    if version != ORACLE_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version}")

    oracle_obj = snapshot.get("oracle")
    if not isinstance(oracle_obj, Mapping):
        raise TypeError("snapshot.oracle must be an object")

    admin_nonce = snapshot.get("admin_nonce", 0)
    if not isinstance(admin_nonce, int) or isinstance(admin_nonce, bool) or admin_nonce < 0:
        raise ValueError("snapshot.admin_nonce must be a non-negative int")

    return _decode_oracle(oracle_obj), int(admin_nonce)
