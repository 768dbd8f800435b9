"""State construction and serialization for the TWAP oracle kernel.

`initial_state()` returns the uninitialized state.

Round-trip property (tested): `state_from_dict(state_to_dict(s)) == s` for all valid states.
Averages are flattened to their raw Q112.112 ints.
"""

from __future__ import annotations

from typing import Any, Mapping

from ..fixed_point import UQ112x112
from .types import OracleState

STATE_VAR_NAMES: tuple[str, ...] = tuple(OracleState.__dataclass_fields__)

_STR_FIELDS = frozenset({"pool_ref", "token_a", "token_b", "admin"})
_BOOL_FIELDS = frozenset({"initialized"})
_FIXED_FIELDS = frozenset({"average_a", "average_b"})


def initial_state() -> OracleState:
    """Return the uninitialized OracleState."""
    return OracleState()


def state_to_dict(state: OracleState) -> dict[str, bool | int | str]:
    """Serialize an OracleState to a plain dict."""
    out: dict[str, bool | int | str] = {}
    for name in STATE_VAR_NAMES:
        val = getattr(state, name)
        out[name] = val.raw if name in _FIXED_FIELDS else val
    return out


def state_from_dict(d: Mapping[str, Any]) -> OracleState:
    """Deserialize a dict to an OracleState. Raises KeyError on missing fields."""
    kwargs: dict[str, Any] = {}
    for name in STATE_VAR_NAMES:
        val = d[name]
        if name in _STR_FIELDS:
            if not isinstance(val, str):
                raise TypeError(f"state var {name!r} must be str, got {type(val).__name__}")
            kwargs[name] = val
        elif name in _BOOL_FIELDS:
            if not isinstance(val, bool):
                raise TypeError(f"state var {name!r} must be bool, got {type(val).__name__}")
            kwargs[name] = val
        else:
            if not isinstance(val, int) or isinstance(val, bool):
                raise TypeError(f"state var {name!r} must be int, got {type(val).__name__}")
            kwargs[name] = UQ112x112(int(val)) if name in _FIXED_FIELDS else int(val)
    return OracleState(**kwargs)
