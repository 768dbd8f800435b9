"""
BLS12-381 signatures for admin commands.

An admin setter can be required to carry a signature over
``AdminCommand(action, value, nonce)`` by the admin public key. The signed
message is

    sha256(domain_sep("twap_admin_sig:<chain_id>", 1) || canonical_json(command))

so a signature is bound to one chain id and cannot be replayed across
deployments. Replay within a deployment is prevented by the strictly
increasing nonce, which the service tracks.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Any, Dict

from py_ecc.bls import G2Basic

from ..core.twap.errors import OracleError
from ..core.twap.types import Action
from ..state.canonical import canonical_hex_fixed_allow_0x, canonical_json_bytes, domain_sep_bytes

PUBKEY_NBYTES = 48
SIGNATURE_NBYTES = 96

ADMIN_ACTIONS = frozenset({Action.SET_TIME_PERIOD, Action.SET_NON_UPDATE_TOLERANCE})


class AdminSignatureError(OracleError):
    """Raised when an admin command signature is missing, malformed, invalid or replayed."""

    code = "admin_signature"


@dataclass(frozen=True)
class AdminCommand:
    action: Action
    value: int
    nonce: int

    def __post_init__(self) -> None:
        if self.action not in ADMIN_ACTIONS:
            raise ValueError(f"not an admin action: {self.action}")
        for name in ("value", "nonce"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool) or v < 0:
                raise ValueError(f"{name} must be a non-negative int")

    def to_dict(self) -> Dict[str, Any]:
        # u256 values exceed JSON's safe integer range; encode as decimal strings.
        return {"action": self.action.value, "value": str(self.value), "nonce": self.nonce}


def signing_message(command: AdminCommand, *, chain_id: str) -> bytes:
    payload = domain_sep_bytes(f"twap_admin_sig:{chain_id}", version=1) + canonical_json_bytes(command.to_dict())
    return hashlib.sha256(payload).digest()


def admin_secret_from_seed(seed: bytes) -> int:
    """Derive a BLS secret key from at least 32 bytes of seed material."""
    if not isinstance(seed, (bytes, bytearray)) or len(seed) < 32:
        raise ValueError("seed must be at least 32 bytes")
    return int(G2Basic.KeyGen(bytes(seed)))


def admin_pubkey_from_secret(secret_key: int) -> str:
    return "0x" + bytes(G2Basic.SkToPk(secret_key)).hex()


def sign_admin_command(secret_key: int, command: AdminCommand, *, chain_id: str) -> str:
    sig = G2Basic.Sign(secret_key, signing_message(command, chain_id=chain_id))
    return "0x" + bytes(sig).hex()


def verify_admin_command(
    *,
    admin_pubkey_hex: str,
    command: AdminCommand,
    signature_hex: str,
    chain_id: str,
) -> None:
    """Raise `AdminSignatureError` unless ``signature_hex`` is a valid admin signature."""
    try:
        pubkey = bytes.fromhex(
            canonical_hex_fixed_allow_0x(admin_pubkey_hex, nbytes=PUBKEY_NBYTES, name="admin_pubkey")[2:]
        )
        sig = bytes.fromhex(
            canonical_hex_fixed_allow_0x(signature_hex, nbytes=SIGNATURE_NBYTES, name="signature")[2:]
        )
    except (TypeError, ValueError) as exc:
        raise AdminSignatureError(str(exc)) from exc

    if not G2Basic.Verify(pubkey, signing_message(command, chain_id=chain_id), sig):
        raise AdminSignatureError("invalid admin signature")
