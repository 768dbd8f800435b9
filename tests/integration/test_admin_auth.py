from __future__ import annotations

import pytest

pytest.importorskip("py_ecc")

from src.core.twap.errors import NotAdmin
from src.core.twap.types import Action
from src.integration.admin_auth import (
    AdminCommand,
    AdminSignatureError,
    admin_pubkey_from_secret,
    admin_secret_from_seed,
    sign_admin_command,
    verify_admin_command,
)
from src.integration.config import OracleServiceConfig
from src.integration.oracle_service import TwapOracleService
from src.state.pair import SimulatedPair

CHAIN_ID = "twap-test"


@pytest.fixture(scope="module")
def admin_keys():
    sk = admin_secret_from_seed(b"\x07" * 32)
    return sk, admin_pubkey_from_secret(sk)


class TestSignatures:
    def test_sign_and_verify(self, admin_keys):
        sk, pk = admin_keys
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=1)
        sig = sign_admin_command(sk, cmd, chain_id=CHAIN_ID)
        assert sig.startswith("0x") and len(sig) == 2 + 2 * 96
        verify_admin_command(admin_pubkey_hex=pk, command=cmd, signature_hex=sig, chain_id=CHAIN_ID)

    def test_pubkey_shape(self, admin_keys):
        _sk, pk = admin_keys
        assert pk.startswith("0x") and len(pk) == 2 + 2 * 48

    def test_other_chain_rejected(self, admin_keys):
        sk, pk = admin_keys
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=1)
        sig = sign_admin_command(sk, cmd, chain_id="other-chain")
        with pytest.raises(AdminSignatureError):
            verify_admin_command(admin_pubkey_hex=pk, command=cmd, signature_hex=sig, chain_id=CHAIN_ID)

    def test_tampered_value_rejected(self, admin_keys):
        sk, pk = admin_keys
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=1)
        sig = sign_admin_command(sk, cmd, chain_id=CHAIN_ID)
        forged = AdminCommand(action=Action.SET_TIME_PERIOD, value=1, nonce=1)
        with pytest.raises(AdminSignatureError):
            verify_admin_command(admin_pubkey_hex=pk, command=forged, signature_hex=sig, chain_id=CHAIN_ID)

    def test_action_is_bound(self, admin_keys):
        sk, pk = admin_keys
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=1)
        sig = sign_admin_command(sk, cmd, chain_id=CHAIN_ID)
        other = AdminCommand(action=Action.SET_NON_UPDATE_TOLERANCE, value=600, nonce=1)
        with pytest.raises(AdminSignatureError):
            verify_admin_command(admin_pubkey_hex=pk, command=other, signature_hex=sig, chain_id=CHAIN_ID)

    def test_malformed_hex(self, admin_keys):
        _sk, pk = admin_keys
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=1)
        with pytest.raises(AdminSignatureError):
            verify_admin_command(admin_pubkey_hex=pk, command=cmd, signature_hex="0x1234", chain_id=CHAIN_ID)

    def test_non_admin_action_rejected(self):
        with pytest.raises(ValueError):
            AdminCommand(action=Action.UPDATE, value=0, nonce=1)

    def test_short_seed_rejected(self):
        with pytest.raises(ValueError):
            admin_secret_from_seed(b"\x01" * 8)


class TestSignedService:
    def _service(self, pk: str) -> TwapOracleService:
        pair = SimulatedPair(token0="RDPX", token1="WETH")
        pair.mint("lp", 1000, 4000, 100)
        cfg = OracleServiceConfig(admin=pk, pool_ref="RDPX/WETH", require_admin_signatures=True, chain_id=CHAIN_ID)
        svc = TwapOracleService(pair, config=cfg, clock=lambda: 100)
        svc.initialize()
        return svc

    def test_signed_setter_accepted(self, admin_keys):
        sk, pk = admin_keys
        svc = self._service(pk)
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=1)
        svc.set_time_period(pk, 600, nonce=1, signature=sign_admin_command(sk, cmd, chain_id=CHAIN_ID))
        assert svc.state.time_period == 600
        assert svc.admin_nonce == 1

    def test_replay_rejected(self, admin_keys):
        sk, pk = admin_keys
        svc = self._service(pk)
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=1)
        sig = sign_admin_command(sk, cmd, chain_id=CHAIN_ID)
        svc.set_time_period(pk, 600, nonce=1, signature=sig)
        with pytest.raises(AdminSignatureError):
            svc.set_time_period(pk, 600, nonce=1, signature=sig)
        assert svc.admin_nonce == 1

    def test_missing_signature_rejected(self, admin_keys):
        _sk, pk = admin_keys
        svc = self._service(pk)
        with pytest.raises(AdminSignatureError):
            svc.set_non_update_tolerance(pk, 10)
        assert svc.state.non_update_tolerance == 300
        assert svc.admin_nonce == 0

    def test_bad_signature_leaves_state(self, admin_keys):
        sk, pk = admin_keys
        svc = self._service(pk)
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=999, nonce=1)
        sig = sign_admin_command(sk, cmd, chain_id=CHAIN_ID)
        with pytest.raises(AdminSignatureError):
            svc.set_time_period(pk, 600, nonce=1, signature=sig)
        assert svc.state.time_period == 1800

    def test_non_admin_checked_first(self, admin_keys):
        _sk, pk = admin_keys
        svc = self._service(pk)
        with pytest.raises(NotAdmin):
            svc.set_time_period("mallory", 600, nonce=1, signature="0x00")

    def test_nonce_survives_snapshot(self, admin_keys):
        sk, pk = admin_keys
        svc = self._service(pk)
        cmd = AdminCommand(action=Action.SET_TIME_PERIOD, value=600, nonce=5)
        sig = sign_admin_command(sk, cmd, chain_id=CHAIN_ID)
        svc.set_time_period(pk, 600, nonce=5, signature=sig)
        data = svc.snapshot().data
        restored = TwapOracleService.from_snapshot(svc.pair, data, config=svc.config, clock=lambda: 100)
        assert restored.admin_nonce == 5
        with pytest.raises(AdminSignatureError):
            restored.set_time_period(pk, 600, nonce=5, signature=sig)
