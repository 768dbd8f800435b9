"""
Thread-safe TWAP oracle service.

`TwapOracleService` wraps the pure kernel in `src/core/twap/` around a live
pair (`PairReader`) and a clock:

- The current `OracleState` is an immutable value held by reference. Readers
  take the reference once and compute against that snapshot, so a query never
  observes a half-applied update.
- One lock serialises every mutating call (initialize, update, admin setters).
  Each computes the full next state through ``step()`` before swapping the
  reference; a rejected call leaves the state untouched. Two ``update()``
  calls racing for the same window produce exactly one success; the loser is
  evaluated against the winner's state and raises `PeriodNotElapsed`.
- Listeners receive the `Effect` of every accepted call after the swap.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, List, Mapping, Optional

from ..core.twap import queries
from ..core.twap.engine import error_for_rejection, step
from ..core.twap.errors import OracleError
from ..core.twap.state import initial_state
from ..core.twap.types import Action, ActionParams, Effect, OracleState, StepResult
from ..state.pair import PairReader
from .admin_auth import AdminCommand, AdminSignatureError, verify_admin_command
from .config import OracleServiceConfig
from .logging_config import get_logger
from .oracle_snapshot import OracleSnapshot, snapshot_from_state, state_from_snapshot

Clock = Callable[[], int]
Listener = Callable[[Effect], None]


def _wall_clock() -> int:
    return int(time.time())


class TwapOracleService:
    def __init__(
        self,
        pair: PairReader,
        *,
        config: Optional[OracleServiceConfig] = None,
        clock: Optional[Clock] = None,
        state: Optional[OracleState] = None,
        admin_nonce: int = 0,
    ) -> None:
        self._pair = pair
        self._config = config if config is not None else OracleServiceConfig()
        self._clock = clock if clock is not None else _wall_clock
        self._state = state if state is not None else initial_state()
        self._admin_nonce = int(admin_nonce)
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []
        self._log = get_logger("service")

    @classmethod
    def from_snapshot(
        cls,
        pair: PairReader,
        snapshot: Mapping[str, Any],
        *,
        config: Optional[OracleServiceConfig] = None,
        clock: Optional[Clock] = None,
    ) -> "TwapOracleService":
        state, admin_nonce = state_from_snapshot(snapshot)
        return cls(pair, config=config, clock=clock, state=state, admin_nonce=admin_nonce)

    # -- accessors ------------------------------------------------------------

    @property
    def state(self) -> OracleState:
        return self._state

    @property
    def pair(self) -> PairReader:
        return self._pair

    @property
    def config(self) -> OracleServiceConfig:
        return self._config

    @property
    def admin_nonce(self) -> int:
        return self._admin_nonce

    def now(self) -> int:
        return int(self._clock())

    def snapshot(self) -> OracleSnapshot:
        with self._lock:
            return snapshot_from_state(self._state, admin_nonce=self._admin_nonce)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for effects; returns a function that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self, effect: Effect) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(effect)
            except Exception:
                self._log.exception("listener failed for %s", effect.event.value)

    # -- mutations ------------------------------------------------------------

    def _step(self, params: ActionParams) -> StepResult:
        result = step(self._state, params)
        if not result.accepted:
            raise error_for_rejection(result.rejection or "")
        assert result.state is not None and result.effect is not None
        return result

    def initialize(self, *, pool_ref: Optional[str] = None, admin: Optional[str] = None) -> Effect:
        """Bind the oracle to the pair and record the accumulator baseline."""
        params = ActionParams(
            action=Action.INITIALIZE,
            observation=self._pair.observe(),
            pool_ref=self._config.pool_ref if pool_ref is None else pool_ref,
            admin=self._config.admin if admin is None else admin,
            time_period=self._config.time_period,
            non_update_tolerance=self._config.non_update_tolerance,
        )
        with self._lock:
            try:
                result = self._step(params)
            except OracleError as exc:
                self._log.warning("initialize rejected: %s", exc.code)
                raise
            self._state = new_state = result.state
            effect = result.effect
        self._log.info(
            "oracle initialized for %s (%s/%s)",
            new_state.pool_ref,
            new_state.token_a,
            new_state.token_b,
            extra={"pool_ref": new_state.pool_ref, "sample_time": new_state.last_sample_time},
        )
        self._notify(effect)
        return effect

    def update(self) -> Effect:
        """Sample the pair and refresh both averages. Permissionless."""
        with self._lock:
            params = ActionParams(action=Action.UPDATE, now=self.now(), observation=self._pair.observe())
            try:
                result = self._step(params)
            except OracleError as exc:
                self._log.debug("update rejected: %s", exc.code)
                raise
            self._state = new_state = result.state
            effect = result.effect
        self._log.info(
            "oracle updated at %d",
            effect.timestamp,
            extra={
                "pool_ref": new_state.pool_ref,
                "average_a": effect.average_a,
                "average_b": effect.average_b,
            },
        )
        self._notify(effect)
        return effect

    def _check_admin_signature(self, action: Action, value: int, nonce: Optional[int], signature: Optional[str]) -> int:
        if signature is None or nonce is None:
            raise AdminSignatureError("admin command requires a signature and nonce")
        if not isinstance(nonce, int) or isinstance(nonce, bool) or nonce <= self._admin_nonce:
            raise AdminSignatureError(f"stale admin nonce: {nonce} <= {self._admin_nonce}")
        try:
            command = AdminCommand(action=action, value=value, nonce=nonce)
        except ValueError as exc:
            raise AdminSignatureError(str(exc)) from exc
        verify_admin_command(
            admin_pubkey_hex=self._state.admin,
            command=command,
            signature_hex=signature,
            chain_id=self._config.chain_id,
        )
        return nonce

    def _admin_call(
        self,
        params: ActionParams,
        value: int,
        *,
        nonce: Optional[int],
        signature: Optional[str],
    ) -> Effect:
        with self._lock:
            try:
                result = self._step(params)
                accepted_nonce = self._admin_nonce
                if self._config.require_admin_signatures:
                    accepted_nonce = self._check_admin_signature(params.action, value, nonce, signature)
            except OracleError as exc:
                self._log.warning("%s rejected for caller %s: %s", params.action.value, params.caller, exc.code)
                raise
            self._state = new_state = result.state
            effect = result.effect
            self._admin_nonce = accepted_nonce
        self._log.info("%s -> %d", params.action.value, value, extra={"pool_ref": new_state.pool_ref})
        self._notify(effect)
        return effect

    def set_time_period(
        self,
        caller: str,
        new_period: int,
        *,
        nonce: Optional[int] = None,
        signature: Optional[str] = None,
    ) -> Effect:
        params = ActionParams(action=Action.SET_TIME_PERIOD, caller=caller, time_period=new_period)
        return self._admin_call(params, new_period, nonce=nonce, signature=signature)

    def set_non_update_tolerance(
        self,
        caller: str,
        new_tolerance: int,
        *,
        nonce: Optional[int] = None,
        signature: Optional[str] = None,
    ) -> Effect:
        params = ActionParams(
            action=Action.SET_NON_UPDATE_TOLERANCE,
            caller=caller,
            non_update_tolerance=new_tolerance,
        )
        return self._admin_call(params, new_tolerance, nonce=nonce, signature=signature)

    # -- queries --------------------------------------------------------------

    def is_fresh(self) -> bool:
        return queries.is_fresh(self._state, self.now())

    def consult(self, token: str, amount_in: int) -> int:
        return queries.consult(self._state, token, amount_in)

    def get_raw_average(self, token: str) -> int:
        return queries.get_raw_average(self._state, token, self.now())

    def get_price(self, token: str) -> int:
        return queries.get_price(self._state, token, self.now())

    def get_token_a_price_in_b(self) -> int:
        return queries.get_token_a_price_in_b(self._state, self.now())

    def get_token_b_price_in_a(self) -> int:
        return queries.get_token_b_price_in_a(self._state, self.now())

    def get_lp_fair_price(self, quote_token: str) -> int:
        state = self._state
        return queries.get_lp_fair_price(state, quote_token, self.now(), self._pair.observe())

    def get_lp_price_in_a(self) -> int:
        return self.get_lp_fair_price(self._state.token_a)

    def get_lp_price_in_b(self) -> int:
        return self.get_lp_fair_price(self._state.token_b)
