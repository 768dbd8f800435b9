"""Exception types for the TWAP oracle kernel.

Every error carries a stable ``code`` string. ``step()`` in ``engine.py``
reports the same codes as ``StepResult.rejection``; ``step_or_raise()``, the
query functions and the service raise the typed exceptions.
"""

from __future__ import annotations


class OracleError(Exception):
    """Base class for all oracle failures. State is never modified on failure."""

    code = "oracle_error"


class AlreadyInitialized(OracleError):
    code = "already_initialized"


class NotInitialized(OracleError):
    code = "not_initialized"


class NoLiquidity(OracleError):
    """Raised when the pool reports a zero reserve (or zero share supply)."""

    code = "no_liquidity"


class NotAdmin(OracleError):
    code = "not_admin"


class PeriodNotElapsed(OracleError):
    code = "period_not_elapsed"


class PoolMismatch(OracleError):
    """Raised when an observation comes from a pair other than the tracked one."""

    code = "pool_mismatch"


class InvalidToken(OracleError):
    code = "invalid_token"


class PriceZero(OracleError):
    code = "price_zero"


class StaleAverage(OracleError):
    code = "stale_average"


class OracleParamError(OracleError):
    """Raised when a command parameter is outside its domain."""

    code = "param_domain"


class OracleInvariantError(OracleError):
    """Raised when a post-state violates one or more invariants."""

    code = "invariant"

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")


ERRORS_BY_CODE: dict[str, type[OracleError]] = {
    cls.code: cls
    for cls in (
        AlreadyInitialized,
        NotInitialized,
        NoLiquidity,
        NotAdmin,
        PeriodNotElapsed,
        PoolMismatch,
        InvalidToken,
        PriceZero,
        StaleAverage,
    )
}
