"""Data types for the TWAP oracle kernel.

All types are frozen dataclasses (immutable).

Units/conventions:
- ``cumulative_*`` values are u256 pool accumulators (wrap at 2**256).
- ``last_sample_time`` is a u32 timestamp (wraps at 2**32).
- ``average_a`` is the price of ``token_a`` in ``token_b`` as Q112.112;
  ``average_b`` is the reverse.
- ``time_period`` / ``non_update_tolerance`` are seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from ...state.pair import PairObservation
from ..fixed_point import UQ112x112


DEFAULT_TIME_PERIOD: int = 1800
DEFAULT_NON_UPDATE_TOLERANCE: int = 300


@unique
class Action(Enum):
    INITIALIZE = "initialize"
    SET_TIME_PERIOD = "set_time_period"
    SET_NON_UPDATE_TOLERANCE = "set_non_update_tolerance"
    UPDATE = "update"


@unique
class Event(Enum):
    INITIALIZED = "Initialized"
    TIME_PERIOD_UPDATED = "TimePeriodUpdated"
    NON_UPDATE_TOLERANCE_UPDATED = "NonUpdateToleranceUpdated"
    UPDATED = "Updated"


@dataclass(frozen=True)
class OracleState:
    """Complete oracle state. ``OracleState()`` is the uninitialized state."""

    # Tracked pair
    pool_ref: str = ""
    token_a: str = ""
    token_b: str = ""

    # Accumulator baseline
    cumulative_a_last: int = 0
    cumulative_b_last: int = 0
    last_sample_time: int = 0

    # Averages over the last completed window
    average_a: UQ112x112 = UQ112x112()
    average_b: UQ112x112 = UQ112x112()

    # Control parameters
    time_period: int = 0
    non_update_tolerance: int = 0

    initialized: bool = False
    admin: str = ""


@dataclass(frozen=True)
class ActionParams:
    """Parameters for an action. Unused fields keep their defaults."""

    action: Action
    caller: str = ""                                    # set_time_period / set_non_update_tolerance
    now: int = 0                                        # update
    observation: PairObservation | None = None          # initialize / update
    pool_ref: str = ""                                  # initialize
    admin: str = ""                                     # initialize
    time_period: int = DEFAULT_TIME_PERIOD              # initialize / set_time_period
    non_update_tolerance: int = DEFAULT_NON_UPDATE_TOLERANCE  # initialize / set_non_update_tolerance


@dataclass(frozen=True)
class Effect:
    """Change notification emitted after a successful step."""

    event: Event
    time_period: int = 0
    non_update_tolerance: int = 0
    average_a: int = 0
    average_b: int = 0
    cumulative_a: int = 0
    cumulative_b: int = 0
    timestamp: int = 0


@dataclass(frozen=True)
class StepResult:
    """Result of a single kernel step."""

    accepted: bool
    state: OracleState | None = None
    effect: Effect | None = None
    rejection: str | None = None
