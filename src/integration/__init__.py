"""
Service shell around the TWAP oracle kernel
"""

from .config import OracleServiceConfig, load_config
from .logging_config import setup_logging
from .oracle_service import TwapOracleService
from .oracle_snapshot import OracleSnapshot, snapshot_from_state, state_from_snapshot

__all__ = [
    "OracleServiceConfig",
    "load_config",
    "setup_logging",
    "TwapOracleService",
    "OracleSnapshot",
    "snapshot_from_state",
    "state_from_snapshot",
]
