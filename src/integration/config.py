"""
Service configuration for the TWAP oracle.

Sources, lowest precedence first:
1. dataclass defaults,
2. a YAML mapping (``load_config(path)``),
3. environment variables (``TWAP_*``).

Unknown YAML keys are rejected so typos fail loudly instead of silently
falling back to a default.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..core.twap.types import DEFAULT_NON_UPDATE_TOLERANCE, DEFAULT_TIME_PERIOD

_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
_MAX_SECONDS = (1 << 256) - 1


@dataclass(frozen=True)
class OracleServiceConfig:
    time_period: int = DEFAULT_TIME_PERIOD
    non_update_tolerance: int = DEFAULT_NON_UPDATE_TOLERANCE
    admin: str = ""
    pool_ref: str = ""
    # When set, admin setters must carry a BLS signature by `admin` (a 48-byte pubkey hex).
    require_admin_signatures: bool = False
    chain_id: str = "twap-local"
    log_level: str = "INFO"
    structured_logs: bool = False

    def __post_init__(self) -> None:
        for name in ("time_period", "non_update_tolerance"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise TypeError(f"{name} must be an int")
            if value < 0 or value > _MAX_SECONDS:
                raise ValueError(f"{name} out of range: {value}")
        for name in ("admin", "pool_ref", "chain_id"):
            if not isinstance(getattr(self, name), str):
                raise TypeError(f"{name} must be a string")
        if not self.chain_id:
            raise ValueError("chain_id must be non-empty")
        for name in ("require_admin_signatures", "structured_logs"):
            if not isinstance(getattr(self, name), bool):
                raise TypeError(f"{name} must be a bool")
        if not isinstance(self.log_level, str) or self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")


_FIELD_NAMES = frozenset(f.name for f in fields(OracleServiceConfig))


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return int(default)
    try:
        v = int(raw.strip())
    except ValueError:
        return int(default)
    if v < 0:
        raise ValueError(f"{name} must be non-negative, got {v}")
    return v


def _env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def config_from_mapping(data: Mapping[str, Any]) -> OracleServiceConfig:
    if not isinstance(data, Mapping):
        raise TypeError("config must be a mapping")
    unknown = sorted(set(data) - _FIELD_NAMES)
    if unknown:
        raise ValueError(f"unknown config keys: {', '.join(map(str, unknown))}")
    return OracleServiceConfig(**dict(data))


def apply_env_overrides(cfg: OracleServiceConfig) -> OracleServiceConfig:
    return replace(
        cfg,
        time_period=_env_int("TWAP_TIME_PERIOD", cfg.time_period),
        non_update_tolerance=_env_int("TWAP_NON_UPDATE_TOLERANCE", cfg.non_update_tolerance),
        admin=_env_str("TWAP_ADMIN", cfg.admin),
        chain_id=_env_str("TWAP_CHAIN_ID", cfg.chain_id),
        log_level=_env_str("TWAP_LOG_LEVEL", cfg.log_level).upper(),
    )


def load_config(path: Optional[Path | str] = None) -> OracleServiceConfig:
    """Load config from an optional YAML file, then apply ``TWAP_*`` env overrides."""
    cfg = OracleServiceConfig()
    if path is not None:
        raw = Path(path).read_text(encoding="utf-8")
        obj = yaml.safe_load(raw)
        if obj is None:
            obj = {}
        cfg = config_from_mapping(obj)
    return apply_env_overrides(cfg)
