from __future__ import annotations

import pytest

from src.integration.config import OracleServiceConfig, config_from_mapping, load_config

_ENV_VARS = (
    "TWAP_TIME_PERIOD",
    "TWAP_NON_UPDATE_TOLERANCE",
    "TWAP_ADMIN",
    "TWAP_CHAIN_ID",
    "TWAP_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    cfg = load_config()
    assert cfg == OracleServiceConfig()
    assert cfg.time_period == 1800
    assert cfg.non_update_tolerance == 300
    assert cfg.chain_id == "twap-local"
    assert cfg.require_admin_signatures is False


def test_yaml_file(tmp_path) -> None:
    path = tmp_path / "oracle.yaml"
    path.write_text(
        "time_period: 600\n"
        "non_update_tolerance: 60\n"
        "admin: ops\n"
        "pool_ref: RDPX/WETH\n"
        "structured_logs: true\n",
        encoding="utf-8",
    )
    cfg = load_config(path)
    assert cfg.time_period == 600
    assert cfg.non_update_tolerance == 60
    assert cfg.admin == "ops"
    assert cfg.pool_ref == "RDPX/WETH"
    assert cfg.structured_logs is True


def test_empty_yaml_gives_defaults(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_config(path) == OracleServiceConfig()


def test_unknown_key_rejected() -> None:
    with pytest.raises(ValueError, match="time_perod"):
        config_from_mapping({"time_perod": 5})


def test_non_mapping_rejected(tmp_path) -> None:
    path = tmp_path / "list.yaml"
    path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(TypeError):
        load_config(path)


def test_negative_period_rejected() -> None:
    with pytest.raises(ValueError):
        OracleServiceConfig(time_period=-1)


def test_bool_period_rejected() -> None:
    with pytest.raises(TypeError):
        OracleServiceConfig(time_period=True)


def test_bad_log_level() -> None:
    with pytest.raises(ValueError):
        OracleServiceConfig(log_level="LOUD")


def test_env_overrides_file(tmp_path, monkeypatch) -> None:
    path = tmp_path / "oracle.yaml"
    path.write_text("time_period: 600\nadmin: file-admin\n", encoding="utf-8")
    monkeypatch.setenv("TWAP_TIME_PERIOD", "120")
    monkeypatch.setenv("TWAP_ADMIN", "env-admin")
    monkeypatch.setenv("TWAP_CHAIN_ID", "mainnet")
    monkeypatch.setenv("TWAP_LOG_LEVEL", "debug")
    cfg = load_config(path)
    assert cfg.time_period == 120
    assert cfg.admin == "env-admin"
    assert cfg.chain_id == "mainnet"
    assert cfg.log_level == "DEBUG"


def test_unparseable_env_int_falls_back(monkeypatch) -> None:
    monkeypatch.setenv("TWAP_NON_UPDATE_TOLERANCE", "soon")
    assert load_config().non_update_tolerance == 300


def test_negative_env_int_rejected(monkeypatch) -> None:
    monkeypatch.setenv("TWAP_TIME_PERIOD", "-5")
    with pytest.raises(ValueError):
        load_config()


def test_blank_env_ignored(monkeypatch) -> None:
    monkeypatch.setenv("TWAP_ADMIN", "   ")
    assert load_config().admin == ""
