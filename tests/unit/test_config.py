"""Tests for pool configuration loading."""

import pytest

from cfmm.config import DEFAULT_POOL_CONFIG, FEE_ENV_VAR, PoolConfig, load_config_from_env
from cfmm.types import Percentage


class TestPoolConfig:
    """Tests for PoolConfig defaults."""

    def test_default_fee(self):
        assert DEFAULT_POOL_CONFIG.fee == Percentage.from_str("0.003")

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_POOL_CONFIG.fee = Percentage(0)  # type: ignore[misc]


class TestLoadConfigFromEnv:
    """Tests for environment overrides."""

    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv(FEE_ENV_VAR, raising=False)
        assert load_config_from_env() == DEFAULT_POOL_CONFIG

    def test_blank_uses_default(self, monkeypatch):
        monkeypatch.setenv(FEE_ENV_VAR, "  ")
        assert load_config_from_env() == DEFAULT_POOL_CONFIG

    def test_fee_from_env(self, monkeypatch):
        monkeypatch.setenv(FEE_ENV_VAR, "0.01")
        assert load_config_from_env() == PoolConfig(fee=Percentage(10_000))

    @pytest.mark.parametrize("value", ["abc", "-0.01", "0.0000001", "1e-999999999", "1e999999999"])
    def test_invalid_fee_raises(self, monkeypatch, value):
        monkeypatch.setenv(FEE_ENV_VAR, value)
        with pytest.raises(ValueError):
            load_config_from_env()
