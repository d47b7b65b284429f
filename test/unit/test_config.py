"""
Tests for configuration loading, the token registry and error classification.
"""

import logging

import pytest

from amm_client.config.base import BaseConfig
from amm_client.config.chains import ChainConfig
from amm_client.config.contracts import ContractAddresses, ContractConfig
from amm_client.config.manager import ConfigManager, load_config
from amm_client.config.tokens import TokenConfig, validate_address
from amm_client.errors import (
    ConfigError,
    ContractCallError,
    ErrorHandler,
    RpcError,
    TransactionTimeoutError,
    ValidationError,
)
from amm_client.types import ZERO_ADDRESS

from conftest import FACTORY, POSITION_MANAGER, QUOTER, ROUTER, SWAP_ROUTER, TEST, WBCX


def contract_config(**overrides) -> ContractConfig:
    values = {
        "FACTORY_ADDRESS": FACTORY,
        "QUOTER_V2_ADDRESS": QUOTER,
        "SWAP_ROUTER_ADDRESS": SWAP_ROUTER,
        "ROUTER_ADDRESS": ROUTER,
        "POSITION_MANAGER_ADDRESS": POSITION_MANAGER,
        "WRAPPED_NATIVE_ADDRESS": WBCX,
    }
    values.update(overrides)
    return ContractConfig(**values)


class TestBaseConfig:
    """Test environment helpers."""

    def test_invalid_environment(self):
        """Test that unknown environments are rejected."""
        with pytest.raises(ConfigError):
            BaseConfig(ENVIRONMENT="moon")

    def test_env_int(self, monkeypatch):
        """Test integer parsing with a default and a bad value."""
        monkeypatch.setenv("AMM_TEST_INT", "12")
        assert BaseConfig.get_env_int("AMM_TEST_INT", 3) == 12
        assert BaseConfig.get_env_int("AMM_TEST_MISSING_INT", 3) == 3

        monkeypatch.setenv("AMM_TEST_INT", "twelve")
        with pytest.raises(ConfigError):
            BaseConfig.get_env_int("AMM_TEST_INT", 3)

    def test_env_list(self, monkeypatch):
        """Test list parsing with blanks dropped."""
        monkeypatch.setenv("AMM_TEST_LIST", "500, 2500,,")
        assert BaseConfig.get_env_list("AMM_TEST_LIST") == ["500", "2500"]
        assert BaseConfig.get_env_list("AMM_TEST_MISSING_LIST") == []

    def test_required_env(self):
        """Test that a missing required variable raises."""
        with pytest.raises(ConfigError):
            BaseConfig.get_env("AMM_TEST_SURELY_UNSET", required=True)


class TestContractConfig:
    """Test contract address configuration."""

    def test_addresses(self):
        """Test building validated addresses."""
        addresses = contract_config().addresses()
        assert addresses.factory == FACTORY
        assert addresses.wrapped_native == WBCX

    def test_missing_addresses(self):
        """Test that unset contracts are listed and rejected."""
        config = contract_config(FACTORY_ADDRESS="", ROUTER_ADDRESS="")
        assert config.missing() == ["factory", "router"]
        with pytest.raises(ConfigError):
            config.addresses()

    def test_malformed_address(self):
        """Test that malformed addresses are rejected."""
        with pytest.raises(ConfigError):
            ContractAddresses(
                factory="0x1234",
                quoter=QUOTER,
                swap_router=SWAP_ROUTER,
                router=ROUTER,
                position_manager=POSITION_MANAGER,
                wrapped_native=WBCX,
            )

    def test_addresses_are_checksummed(self):
        """Test that lowercase input is normalized."""
        addresses = contract_config(WRAPPED_NATIVE_ADDRESS=WBCX.lower()).addresses()
        assert addresses.wrapped_native == WBCX


class TestTokenRegistry:
    """Test symbol, address and fee tier lookups."""

    def test_resolve(self, registry):
        """Test resolution of symbols, the native asset and raw addresses."""
        assert registry.resolve("TEST") == TEST
        assert registry.resolve("test") == TEST
        assert registry.resolve("BCX") == WBCX
        assert registry.resolve(ZERO_ADDRESS) == WBCX
        assert registry.resolve(TEST.lower()) == TEST.lower()

    def test_native_detection(self, registry):
        """Test native asset detection by symbol and zero address."""
        assert registry.is_native("bcx")
        assert registry.is_native(ZERO_ADDRESS)
        assert not registry.is_native("WBCX")
        assert not registry.is_native("")

    def test_lookups(self, registry):
        """Test token lookups and placeholders."""
        assert registry.by_address(TEST.lower()).symbol == "TEST"
        assert registry.get_or_unknown("0x" + "9" * 40).symbol == "UNKNOWN"
        assert registry.decimals_of("0x" + "9" * 40) == 18
        assert [t.symbol for t in registry.pool_tokens()] == ["WBCX", "TEST", "FRESH"]

    def test_fee_tiers(self, registry):
        """Test supported tiers and tick spacings."""
        assert [(t.fee, t.tick_spacing) for t in registry.fee_tiers] == [(100, 1), (500, 10), (2500, 50), (10000, 200)]
        assert registry.get_fee_tier(2500).label == "0.25%"
        assert registry.get_fee_tier(500).fee_fraction == 0.0005
        with pytest.raises(ValidationError):
            registry.get_fee_tier(3000)

    def test_enabled_fee_tiers(self):
        """Test narrowing the fee tiers through configuration."""
        assert [t.fee for t in TokenConfig(ENABLED_FEE_TIERS=()).fee_tiers] == [100, 500, 2500, 10000]

        config = TokenConfig(ENABLED_FEE_TIERS=("2500", "500"))
        assert [t.fee for t in config.fee_tiers] == [500, 2500]
        with pytest.raises(ValidationError):
            config.registry().get_fee_tier(100)

        with pytest.raises(ConfigError):
            TokenConfig(ENABLED_FEE_TIERS=("3000",)).fee_tiers

    def test_default_token_list(self):
        """Test the built-in token list."""
        tokens = TokenConfig().tokens
        assert tokens[0].is_native
        assert [t.symbol for t in tokens] == ["BCX", "WBCX", "TEST", "FRESH"]

    def test_validate_address(self):
        """Test address validation."""
        assert validate_address(TEST) == TEST
        for bad in ("", "TEST", "0x123", None):
            with pytest.raises(ValidationError):
                validate_address(bad)


class TestConfigManager:
    """Test the combined configuration."""

    def test_load_config_builds_new_instances(self):
        """Test that there is no shared global configuration."""
        first = load_config("test")
        second = load_config("test")
        assert first is not second
        assert first.environment == "test"

    def test_invalid_environment_override(self):
        """Test that a bad environment override raises."""
        with pytest.raises(ConfigError):
            ConfigManager("moon")

    def test_validate_configuration(self):
        """Test validation with complete and incomplete contract addresses."""
        manager = load_config("test")
        manager._contract_config = contract_config()
        assert manager.validate_configuration()

        manager._contract_config = contract_config(QUOTER_V2_ADDRESS="")
        with pytest.raises(ConfigError):
            manager.validate_configuration()

    def test_to_dict(self):
        """Test the debug view."""
        data = load_config("test").to_dict()
        assert data["environment"] == "test"
        assert data["fee_tiers"] == [100, 500, 2500, 10000]
        assert "factory" in data["contracts"]

    def test_explorer_url(self):
        """Test explorer links for transactions."""
        url = ChainConfig(EXPLORER_URL="https://explorer.example/").get_explorer_tx_url("0xabc")
        assert url == "https://explorer.example/tx/0xabc"


class TestErrorHandler:
    """Test error classification."""

    def setup_method(self):
        self.handler = ErrorHandler(logging.getLogger("test"))

    def test_classify(self):
        """Test each error category."""
        assert self.handler.classify_error(ValidationError("bad")) == "validation"
        assert self.handler.classify_error(ContractCallError("reverted")) == "contract"
        assert self.handler.classify_error(RpcError("429 Too Many Requests")) == "rate_limit"
        assert self.handler.classify_error(RpcError("boom")) == "network"
        assert self.handler.classify_error(TransactionTimeoutError("0x1", 1)) == "network"
        assert self.handler.classify_error(Exception("execution reverted")) == "contract"
        assert self.handler.classify_error(Exception("weird")) == "unknown"

    def test_transient(self):
        """Test which failures say nothing about chain state."""
        assert self.handler.is_transient(RpcError("connection reset"))
        assert not self.handler.is_transient(ContractCallError("reverted"))

    def test_log_error_levels(self, caplog):
        """Test that errors are logged with their category."""
        with caplog.at_level(logging.INFO, logger="test"):
            self.handler.log_error(RpcError("rate limit exceeded"), {"operation": "getPool"})
        record = caplog.records[-1]
        assert record.levelno == logging.INFO
        assert record.error_category == "rate_limit"
        assert record.operation == "getPool"
