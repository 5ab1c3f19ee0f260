"""
Unit tests for config/loader.py and config/validate.py.

Tests cover:
- JSON config file loading
- Environment variable overrides with type coercion
- Missing file graceful fallback (empty dict)
- Singleton pattern for ConfigLoader
- Contract artifact loading
- Config validation (validate_all_configs)
- Cache management
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from config.loader import ConfigLoader, _load_json, get_config, get_env_var
from config.validate import (
    ConfigValidationError,
    validate_all_configs,
    validate_app_config,
    validate_gas_config,
    validate_timing_config,
)
from shared.errors import MissingArtifactError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_singleton():
    """Reset the ConfigLoader singleton between tests."""
    ConfigLoader._instance = None
    yield
    ConfigLoader._instance = None


@pytest.fixture
def artifacts_dir(tmp_path, monkeypatch):
    """Point POLYMATH_ARTIFACTS_DIR at a temporary directory."""
    monkeypatch.setenv("POLYMATH_ARTIFACTS_DIR", str(tmp_path))
    get_config().clear_cache()
    yield tmp_path
    get_config().clear_cache()


# ===========================================================================
# ConfigLoader tests
# ===========================================================================


class TestConfigLoaderSingleton:
    def test_get_instance_returns_same_object(self):
        """Singleton pattern should return the same instance."""
        a = ConfigLoader.get_instance()
        b = ConfigLoader.get_instance()
        assert a is b

    def test_get_config_returns_singleton(self):
        """Module-level get_config() should return singleton."""
        cfg = get_config()
        assert cfg is ConfigLoader.get_instance()

    def test_fresh_instance_after_reset(self):
        """After resetting _instance, a new one is created."""
        first = ConfigLoader.get_instance()
        ConfigLoader._instance = None
        second = ConfigLoader.get_instance()
        assert first is not second


class TestConfigLoading:
    def test_get_app_config(self):
        """App config should carry the provider and logging sections."""
        app = get_config().get_app_config()
        assert isinstance(app, dict)
        assert "provider" in app
        assert "logging" in app

    def test_get_timing_config(self):
        """Timing config should have a positive poll interval."""
        timing = get_config().get_timing_config()
        assert timing["events"]["poll_interval_seconds"] > 0

    def test_get_gas_config(self):
        """Gas config should load defaults keyed Contract.method."""
        gas = get_config().get_gas_config()
        assert "Customers.verifyCustomer" in gas["defaults"]

    def test_missing_config_returns_empty_dict(self, tmp_path):
        """Loading a nonexistent config file should return {}."""
        assert _load_json(tmp_path / "nonexistent_config_xyz.json") == {}

    def test_invalid_json_returns_empty_dict(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        assert _load_json(path) == {}


class TestRpcUrl:
    def test_default_from_app_config(self):
        os.environ.pop("POLYMATH_RPC_URL", None)
        assert get_config().get_rpc_url() == "http://localhost:8545"

    def test_env_override(self):
        with patch.dict(os.environ, {"POLYMATH_RPC_URL": "http://node:8545"}):
            assert get_config().get_rpc_url() == "http://node:8545"


class TestDefaultGas:
    def test_configured_method(self):
        assert get_config().get_default_gas("Customers", "verifyCustomer") == 2500000

    def test_unconfigured_method_is_none(self):
        """No configured limit leaves estimation to the node."""
        assert get_config().get_default_gas("PolyToken", "transfer") is None


class TestArtifactLoading:
    def test_default_artifacts_dir(self):
        os.environ.pop("POLYMATH_ARTIFACTS_DIR", None)
        assert get_config().get_artifacts_dir() == Path(__file__).parents[2] / "config" / "artifacts"

    def test_env_artifacts_dir(self, artifacts_dir):
        assert get_config().get_artifacts_dir() == artifacts_dir

    def test_missing_artifact_raises(self, artifacts_dir):
        with pytest.raises(MissingArtifactError) as exc_info:
            get_config().get_artifact("Customers")
        assert exc_info.value.path.endswith("Customers.json")

    def test_load_artifact(self, artifacts_dir):
        (artifacts_dir / "Customers.json").write_text(
            json.dumps(
                {
                    "contractName": "Customers",
                    "abi": [{"type": "function", "name": "newProviderFee"}],
                    "bytecode": "0x6080",
                    "networks": {"5777": {"address": "0x1001"}},
                    "sourceHash": "0xabc",
                }
            )
        )
        descriptor = get_config().get_artifact("Customers")
        assert descriptor.contract_name == "Customers"
        assert descriptor.abi[0]["name"] == "newProviderFee"
        assert descriptor.deployed_address(5777) == "0x1001"
        assert descriptor.deployed_address("1") is None
        assert descriptor.source_hash == "0xabc"

    def test_contract_name_defaults_to_file_name(self, artifacts_dir):
        (artifacts_dir / "PolyToken.json").write_text(json.dumps({"abi": []}))
        descriptor = get_config().get_artifact("PolyToken")
        assert descriptor.contract_name == "PolyToken"
        assert descriptor.networks == {}


class TestCacheManagement:
    def test_cache_produces_same_result(self):
        """Cached calls should return the same object."""
        cfg = get_config()
        a = cfg.get_timing_config()
        b = cfg.get_timing_config()
        assert a is b

    def test_clear_cache(self):
        """clear_cache should not raise and should allow fresh loads."""
        cfg = get_config()
        _ = cfg.get_timing_config()
        cfg.clear_cache()
        result = cfg.get_timing_config()
        assert isinstance(result, dict)

    def test_cached_artifact_is_shared(self, artifacts_dir):
        (artifacts_dir / "Compliance.json").write_text(json.dumps({"contractName": "Compliance", "abi": []}))
        cfg = get_config()
        assert cfg.get_artifact("Compliance") is cfg.get_artifact("Compliance")


# ===========================================================================
# get_env_var tests
# ===========================================================================


class TestGetEnvVar:
    def test_bool_true_values(self):
        """Boolean 'true', '1', 'yes' should parse as True."""
        for val in ("true", "True", "TRUE", "1", "yes"):
            with patch.dict(os.environ, {"TEST_BOOL": val}):
                assert get_env_var("TEST_BOOL", False, bool) is True

    def test_bool_false_values(self):
        """Boolean 'false', '0', 'no' should parse as False."""
        for val in ("false", "False", "0", "no"):
            with patch.dict(os.environ, {"TEST_BOOL": val}):
                assert get_env_var("TEST_BOOL", True, bool) is False

    def test_int_conversion(self):
        with patch.dict(os.environ, {"TEST_INT": "42"}):
            assert get_env_var("TEST_INT", 0, int) == 42

    def test_float_conversion(self):
        with patch.dict(os.environ, {"TEST_FLOAT": "3.14"}):
            assert get_env_var("TEST_FLOAT", 0.0, float) == pytest.approx(3.14)

    def test_missing_var_returns_default(self):
        os.environ.pop("DEFINITELY_NOT_SET_XYZ", None)
        assert get_env_var("DEFINITELY_NOT_SET_XYZ", "fallback", str) == "fallback"

    def test_invalid_int_returns_default(self):
        """Non-numeric value for int should return default."""
        with patch.dict(os.environ, {"TEST_BAD_INT": "abc"}):
            assert get_env_var("TEST_BAD_INT", 99, int) == 99


# ===========================================================================
# Config validation tests
# ===========================================================================


class TestValidateAppConfig:
    def test_valid_app_config(self):
        cfg = {"provider": {"rpc_url": "http://localhost:8545"}, "logging": {"log_dir": "logs"}}
        assert validate_app_config(cfg) == []

    def test_missing_provider(self):
        errors = validate_app_config({"logging": {"log_dir": "logs"}})
        assert "provider.rpc_url" in errors


class TestValidateTimingConfig:
    def test_valid_timing_config(self):
        cfg = {
            "events": {"poll_interval_seconds": 1.0},
            "transaction": {"confirmation_timeout_seconds": 120},
        }
        assert validate_timing_config(cfg) == []

    def test_missing_fields(self):
        errors = validate_timing_config({})
        assert "events.poll_interval_seconds" in errors

    def test_non_positive_interval(self):
        cfg = {
            "events": {"poll_interval_seconds": 0},
            "transaction": {"confirmation_timeout_seconds": 120},
        }
        errors = validate_timing_config(cfg)
        assert errors == ["events.poll_interval_seconds: must be positive"]


class TestValidateGasConfig:
    def test_valid_gas_config(self):
        assert validate_gas_config({"defaults": {"Customers.verifyCustomer": 2500000}}) == []

    def test_key_without_method(self):
        errors = validate_gas_config({"defaults": {"verifyCustomer": 2500000}})
        assert len(errors) == 1

    @pytest.mark.parametrize("value", [0, -1, "300000", True])
    def test_non_positive_integer(self, value):
        errors = validate_gas_config({"defaults": {"Customers.newProvider": value}})
        assert errors == ["defaults.Customers.newProvider: must be a positive integer"]


class TestValidateAllConfigs:
    def test_all_configs_valid(self):
        """validate_all_configs should pass with the shipped config files."""
        validate_all_configs()

    def test_raises_on_invalid(self):
        mock_loader = MagicMock()
        mock_loader.get_app_config.return_value = {}
        mock_loader.get_timing_config.return_value = {}
        mock_loader.get_gas_config.return_value = {}

        with (
            patch("config.validate.get_config", return_value=mock_loader),
            pytest.raises(ConfigValidationError, match="validation failed"),
        ):
            validate_all_configs()

    def test_error_message_includes_details(self):
        """Error message should list which configs and keys failed."""
        mock_loader = MagicMock()
        mock_loader.get_app_config.return_value = {"logging": {"log_dir": "logs"}}
        mock_loader.get_timing_config.return_value = {
            "events": {"poll_interval_seconds": 1.0},
            "transaction": {"confirmation_timeout_seconds": 120},
        }
        mock_loader.get_gas_config.return_value = {"defaults": {}}

        with (
            patch("config.validate.get_config", return_value=mock_loader),
            pytest.raises(ConfigValidationError, match="provider.rpc_url"),
        ):
            validate_all_configs()
