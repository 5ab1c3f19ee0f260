"""
Configuration loader for the Polymath client.

Provides centralized configuration management with .env overrides and
contract artifact (ABI + bytecode + deployments) loading.

Usage:
    from config.loader import get_config

    config = get_config()
    timing = config.get_timing_config()
    descriptor = config.get_artifact("Customers")
"""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from shared.constants import DEFAULT_RPC_URL
from shared.errors import MissingArtifactError
from shared.types import ContractDescriptor

load_dotenv()

# Resolve config directory relative to this file
_CONFIG_DIR = Path(__file__).parent
_PROJECT_ROOT = _CONFIG_DIR.parent


def _load_json(filepath: Path) -> Dict[str, Any]:
    """Load a JSON config file. Returns empty dict if file doesn't exist."""
    try:
        with open(filepath, "r") as f:
            return json.load(f)
    except FileNotFoundError:
        print(f"[CONFIG_WARN] Config file not found: {filepath}")
        return {}
    except json.JSONDecodeError as e:
        print(f"[CONFIG_ERROR] Invalid JSON in {filepath}: {e}")
        return {}


def get_env_var(var_name: str, default_value: Any, var_type: type) -> Any:
    """Get environment variable with type conversion and fallback."""
    value = os.getenv(var_name, None)
    if value is None:
        return default_value
    try:
        if var_type == bool:
            return value.lower() in ("true", "1", "yes")
        return var_type(value)
    except (ValueError, TypeError):
        return default_value


class ConfigLoader:
    """
    Central configuration manager for the Polymath client.

    Loads configuration from JSON files in the config/ directory with .env overrides.
    All accessor methods are cached via @lru_cache.
    """

    _instance: Optional["ConfigLoader"] = None

    def __init__(self):
        self._config_dir = _CONFIG_DIR
        self._project_root = _PROJECT_ROOT

    @classmethod
    def get_instance(cls) -> "ConfigLoader":
        """Singleton accessor."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    # ------------------------------------------------------------------
    # Core config file loaders (cached)
    # ------------------------------------------------------------------

    @lru_cache(maxsize=1)
    def get_app_config(self) -> Dict[str, Any]:
        """Load general application settings (provider, logging)."""
        return _load_json(self._config_dir / "app.json")

    @lru_cache(maxsize=1)
    def get_timing_config(self) -> Dict[str, Any]:
        """Load event polling and transaction confirmation timings."""
        return _load_json(self._config_dir / "timing.json")

    @lru_cache(maxsize=1)
    def get_gas_config(self) -> Dict[str, Any]:
        """Load method-specific default gas limits."""
        return _load_json(self._config_dir / "gas.json")

    def get_rpc_url(self) -> str:
        """RPC endpoint: POLYMATH_RPC_URL, then app.json provider.rpc_url."""
        configured = self.get_app_config().get("provider", {}).get("rpc_url", DEFAULT_RPC_URL)
        return get_env_var("POLYMATH_RPC_URL", configured, str)

    def get_default_gas(self, contract_name: str, method: str) -> int | None:
        """Default gas limit for ``<contract_name>.<method>``, or None to let the node estimate."""
        defaults = self.get_gas_config().get("defaults", {})
        gas = defaults.get(f"{contract_name}.{method}")
        return int(gas) if gas is not None else None

    # ------------------------------------------------------------------
    # Artifact loader
    # ------------------------------------------------------------------

    def get_artifacts_dir(self) -> Path:
        """Artifact directory: POLYMATH_ARTIFACTS_DIR, then config/artifacts."""
        return Path(get_env_var("POLYMATH_ARTIFACTS_DIR", str(self._config_dir / "artifacts"), str))

    @lru_cache(maxsize=32)
    def get_artifact(self, contract_name: str) -> ContractDescriptor:
        """Load config/artifacts/<contract_name>.json as an immutable descriptor."""
        path = self.get_artifacts_dir() / f"{contract_name}.json"
        if not path.is_file():
            raise MissingArtifactError(str(path))
        data = _load_json(path)
        if "contractName" not in data:
            data = {**data, "contractName": contract_name}
        return ContractDescriptor.from_artifact(data)

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------

    def clear_cache(self) -> None:
        """Clear all cached configurations (useful for testing)."""
        for method_name in dir(self):
            method = getattr(self, method_name)
            if hasattr(method, "cache_clear"):
                method.cache_clear()


# ---------------------------------------------------------------------------
# Module-level convenience functions
# ---------------------------------------------------------------------------

def get_config() -> ConfigLoader:
    """Get the singleton ConfigLoader instance."""
    return ConfigLoader.get_instance()
