"""
Configuration schema validation for the Polymath client.

Validates that all required config files exist and contain required keys.
Run at startup to fail fast on misconfiguration.
"""

from typing import Any

from config.loader import get_config


class ConfigValidationError(ValueError):
    """Raised when a required config key is missing or invalid."""

    pass


def _check_keys(config: dict[str, Any], required_keys: list[str], config_name: str) -> list[str]:
    """Check that all required keys exist in a config dict. Returns list of missing keys."""
    missing = []
    for key in required_keys:
        parts = key.split(".")
        current = config
        for part in parts:
            if not isinstance(current, dict) or part not in current:
                missing.append(key)
                break
            current = current[part]
    return missing


def validate_app_config(config: dict[str, Any]) -> list[str]:
    """Validate app.json has required fields."""
    return _check_keys(
        config,
        [
            "provider.rpc_url",
            "logging.log_dir",
        ],
        "app.json",
    )


def validate_timing_config(config: dict[str, Any]) -> list[str]:
    """Validate timing.json has required fields and positive intervals."""
    errors = _check_keys(
        config,
        [
            "events.poll_interval_seconds",
            "transaction.confirmation_timeout_seconds",
        ],
        "timing.json",
    )
    if not errors:
        if config["events"]["poll_interval_seconds"] <= 0:
            errors.append("events.poll_interval_seconds: must be positive")
        if config["transaction"]["confirmation_timeout_seconds"] <= 0:
            errors.append("transaction.confirmation_timeout_seconds: must be positive")
    return errors


def validate_gas_config(config: dict[str, Any]) -> list[str]:
    """Validate gas.json defaults are positive integers keyed Contract.method."""
    errors = _check_keys(config, ["defaults"], "gas.json")
    if not errors:
        for key, value in config["defaults"].items():
            if "." not in key:
                errors.append(f"defaults.{key}: key must be <Contract>.<method>")
            elif not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(f"defaults.{key}: must be a positive integer")
    return errors


def validate_all_configs() -> None:
    """
    Validate all config files. Raises ConfigValidationError with details
    if any required keys are missing.
    """
    loader = get_config()
    all_errors: dict[str, list[str]] = {}

    validators = {
        "app.json": (loader.get_app_config, validate_app_config),
        "timing.json": (loader.get_timing_config, validate_timing_config),
        "gas.json": (loader.get_gas_config, validate_gas_config),
    }

    for config_name, (loader_fn, validator_fn) in validators.items():
        config = loader_fn()
        if not config:
            all_errors[config_name] = ["Config file is empty or not found"]
            continue
        errors = validator_fn(config)
        if errors:
            all_errors[config_name] = errors

    if all_errors:
        lines = ["Configuration validation failed:"]
        for config_name, errors in all_errors.items():
            lines.append(f"\n  {config_name}:")
            for error in errors:
                lines.append(f"    - {error}")
        raise ConfigValidationError("\n".join(lines))
