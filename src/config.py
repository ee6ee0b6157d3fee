"""Configuration loader for Token Forge

All configurable values come from config/config.yaml.
Batch ceilings, supply caps, royalty defaults and deployment policy are
configured there, never hard-coded at call sites.

Configuration is validated at load time using Pydantic.
Typos and invalid values fail fast with clear error messages.

The config path can be overridden with the TOKEN_FORGE_CONFIG environment
variable (a local .env file is honoured).

Usage:
    from src.config import load_config, get, get_validated_config

    # Load and validate (call once at startup)
    load_config("config/config.yaml")

    # Get values by dot-path
    ceiling = get("fungible.batch_ceiling")

    # Or use the typed config object (preferred)
    config = get_validated_config()
    ceiling = config.fungible.batch_ceiling
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .config_schema import AppConfig, load_validated_config, validate_config_dict


# Global config instances
_config: dict[str, Any] | None = None
_validated_config: AppConfig | None = None

# Default config path
DEFAULT_CONFIG_PATH: Path = Path(__file__).parent.parent / "config" / "config.yaml"
CONFIG_ENV_VAR: str = "TOKEN_FORGE_CONFIG"


def _resolve_config_path(config_path: str | None) -> Path:
    if config_path:
        return Path(config_path)
    load_dotenv()
    override = os.environ.get(CONFIG_ENV_VAR)
    return Path(override) if override else DEFAULT_CONFIG_PATH


def load_config(config_path: str | None = None) -> dict[str, Any]:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to $TOKEN_FORGE_CONFIG,
            then config/config.yaml.

    Returns:
        Configuration dictionary.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid.
    """
    global _config, _validated_config

    path = _resolve_config_path(config_path)

    _validated_config = load_validated_config(path)

    with open(path) as f:
        loaded: Any = yaml.safe_load(f)
        if not isinstance(loaded, dict):
            loaded = {}
        _config = loaded

    logging.getLogger("src").setLevel(_validated_config.logging.level)
    return _config


def get_config() -> dict[str, Any]:
    """Get the loaded configuration dict. Loads default if not already loaded.

    For typed access, use get_validated_config() instead.
    """
    global _config
    if _config is None:
        load_config()
    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")
    return _config


def get_validated_config() -> AppConfig:
    """Get the validated configuration object.

    Loads default config if not already loaded.
    """
    global _validated_config
    if _validated_config is None:
        load_config()
    if _validated_config is None:
        raise RuntimeError("Validated config failed to load. Call load_config() first.")
    return _validated_config


def get(key: str, default: Any = None) -> Any:
    """Get a config value by dot-separated key path.

    Examples:
        get("fungible.batch_ceiling")
        get("registry.royalty_fee_bps")
        get("factory.restricted")
    """
    config: dict[str, Any] = get_config()
    value: Any = config
    for k in key.split("."):
        if isinstance(value, dict) and k in value:
            value = value[k]
        else:
            return default
    return value


def set_config_value(key: str, value: Any) -> None:
    """Set a config value by dot-separated key path and re-validate.

    Used for runtime overrides (tests, one-off scripts).

    Args:
        key: Dot-separated key path (e.g., "factory.restricted")
        value: Value to set
    """
    global _config, _validated_config

    if _config is None:
        load_config()
    if _config is None:
        raise RuntimeError("Config failed to load. Call load_config() first.")

    keys = key.split(".")
    target = _config
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            target[k] = {}
        target = target[k]
    target[keys[-1]] = value

    _validated_config = validate_config_dict(_config)
