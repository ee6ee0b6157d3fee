"""Pydantic schema for configuration validation.

All config values are validated at startup. Typos and invalid values
fail fast with clear error messages.

Usage:
    from config_schema import load_validated_config, AppConfig
    config = load_validated_config("config/config.yaml")
    # config is now a validated AppConfig instance
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator


UINT256_MAX: int = 2**256 - 1

OwnershipPolicyName = Literal["single_step", "two_step"]


# =============================================================================
# BASE MODEL WITH STRICT VALIDATION
# =============================================================================

class StrictModel(BaseModel):
    """Base model that rejects unknown fields (catches typos)."""

    model_config = ConfigDict(extra="forbid")


# =============================================================================
# FUNGIBLE LEDGER MODEL
# =============================================================================

class FungibleLedgerConfig(StrictModel):
    """Per-instance settings for a fungible ledger.

    Two deployments are expected in practice: an uncapped ledger with a
    1000-recipient batch ceiling, and a capped ledger with a 200-recipient
    ceiling. Both are expressible here.
    """

    max_supply: int | None = Field(
        default=None,
        ge=0,
        le=UINT256_MAX,
        description="Hard ceiling on total supply in base units (None = uint256 width)"
    )
    batch_ceiling: int = Field(
        default=1000,
        gt=0,
        description="batch_transfer rejects lists whose length reaches this value"
    )
    allow_full_balance_batch: bool = Field(
        default=False,
        description="Accept a batch that spends the caller's exact balance (>= instead of >)"
    )
    ownership_policy: OwnershipPolicyName = Field(
        default="single_step",
        description="How ownership transfers complete"
    )

    @property
    def effective_max_supply(self) -> int:
        return UINT256_MAX if self.max_supply is None else self.max_supply


# =============================================================================
# NON-FUNGIBLE REGISTRY MODEL
# =============================================================================

class RegistryConfig(StrictModel):
    """Settings for a non-fungible registry."""

    royalty_fee_bps: int = Field(
        default=250,
        ge=0,
        le=10000,
        description="Default royalty fee in basis points (250 = 2.5%)"
    )
    batch_mint_limit: int = Field(
        default=100,
        gt=0,
        description="Largest count accepted by batch_mint"
    )
    ownership_policy: OwnershipPolicyName = Field(
        default="single_step",
        description="How ownership transfers complete"
    )


# =============================================================================
# DEPLOYMENT FACTORY MODEL
# =============================================================================

class FactoryConfig(StrictModel):
    """Settings for the deployment factory."""

    restricted: bool = Field(
        default=True,
        description="Only the factory owner may deploy (False = anyone)"
    )
    ownership_policy: OwnershipPolicyName = Field(
        default="two_step",
        description="Ownership policy of ledgers created by the factory"
    )
    forward_initial_supply: bool = Field(
        default=True,
        description="Pass the initial supply minted to the factory on to the requester"
    )
    ledger: FungibleLedgerConfig = Field(
        default_factory=FungibleLedgerConfig,
        description="Ledger settings baked into deployed instances"
    )

    @model_validator(mode="after")
    def _ledger_policy_matches(self) -> "FactoryConfig":
        # Deployed ledgers always use the factory's ownership policy
        if self.ledger.ownership_policy != self.ownership_policy:
            self.ledger = self.ledger.model_copy(
                update={"ownership_policy": self.ownership_policy}
            )
        return self


# =============================================================================
# LOGGING MODEL
# =============================================================================

class LoggingConfig(StrictModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Level for the standard library logger"
    )
    events_file: str | None = Field(
        default=None,
        description="JSONL file receiving committed contract events (None = disabled)"
    )
    logs_dir: str = Field(
        default="logs",
        description="Per-run logs directory (e.g., logs/run_20260115_120000/)"
    )
    default_recent: int = Field(
        default=50,
        gt=0,
        description="Default number of recent events to return"
    )


# =============================================================================
# ROOT CONFIG MODEL
# =============================================================================

class AppConfig(StrictModel):
    """Root configuration model.

    All fields have sensible defaults, so an empty config file is valid.
    """

    fungible: FungibleLedgerConfig = Field(default_factory=FungibleLedgerConfig)
    registry: RegistryConfig = Field(default_factory=RegistryConfig)
    factory: FactoryConfig = Field(default_factory=FactoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# LOADING FUNCTIONS
# =============================================================================

def load_validated_config(config_path: str | Path = "config/config.yaml") -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to config YAML file.

    Returns:
        Validated AppConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config is invalid (with detailed error message).
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        raw_config = yaml.safe_load(f) or {}

    return AppConfig.model_validate(raw_config)


def validate_config_dict(config_dict: dict[str, Any]) -> AppConfig:
    """Validate a configuration dictionary.

    Raises:
        pydantic.ValidationError: If config is invalid.
    """
    return AppConfig.model_validate(config_dict)


__all__ = [
    "AppConfig",
    "FungibleLedgerConfig",
    "RegistryConfig",
    "FactoryConfig",
    "LoggingConfig",
    "OwnershipPolicyName",
    "load_validated_config",
    "validate_config_dict",
]
