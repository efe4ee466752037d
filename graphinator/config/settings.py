"""
Run settings, built once at startup and passed explicitly to everything else.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from graphinator.errors import ConfigurationError
from graphinator.helpers.token_prices import DEFAULT_TOKEN_PRICES_FILE
from graphinator.liquidation.gas_policy import GasPricePolicyConfig

__all__ = ["Settings", "env_bool"]


def env_bool(value: str | None, default: bool = False) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    network: str
    policy: GasPricePolicyConfig
    token: str | None = None
    gas_multiplier: float = 1.2
    # There's no scientific way to determine a safe batch size: the gas
    # consumed by one liquidation varies widely, especially with SuperApp
    # receivers. 1 is the safe default; 10 usually works.
    batch_size: int = 1
    loop: bool = False
    loop_interval: float = 30
    dry_run: bool = False
    is_listed: bool = True
    deposit_consumed_pct_threshold: float = 20
    private_key: str | None = field(default=None, repr=False)
    token_prices_file: Path = DEFAULT_TOKEN_PRICES_FILE
    networks_metadata_file: Path | None = None
    log_dir: Path | None = None
    verbose: bool = False
    receipt_timeout: float = 120

    def __post_init__(self):
        if not self.network:
            raise ConfigurationError("No network provided")
        if self.batch_size < 1:
            raise ConfigurationError(f"batchSize must be at least 1, got {self.batch_size}")
        if self.gas_multiplier < 1.0:
            raise ConfigurationError(f"gasMultiplier must be >= 1.0, got {self.gas_multiplier}")
        if self.loop_interval <= 0:
            raise ConfigurationError(f"loop interval must be positive, got {self.loop_interval}")
        if not self.private_key:
            raise ConfigurationError("No private key provided")
