"""Configuration utilities for the relay adapter."""

from .loader import (
    ChainConfig,
    ConfigError,
    ContractsConfig,
    DefaultsConfig,
    PoolConfig,
    RelayAdaptConfig,
    load_config,
    parse_config,
)

__all__ = [
    "ChainConfig",
    "ConfigError",
    "ContractsConfig",
    "DefaultsConfig",
    "PoolConfig",
    "RelayAdaptConfig",
    "load_config",
    "parse_config",
]
