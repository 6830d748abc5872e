"""Config loader for the relay adapter project."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional

from web3 import Web3

from relay_adapt.utils import load_json_file

BASIS_POINTS = 10_000


class ConfigError(ValueError):
    """Raised when configuration data is invalid or missing."""


def _require_keys(data: Mapping[str, Any], keys: Iterable[str], context: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        raise ConfigError(f"{context} missing required keys: {', '.join(missing)}")


def _to_checksum(value: str, *, field_name: str) -> str:
    try:
        return Web3.to_checksum_address(value)
    except Exception as exc:  # web3 raises ValueError for malformed inputs
        raise ConfigError(f"Invalid address for {field_name}: {value}") from exc


@dataclass(frozen=True)
class ChainConfig:
    """Configuration for the network hosting the adapter."""

    chain_id: int
    rpc_url: Optional[str] = None

    def ensure_rpc_url(self) -> str:
        """Return the RPC URL or raise if it is missing."""
        if not self.rpc_url:
            raise ConfigError("RPC URL required but not configured")
        return self.rpc_url


@dataclass(frozen=True)
class ContractsConfig:
    """Deployed contract addresses."""

    relay_adapt_address: str
    pool_address: str
    wrapped_base_address: str

    def aliases(self) -> Dict[str, str]:
        """Names a relay plan may use in place of these addresses."""
        return {
            "relay_adapt": self.relay_adapt_address,
            "pool": self.pool_address,
            "wrapped_base": self.wrapped_base_address,
        }


@dataclass(frozen=True)
class PoolConfig:
    """Shielded pool parameters used by the local simulation."""

    deposit_fee_bp: int
    treasury: str


@dataclass(frozen=True)
class DefaultsConfig:
    """Default operational parameters."""

    simulation_funding: int
    rpc_timeout: int


@dataclass(frozen=True)
class RelayAdaptConfig:
    """Typed wrapper around the relay adapter configuration."""

    chain: ChainConfig
    contracts: ContractsConfig
    pool: PoolConfig
    defaults: DefaultsConfig
    raw: Mapping[str, Any] = field(repr=False)

    def to_dict(self) -> Dict[str, Any]:
        """Return the original configuration mapping."""
        return dict(self.raw)


def _load_json(path: Path) -> Mapping[str, Any]:
    try:
        return load_json_file(path)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Config file contains invalid JSON: {path}") from exc


def parse_config(data: Mapping[str, Any]) -> RelayAdaptConfig:
    """Validate an already-loaded configuration mapping."""
    _require_keys(data, ["chain", "contracts", "pool", "defaults"], "config")

    chain_data = data["chain"]
    _require_keys(chain_data, ["chain_id"], "chain")
    chain = ChainConfig(chain_id=int(chain_data["chain_id"]), rpc_url=chain_data.get("rpc_url"))

    contracts_data = data["contracts"]
    _require_keys(contracts_data, ["relay_adapt_address", "pool_address", "wrapped_base_address"], "contracts")
    contracts = ContractsConfig(
        relay_adapt_address=_to_checksum(contracts_data["relay_adapt_address"], field_name="relay_adapt_address"),
        pool_address=_to_checksum(contracts_data["pool_address"], field_name="pool_address"),
        wrapped_base_address=_to_checksum(contracts_data["wrapped_base_address"], field_name="wrapped_base_address"),
    )

    pool_data = data["pool"]
    _require_keys(pool_data, ["deposit_fee_bp", "treasury"], "pool")
    pool = PoolConfig(
        deposit_fee_bp=int(pool_data["deposit_fee_bp"]),
        treasury=_to_checksum(pool_data["treasury"], field_name="pool treasury"),
    )
    if pool.deposit_fee_bp < 0 or pool.deposit_fee_bp >= BASIS_POINTS:
        raise ConfigError("pool.deposit_fee_bp must be between 0 and 9999")

    defaults_data = data["defaults"]
    _require_keys(defaults_data, ["simulation_funding", "rpc_timeout"], "defaults")
    defaults = DefaultsConfig(
        simulation_funding=int(defaults_data["simulation_funding"]),
        rpc_timeout=int(defaults_data["rpc_timeout"]),
    )
    if defaults.simulation_funding < 0:
        raise ConfigError("defaults.simulation_funding must not be negative")
    if defaults.rpc_timeout <= 0:
        raise ConfigError("defaults.rpc_timeout must be positive")

    return RelayAdaptConfig(chain=chain, contracts=contracts, pool=pool, defaults=defaults, raw=data)


def load_config(config_path: Optional[Path] = None) -> RelayAdaptConfig:
    """Load and validate relay adapter configuration data."""
    config_path = config_path or Path("config.json")
    return parse_config(_load_json(config_path))


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
