"""Tests for configuration loading and validation."""

import copy
import json

import pytest
from web3 import Web3

from relay_adapt.config import ConfigError, load_config, parse_config

VALID_CONFIG = {
    "chain": {"chain_id": 42161, "rpc_url": "https://arb1.example.org"},
    "contracts": {
        "relay_adapt_address": "0x5ad95c537b002770a39dea342c4bb2b68b1497aa",
        "pool_address": "0xfa7093cdd9ee6932b4eb2c9e1cde7ce00b1fa4b9",
        "wrapped_base_address": "0x82af49447d8a07e3bd95bd0d56f35241523fbab1",
    },
    "pool": {"deposit_fee_bp": 25, "treasury": "0x000000000000000000000000000000000000fee5"},
    "defaults": {"simulation_funding": 10**20, "rpc_timeout": 30},
}


def _config(**overrides):
    data = copy.deepcopy(VALID_CONFIG)
    for section, values in overrides.items():
        data[section].update(values)
    return data


def test_parses_valid_config():
    config = parse_config(VALID_CONFIG)
    assert config.chain.chain_id == 42161
    assert config.chain.ensure_rpc_url() == "https://arb1.example.org"
    assert config.contracts.wrapped_base_address == "0x82aF49447D8a07e3bd95BD0d56f35241523fBab1"
    assert config.pool.deposit_fee_bp == 25
    assert config.defaults.rpc_timeout == 30
    assert config.to_dict() == VALID_CONFIG


def test_contract_aliases():
    aliases = parse_config(VALID_CONFIG).contracts.aliases()
    assert set(aliases) == {"relay_adapt", "pool", "wrapped_base"}
    assert aliases["pool"] == Web3.to_checksum_address(VALID_CONFIG["contracts"]["pool_address"])


@pytest.mark.parametrize("section", ["chain", "contracts", "pool", "defaults"])
def test_missing_section(section):
    data = copy.deepcopy(VALID_CONFIG)
    del data[section]
    with pytest.raises(ConfigError, match=f"config missing required keys: {section}"):
        parse_config(data)


def test_missing_contract_key():
    data = copy.deepcopy(VALID_CONFIG)
    del data["contracts"]["pool_address"]
    with pytest.raises(ConfigError, match="contracts missing required keys: pool_address"):
        parse_config(data)


def test_invalid_address():
    with pytest.raises(ConfigError, match="Invalid address for pool treasury"):
        parse_config(_config(pool={"treasury": "0x1234"}))


@pytest.mark.parametrize("fee_bp", [-1, 10_000])
def test_fee_out_of_range(fee_bp):
    with pytest.raises(ConfigError, match="deposit_fee_bp"):
        parse_config(_config(pool={"deposit_fee_bp": fee_bp}))


def test_negative_funding():
    with pytest.raises(ConfigError, match="simulation_funding"):
        parse_config(_config(defaults={"simulation_funding": -1}))


def test_non_positive_timeout():
    with pytest.raises(ConfigError, match="rpc_timeout"):
        parse_config(_config(defaults={"rpc_timeout": 0}))


def test_rpc_url_is_optional_until_needed():
    config = parse_config(_config(chain={"rpc_url": None}))
    with pytest.raises(ConfigError, match="RPC URL required"):
        config.chain.ensure_rpc_url()


def test_load_config_from_file(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(VALID_CONFIG), encoding="utf-8")
    assert load_config(path).chain.chain_id == 42161


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Config file not found"):
        load_config(tmp_path / "absent.json")


def test_load_config_invalid_json(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="invalid JSON"):
        load_config(path)
