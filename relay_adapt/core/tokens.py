"""Token balance and allowance helpers."""

from __future__ import annotations

from typing import Dict

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from relay_adapt.chain.state import Revert, World
from relay_adapt.contracts import encode_function_call, load_contract_abi
from relay_adapt.utils import checksum, is_zero_address

ERC20_ABI = load_contract_abi("erc20_abi.json")
WRAPPED_BASE_ABI = ERC20_ABI + load_contract_abi("wrapped_base_abi.json")


def _read(world: World, caller: str, target: str, data: bytes) -> bytes:
    # Inside a running transaction the read is an ordinary nested call.
    if world.depth:
        return world.invoke(caller, target, data)
    return world.view(target, data, sender=caller)


def _read_uint(world: World, caller: str, target: str, data: bytes) -> int:
    returned = _read(world, caller, target, data)
    try:
        (value,) = decode(["uint256"], returned)
    except DecodingError as exc:
        raise Revert(f"Token read from {checksum(target)} returned malformed data") from exc
    return value


def balance_of(world: World, token_address: str, owner: str) -> int:
    """Fetch the ERC20 balance; the zero address reads the native balance."""
    if is_zero_address(token_address):
        return world.get_balance(owner)
    data = encode_function_call(ERC20_ABI, "balanceOf", [checksum(owner)])
    return _read_uint(world, owner, token_address, data)


def allowance_of(world: World, token_address: str, owner: str, spender: str) -> int:
    """Fetch the ERC20 allowance."""
    data = encode_function_call(ERC20_ABI, "allowance", [checksum(owner), checksum(spender)])
    return _read_uint(world, owner, token_address, data)


def snapshot_balances(world: World, token_addresses: Dict[str, str], owner: str) -> Dict[str, int]:
    """Return balances for token symbols keyed by symbol."""
    return {symbol: balance_of(world, address, owner) for symbol, address in token_addresses.items()}


__all__ = ["ERC20_ABI", "WRAPPED_BASE_ABI", "allowance_of", "balance_of", "snapshot_balances"]
