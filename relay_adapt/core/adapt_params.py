"""Adapt-params binding: the fingerprint tying a transaction batch to a payload.

The encoding is the Solidity ABI encoding of ``(uint256[] firstNullifiers,
uint256 transactionCount, bytes additionalData)`` hashed with keccak256, so
anyone holding the batch can reproduce it before the transactions are proven.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Sequence

from eth_abi import encode
from web3 import Web3

from relay_adapt.core.errors import MalformedTransactionError
from relay_adapt.core.models import CALL_ABI_TYPE, Call, Transaction

ADAPT_PARAMS_TYPES = ("uint256[]", "uint256", "bytes")
RELAY_PAYLOAD_TYPES = ("uint256", "bool", f"{CALL_ABI_TYPE}[]")


def first_nullifiers(transactions: Sequence[Transaction]) -> List[int]:
    result: List[int] = []
    for index, transaction in enumerate(transactions):
        if not transaction.nullifiers:
            raise MalformedTransactionError(f"RelayAdapt: transaction {index} has no nullifiers")
        result.append(transaction.nullifiers[0])
    return result


def get_adapt_params(transactions: Sequence[Transaction], additional_data: bytes) -> bytes:
    """Return the 32-byte fingerprint of ``transactions`` and ``additional_data``."""
    encoded = encode(
        list(ADAPT_PARAMS_TYPES),
        [first_nullifiers(transactions), len(transactions), bytes(additional_data)],
    )
    return bytes(Web3.keccak(encoded))


def encode_relay_payload(random: int, require_success: bool, calls: Sequence[Call]) -> bytes:
    """Encode the relay binding payload: nonce, strict flag and call list."""
    return encode(list(RELAY_PAYLOAD_TYPES), [random, require_success, [call.to_abi() for call in calls]])


def get_relay_adapt_params(
    transactions: Sequence[Transaction],
    random: int,
    require_success: bool,
    calls: Sequence[Call],
) -> bytes:
    return get_adapt_params(transactions, encode_relay_payload(random, require_success, calls))


def bind_relay_transactions(
    transactions: Sequence[Transaction],
    adapt_contract: str,
    random: int,
    require_success: bool,
    calls: Sequence[Call],
) -> List[Transaction]:
    """Embed the relay fingerprint into every transaction of the batch."""
    adapt_params = get_relay_adapt_params(transactions, random, require_success, calls)
    return [transaction.bind(adapt_contract, adapt_params) for transaction in transactions]


def format_calls(populated: Iterable[Mapping[str, Any]]) -> List[Call]:
    """Turn populated transactions (``to``/``data``/``value``) into calls."""
    return [Call.from_mapping(entry) for entry in populated]


__all__ = [
    "ADAPT_PARAMS_TYPES",
    "RELAY_PAYLOAD_TYPES",
    "bind_relay_transactions",
    "encode_relay_payload",
    "first_nullifiers",
    "format_calls",
    "get_adapt_params",
    "get_relay_adapt_params",
]
