"""Caller-side wrapper around a deployed relay adapter."""

from __future__ import annotations

from typing import Any, List, Sequence

from relay_adapt.chain.state import CallResult, World
from relay_adapt.contracts import decode_function_result, encode_function_call, load_contract_abi
from relay_adapt.core.models import Call, TokenData, Transaction
from relay_adapt.utils import checksum, get_logger

LOGGER = get_logger("relay_adapt.client")

RELAY_ADAPT_ABI = load_contract_abi("relay_adapt_abi.json")


def _transactions_abi(transactions: Sequence[Transaction]) -> list:
    return [transaction.to_abi() for transaction in transactions]


def _calls_abi(calls: Sequence[Call]) -> list:
    return [call.to_abi() for call in calls]


def _tokens_abi(tokens: Sequence[TokenData]) -> list:
    return [token.to_abi() for token in tokens]


class RelayAdaptClient:
    """Encodes adapter calls and submits them as transactions from ``origin``."""

    def __init__(self, world: World, address: str, origin: str) -> None:
        self.world = world
        self.address = checksum(address)
        self.origin = checksum(origin)

    def relay(
        self,
        transactions: Sequence[Transaction],
        random: int,
        require_success: bool,
        calls: Sequence[Call],
        *,
        value: int = 0,
    ) -> List[CallResult]:
        raw = self._send(
            "relay",
            [_transactions_abi(transactions), random, require_success, _calls_abi(calls)],
            value=value,
        )
        return self._results("relay", raw)

    def transact(self, transactions: Sequence[Transaction], additional_data: bytes) -> None:
        self._send("transact", [_transactions_abi(transactions), additional_data])

    def multicall(self, require_success: bool, calls: Sequence[Call], *, value: int = 0) -> List[CallResult]:
        raw = self._send("multicall", [require_success, _calls_abi(calls)], value=value)
        return self._results("multicall", raw)

    def deposit(self, tokens: Sequence[TokenData], encrypted_random: Sequence[Sequence[int]], npk: int) -> None:
        self._send("deposit", [_tokens_abi(tokens), [tuple(pair) for pair in encrypted_random], npk])

    def send(self, tokens: Sequence[TokenData], to: str) -> None:
        self._send("send", [_tokens_abi(tokens), checksum(to)])

    def wrap_all_base(self) -> None:
        self._send("wrapAllBase", [])

    def unwrap_all_base(self) -> None:
        self._send("unwrapAllBase", [])

    def get_adapt_params(self, transactions: Sequence[Transaction], additional_data: bytes) -> bytes:
        data = encode_function_call(RELAY_ADAPT_ABI, "getAdaptParams", [_transactions_abi(transactions), additional_data])
        return decode_function_result(RELAY_ADAPT_ABI, "getAdaptParams", self.world.view(self.address, data))

    def get_relay_adapt_params(
        self,
        transactions: Sequence[Transaction],
        random: int,
        require_success: bool,
        calls: Sequence[Call],
    ) -> bytes:
        data = encode_function_call(
            RELAY_ADAPT_ABI,
            "getRelayAdaptParams",
            [_transactions_abi(transactions), random, require_success, _calls_abi(calls)],
        )
        return decode_function_result(RELAY_ADAPT_ABI, "getRelayAdaptParams", self.world.view(self.address, data))

    def populate(self, function_name: str, *args: Any, value: int = 0) -> Call:
        """Build a call to the adapter itself, for use as a multicall step.

        Arguments are given in ABI form, e.g. ``[token.to_abi()]`` for a token list.
        """
        return Call(to=self.address, data=encode_function_call(RELAY_ADAPT_ABI, function_name, list(args)), value=value)

    def _send(self, function_name: str, args: list, *, value: int = 0) -> bytes:
        data = encode_function_call(RELAY_ADAPT_ABI, function_name, args)
        LOGGER.info("Sending %s from %s (value=%s)", function_name, self.origin, value)
        return self.world.transact(self.origin, self.address, data, value)

    @staticmethod
    def _results(function_name: str, raw: bytes) -> List[CallResult]:
        decoded = decode_function_result(RELAY_ADAPT_ABI, function_name, raw)
        return [CallResult.from_abi(entry) for entry in decoded]


__all__ = ["RELAY_ADAPT_ABI", "RelayAdaptClient"]
