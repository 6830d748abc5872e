"""Typed values exchanged with the relay adapter and their ABI shapes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Mapping, Sequence, Tuple

from relay_adapt.chain.state import CallResult
from relay_adapt.utils import ZERO_ADDRESS, checksum, hex_to_bytes, is_zero_address, to_int

TRANSACTION_ABI_TYPE = "(uint256[],uint256[],(address,bytes32))"
CALL_ABI_TYPE = "(address,bytes,uint256)"
TOKEN_DATA_ABI_TYPE = "(uint8,address,uint256)"


class TokenType(IntEnum):
    ERC20 = 0
    ERC721 = 1
    ERC1155 = 2


@dataclass(frozen=True)
class BoundParams:
    """Parameters a transaction's proof commits to."""

    adapt_contract: str = ZERO_ADDRESS
    adapt_params: bytes = bytes(32)

    def to_abi(self) -> Tuple[str, bytes]:
        return (checksum(self.adapt_contract), self.adapt_params)

    @classmethod
    def from_abi(cls, value: Sequence[Any]) -> "BoundParams":
        adapt_contract, adapt_params = value
        return cls(adapt_contract=checksum(adapt_contract), adapt_params=bytes(adapt_params))


@dataclass(frozen=True)
class Transaction:
    """A proven private transaction as seen by the adapter.

    The first nullifier identifies the transaction when binding it to a
    multicall; ``bound_params.adapt_params`` carries that binding.
    """

    nullifiers: Tuple[int, ...]
    commitments: Tuple[int, ...] = ()
    bound_params: BoundParams = field(default_factory=BoundParams)

    def __post_init__(self) -> None:
        object.__setattr__(self, "nullifiers", tuple(int(n) for n in self.nullifiers))
        object.__setattr__(self, "commitments", tuple(int(c) for c in self.commitments))

    @property
    def adapt_params(self) -> bytes:
        return self.bound_params.adapt_params

    def bind(self, adapt_contract: str, adapt_params: bytes) -> "Transaction":
        """Return a copy bound to ``adapt_contract`` with ``adapt_params``."""
        return replace(self, bound_params=BoundParams(checksum(adapt_contract), bytes(adapt_params)))

    def to_abi(self) -> Tuple[Tuple[int, ...], Tuple[int, ...], Tuple[str, bytes]]:
        return (self.nullifiers, self.commitments, self.bound_params.to_abi())

    @classmethod
    def from_abi(cls, value: Sequence[Any]) -> "Transaction":
        nullifiers, commitments, bound_params = value
        return cls(
            nullifiers=tuple(nullifiers),
            commitments=tuple(commitments),
            bound_params=BoundParams.from_abi(bound_params),
        )


@dataclass(frozen=True)
class Call:
    """One external invocation within a multicall."""

    to: str
    data: bytes = b""
    value: int = 0

    def to_abi(self) -> Tuple[str, bytes, int]:
        return (checksum(self.to), self.data, self.value)

    @classmethod
    def from_abi(cls, value: Sequence[Any]) -> "Call":
        to, data, amount = value
        return cls(to=checksum(to), data=bytes(data), value=int(amount))

    @classmethod
    def from_mapping(cls, value: Mapping[str, Any]) -> "Call":
        """Build a call from ``{"to", "data", "value"}`` with hex or raw data."""
        data = value.get("data") or b""
        if isinstance(data, str):
            data = hex_to_bytes(data)
        return cls(to=checksum(value["to"]), data=bytes(data), value=to_int(value.get("value", 0)))


@dataclass(frozen=True)
class TokenData:
    """Identifies a custody resource; ERC20 at the zero address is the native asset."""

    token_type: TokenType
    token_address: str
    token_sub_id: int = 0

    @classmethod
    def native(cls) -> "TokenData":
        return cls(TokenType.ERC20, ZERO_ADDRESS, 0)

    @classmethod
    def erc20(cls, token_address: str) -> "TokenData":
        return cls(TokenType.ERC20, checksum(token_address), 0)

    @property
    def is_native(self) -> bool:
        return self.token_type == TokenType.ERC20 and is_zero_address(self.token_address)

    def to_abi(self) -> Tuple[int, str, int]:
        return (int(self.token_type), checksum(self.token_address), self.token_sub_id)

    @classmethod
    def from_abi(cls, value: Sequence[Any]) -> "TokenData":
        token_type, token_address, token_sub_id = value
        return cls(TokenType(token_type), checksum(token_address), int(token_sub_id))


@dataclass(frozen=True)
class CommitmentPreimage:
    """Request for one shielded note, handed to the pool on deposit."""

    npk: int
    token: TokenData
    value: int

    def to_abi(self) -> Tuple[int, Tuple[int, str, int], int]:
        return (self.npk, self.token.to_abi(), self.value)


__all__ = [
    "BoundParams",
    "CALL_ABI_TYPE",
    "Call",
    "CallResult",
    "CommitmentPreimage",
    "TOKEN_DATA_ABI_TYPE",
    "TRANSACTION_ABI_TYPE",
    "TokenData",
    "TokenType",
    "Transaction",
]
