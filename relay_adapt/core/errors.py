"""Errors raised by the relay adapter.

Each one is a :class:`~relay_adapt.chain.state.Revert`, so raising it unwinds
every state change back to the enclosing call boundary.
"""

from __future__ import annotations

from typing import Optional

from relay_adapt.chain.state import Revert
from relay_adapt.contracts.codec import decode_custom_error, decode_revert_reason, encode_custom_error


class RelayAdaptError(Revert):
    """Base class for adapter failures."""


class AuthorizationError(RelayAdaptError):
    def __init__(self, caller: str) -> None:
        super().__init__("RelayAdapt: Caller must be self or origin")
        self.caller = caller


class BindingMismatchError(RelayAdaptError):
    def __init__(self, index: int) -> None:
        super().__init__("RelayAdapt: AdaptID Parameters Mismatch")
        self.index = index


class UnsupportedResourceError(RelayAdaptError):
    pass


class TransferFailure(RelayAdaptError):
    pass


class InvalidInputError(RelayAdaptError, ValueError):
    pass


class MalformedTransactionError(InvalidInputError):
    pass


CALL_FAILED_ERROR = ("CallFailed", ("uint256", "bytes"))


class CallFailure(RelayAdaptError):
    """A multicall step failed while success was required.

    Revert data is ``CallFailed(uint256 callIndex, bytes revertReason)``.
    """

    def __init__(self, call_index: int, return_data: bytes) -> None:
        name, types = CALL_FAILED_ERROR
        self.call_index = call_index
        self.return_data = return_data
        reason = decode_revert_reason(return_data)
        message = f"RelayAdapt: call {call_index} failed" + (f": {reason}" if reason else "")
        super().__init__(message, data=encode_custom_error(name, types, [call_index, return_data]))


def decode_call_failure(data: bytes) -> Optional[tuple]:
    """Return ``(call_index, revert_reason_bytes)`` for ``CallFailed`` data."""
    name, types = CALL_FAILED_ERROR
    return decode_custom_error(name, types, data)


__all__ = [
    "AuthorizationError",
    "BindingMismatchError",
    "CallFailure",
    "InvalidInputError",
    "MalformedTransactionError",
    "RelayAdaptError",
    "TransferFailure",
    "UnsupportedResourceError",
    "decode_call_failure",
]
