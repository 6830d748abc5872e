"""Core domain logic for the relay adapter."""

from .adapt_params import (
    bind_relay_transactions,
    encode_relay_payload,
    format_calls,
    get_adapt_params,
    get_relay_adapt_params,
)
from .adapter import RelayAdapt
from .client import RelayAdaptClient
from .errors import (
    AuthorizationError,
    BindingMismatchError,
    CallFailure,
    InvalidInputError,
    MalformedTransactionError,
    RelayAdaptError,
    TransferFailure,
    UnsupportedResourceError,
)
from .models import BoundParams, Call, CallResult, CommitmentPreimage, TokenData, TokenType, Transaction
from .multicall import run_multicall
from .validation import submit_batch, verify_adapt_params

__all__ = [
    "AuthorizationError",
    "BindingMismatchError",
    "BoundParams",
    "Call",
    "CallFailure",
    "CallResult",
    "CommitmentPreimage",
    "InvalidInputError",
    "MalformedTransactionError",
    "RelayAdapt",
    "RelayAdaptClient",
    "RelayAdaptError",
    "TokenData",
    "TokenType",
    "Transaction",
    "TransferFailure",
    "UnsupportedResourceError",
    "bind_relay_transactions",
    "encode_relay_payload",
    "format_calls",
    "get_adapt_params",
    "get_relay_adapt_params",
    "run_multicall",
    "submit_batch",
    "verify_adapt_params",
]
