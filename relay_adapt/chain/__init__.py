"""In-memory execution environment and reference collaborator contracts."""

from .contract import Contract
from .erc20 import ERC20Token, WrappedBaseToken
from .pool import ShieldedPool, get_fee
from .state import CallResult, Revert, World

__all__ = [
    "CallResult",
    "Contract",
    "ERC20Token",
    "Revert",
    "ShieldedPool",
    "World",
    "WrappedBaseToken",
    "get_fee",
]
