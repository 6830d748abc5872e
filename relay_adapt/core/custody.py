"""Whole-balance custody sweeps.

None of these take an amount: each reads what the holder owns at the moment
it runs, so a sweep placed late in a multicall captures whatever the earlier
calls produced.
"""

from __future__ import annotations

from typing import List, Sequence

from eth_abi import decode
from eth_abi.exceptions import DecodingError

from relay_adapt.chain.pool import MAX_NOTE_VALUE
from relay_adapt.chain.state import World
from relay_adapt.contracts import encode_function_call
from relay_adapt.core.errors import InvalidInputError, TransferFailure, UnsupportedResourceError
from relay_adapt.core.models import CommitmentPreimage, TokenData, TokenType
from relay_adapt.core.tokens import ERC20_ABI, WRAPPED_BASE_ABI, balance_of
from relay_adapt.core.validation import POOL_ABI
from relay_adapt.utils import checksum, get_logger

LOGGER = get_logger("relay_adapt.custody")


def parse_tokens(raw_tokens: Sequence[tuple]) -> List[TokenData]:
    """Decode ABI token tuples, rejecting unknown token types."""
    tokens: List[TokenData] = []
    for raw in raw_tokens:
        try:
            tokens.append(TokenData.from_abi(raw))
        except ValueError as exc:
            raise UnsupportedResourceError(f"RelayAdapt: Unknown token type {raw[0]}") from exc
    return tokens


def deposit_all(
    world: World,
    *,
    holder: str,
    pool: str,
    tokens: Sequence[TokenData],
    encrypted_random: Sequence[Sequence[int]],
    npk: int,
) -> List[CommitmentPreimage]:
    """Deposit the holder's full balance of each token into the pool."""
    if len(tokens) != len(encrypted_random):
        raise InvalidInputError("RelayAdapt: tokens and encrypted randoms length mismatch")

    preimages: List[CommitmentPreimage] = []
    for token in tokens:
        if token.token_type != TokenType.ERC20:
            raise UnsupportedResourceError("RelayAdapt: ERC721 and ERC1155 deposits are not supported")
        if token.is_native:
            raise UnsupportedResourceError("RelayAdapt: native deposits are not supported, call wrapAllBase first")
        balance = balance_of(world, token.token_address, holder)
        if balance > MAX_NOTE_VALUE:
            raise InvalidInputError(f"RelayAdapt: balance of {token.token_address} exceeds the note value range")
        # Tokens rejecting non-zero to non-zero approvals fail here; callers reset with approve(0).
        returned = world.invoke(holder, token.token_address, encode_function_call(ERC20_ABI, "approve", [pool, balance]))
        if not _is_true(world, token.token_address, returned):
            raise TransferFailure(f"RelayAdapt: token approval of {token.token_address} failed")
        preimages.append(CommitmentPreimage(npk=npk, token=token, value=balance))
        LOGGER.info("Depositing %s of %s", balance, token.token_address)

    data = encode_function_call(
        POOL_ABI,
        "generateDeposit",
        [[preimage.to_abi() for preimage in preimages], [tuple(pair) for pair in encrypted_random]],
    )
    world.invoke(holder, pool, data)
    return preimages


def send_all(world: World, *, holder: str, tokens: Sequence[TokenData], recipient: str) -> None:
    """Send the holder's full balance of each resource to ``recipient``."""
    recipient = checksum(recipient)
    for token in tokens:
        if token.is_native:
            amount = world.get_balance(holder)
            result = world.call(holder, recipient, b"", amount)
            if not result.success:
                raise TransferFailure("RelayAdapt: ETH transfer failed")
            LOGGER.info("Sent %s native to %s", amount, recipient)
        elif token.token_type == TokenType.ERC20:
            amount = balance_of(world, token.token_address, holder)
            returned = world.invoke(
                holder, token.token_address, encode_function_call(ERC20_ABI, "transfer", [recipient, amount])
            )
            if not _is_true(world, token.token_address, returned):
                raise TransferFailure(f"RelayAdapt: token transfer of {token.token_address} failed")
            LOGGER.info("Sent %s of %s to %s", amount, token.token_address, recipient)
        else:
            raise UnsupportedResourceError("RelayAdapt: ERC721 and ERC1155 sends are not supported")


def wrap_all_base(world: World, *, holder: str, wrapped_base: str) -> int:
    """Wrap the holder's full native balance; returns the wrapped amount."""
    amount = world.get_balance(holder)
    world.invoke(holder, wrapped_base, encode_function_call(WRAPPED_BASE_ABI, "deposit"), amount)
    LOGGER.info("Wrapped %s native", amount)
    return amount


def unwrap_all_base(world: World, *, holder: str, wrapped_base: str) -> int:
    """Unwrap the holder's full wrapped balance; returns the unwrapped amount."""
    amount = balance_of(world, wrapped_base, holder)
    world.invoke(holder, wrapped_base, encode_function_call(WRAPPED_BASE_ABI, "withdraw", [amount]))
    LOGGER.info("Unwrapped %s native", amount)
    return amount


def _is_true(world: World, token_address: str, returned: bytes) -> bool:
    if world.code_at(token_address) is None:
        return False
    # Tokens returning nothing are treated as successful.
    if not returned:
        return True
    try:
        return bool(decode(["bool"], returned)[0])
    except DecodingError:
        return False


__all__ = ["deposit_all", "parse_tokens", "send_all", "unwrap_all_base", "wrap_all_base"]
