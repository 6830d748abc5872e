"""Validation of transaction batches against their adapt-params binding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from relay_adapt.chain.state import World
from relay_adapt.contracts import encode_function_call, load_contract_abi
from relay_adapt.core.adapt_params import get_adapt_params
from relay_adapt.core.errors import BindingMismatchError
from relay_adapt.core.models import Transaction
from relay_adapt.utils import get_logger

LOGGER = get_logger("relay_adapt.validation")

POOL_ABI = load_contract_abi("shielded_pool_abi.json")


@dataclass(frozen=True)
class BatchValidationResult:
    """The fingerprint every transaction of a batch was checked against."""

    adapt_params: bytes
    transaction_count: int

    @property
    def adapt_params_hex(self) -> str:
        return "0x" + self.adapt_params.hex()


def verify_adapt_params(transactions: Sequence[Transaction], additional_data: bytes) -> BatchValidationResult:
    """Require every transaction to carry the fingerprint recomputed for the batch."""
    expected = get_adapt_params(transactions, additional_data)
    for index, transaction in enumerate(transactions):
        if transaction.adapt_params != expected:
            LOGGER.warning(
                "Transaction %s adapt params 0x%s != expected 0x%s",
                index,
                transaction.adapt_params.hex(),
                expected.hex(),
            )
            raise BindingMismatchError(index)
    return BatchValidationResult(adapt_params=expected, transaction_count=len(transactions))


def submit_batch(
    world: World,
    *,
    adapter: str,
    pool: str,
    transactions: Sequence[Transaction],
    additional_data: bytes,
) -> BatchValidationResult:
    """Validate the batch, then forward it unmodified to the pool."""
    result = verify_adapt_params(transactions, additional_data)
    data = encode_function_call(POOL_ABI, "transact", [[transaction.to_abi() for transaction in transactions]])
    world.invoke(adapter, pool, data)
    LOGGER.info("Submitted %s transaction(s) bound to %s", result.transaction_count, result.adapt_params_hex)
    return result


__all__ = ["BatchValidationResult", "POOL_ABI", "submit_batch", "verify_adapt_params"]
