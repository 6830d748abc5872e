"""The relay adapter contract.

Binds a batch of private transactions to a multicall and runs both in one
atomic unit. Every state-changing entry point is restricted to the
transaction origin or the adapter itself, so a multicall target can never
call back into custody or submission functions.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from relay_adapt.chain.contract import Contract
from relay_adapt.chain.state import World
from relay_adapt.core.adapt_params import encode_relay_payload, get_adapt_params, get_relay_adapt_params
from relay_adapt.core.custody import deposit_all, parse_tokens, send_all, unwrap_all_base, wrap_all_base
from relay_adapt.core.guard import only_self_or_origin
from relay_adapt.core.models import Call, Transaction
from relay_adapt.core.multicall import run_multicall
from relay_adapt.core.validation import submit_batch
from relay_adapt.utils import ZERO_ADDRESS, checksum, get_logger

LOGGER = get_logger("relay_adapt.adapter")


def _transactions(raw: Sequence[tuple]) -> List[Transaction]:
    return [Transaction.from_abi(entry) for entry in raw]


def _calls(raw: Sequence[tuple]) -> List[Call]:
    return [Call.from_abi(entry) for entry in raw]


class RelayAdapt(Contract):
    ABI_FILES = ("relay_adapt_abi.json",)

    def __init__(self, world: World, *, pool: str, wrapped_base: str, deployer: str = ZERO_ADDRESS) -> None:
        self.pool = checksum(pool)
        self.wrapped_base = checksum(wrapped_base)
        super().__init__(world, deployer=deployer)

    @only_self_or_origin
    def relay(
        self,
        transactions: Sequence[tuple],
        random: int,
        require_success: bool,
        calls: Sequence[tuple],
    ) -> List[Tuple[bool, bytes]]:
        call_list = _calls(calls)
        LOGGER.info(
            "Relaying %s transaction(s) with %s call(s) (require_success=%s)",
            len(transactions),
            len(call_list),
            require_success,
        )
        submit_batch(
            self.world,
            adapter=self.address,
            pool=self.pool,
            transactions=_transactions(transactions),
            additional_data=encode_relay_payload(random, require_success, call_list),
        )
        results = run_multicall(self.world, self.address, require_success, call_list)
        return [result.to_abi() for result in results]

    @only_self_or_origin
    def transact(self, transactions: Sequence[tuple], additional_data: bytes) -> None:
        submit_batch(
            self.world,
            adapter=self.address,
            pool=self.pool,
            transactions=_transactions(transactions),
            additional_data=additional_data,
        )

    @only_self_or_origin
    def multicall(self, require_success: bool, calls: Sequence[tuple]) -> List[Tuple[bool, bytes]]:
        results = run_multicall(self.world, self.address, require_success, _calls(calls))
        return [result.to_abi() for result in results]

    @only_self_or_origin
    def deposit(self, tokens: Sequence[tuple], encrypted_random: Sequence[tuple], npk: int) -> None:
        deposit_all(
            self.world,
            holder=self.address,
            pool=self.pool,
            tokens=parse_tokens(tokens),
            encrypted_random=encrypted_random,
            npk=npk,
        )

    @only_self_or_origin
    def send(self, tokens: Sequence[tuple], to: str) -> None:
        send_all(self.world, holder=self.address, tokens=parse_tokens(tokens), recipient=to)

    @only_self_or_origin
    def wrap_all_base(self) -> None:
        wrap_all_base(self.world, holder=self.address, wrapped_base=self.wrapped_base)

    @only_self_or_origin
    def unwrap_all_base(self) -> None:
        unwrap_all_base(self.world, holder=self.address, wrapped_base=self.wrapped_base)

    def get_adapt_params(self, transactions: Sequence[tuple], additional_data: bytes) -> bytes:
        return get_adapt_params(_transactions(transactions), additional_data)

    def get_relay_adapt_params(
        self,
        transactions: Sequence[tuple],
        random: int,
        require_success: bool,
        calls: Sequence[tuple],
    ) -> bytes:
        return get_relay_adapt_params(_transactions(transactions), random, require_success, _calls(calls))


__all__ = ["RelayAdapt"]
