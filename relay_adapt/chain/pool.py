"""Reference shielded pool: the transaction processor the adapter submits to.

Proofs are not verified here. The pool enforces what the adapter relies on at
its boundary: nullifier uniqueness, the adapt-contract binding of each
transaction, and fee-charging deposits of fungible tokens.
"""

from __future__ import annotations

from typing import Sequence, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

from relay_adapt.chain.contract import Contract
from relay_adapt.chain.state import Revert, World
from relay_adapt.contracts import encode_function_call, load_contract_abi
from relay_adapt.utils import ZERO_ADDRESS, checksum, get_logger, is_zero_address

LOGGER = get_logger("relay_adapt.chain.pool")

BASIS_POINTS = 10_000
ERC20_TOKEN_TYPE = 0
MAX_NOTE_VALUE = 2**120 - 1

_ERC20_ABI = load_contract_abi("erc20_abi.json")


def get_fee(amount: int, is_inclusive: bool, fee_bp: int) -> Tuple[int, int]:
    """Split ``amount`` into ``(base, fee)``.

    Inclusive fees are taken out of ``amount``; exclusive fees are charged on
    top so that ``base == amount``.
    """
    if is_inclusive:
        base = amount - (amount * fee_bp) // BASIS_POINTS
        return base, amount - base
    return amount, (BASIS_POINTS * amount) // (BASIS_POINTS - fee_bp) - amount


class ShieldedPool(Contract):
    ABI_FILES = ("shielded_pool_abi.json",)

    def __init__(
        self,
        world: World,
        *,
        treasury: str,
        deposit_fee_bp: int = 25,
        deployer: str = ZERO_ADDRESS,
    ) -> None:
        if not 0 <= deposit_fee_bp < BASIS_POINTS:
            raise ValueError("deposit_fee_bp must be in [0, 10000)")
        self.treasury = checksum(treasury)
        self.deposit_fee_bp = deposit_fee_bp
        super().__init__(world, deployer=deployer)

    def transact(self, transactions: Sequence[tuple]) -> None:
        sender = self.world.msg_sender
        for nullifiers, commitments, (adapt_contract, _adapt_params) in transactions:
            if not is_zero_address(adapt_contract) and checksum(adapt_contract) != sender:
                raise Revert("ShieldedPool: AdaptID mismatch")
            for nullifier in nullifiers:
                if self.nullifiers(nullifier):
                    raise Revert("ShieldedPool: Nullifier already seen")
                self._store(("nullifier", nullifier), True)
            for commitment in commitments:
                self._append_commitment(commitment)
        LOGGER.info("Accepted %s transaction(s) from %s", len(transactions), sender)

    def generate_deposit(self, notes: Sequence[tuple], encrypted_random: Sequence[tuple]) -> None:
        if len(notes) != len(encrypted_random):
            raise Revert("ShieldedPool: notes and encrypted randoms length mismatch")
        sender = self.world.msg_sender
        for npk, token, value in notes:
            token_type, token_address, _sub_id = token
            if token_type != ERC20_TOKEN_TYPE:
                raise Revert("ShieldedPool: Unsupported token type")
            if value > MAX_NOTE_VALUE:
                raise Revert("ShieldedPool: note value out of range")
            base, fee = get_fee(value, True, self.deposit_fee_bp)
            self._pull(token_address, sender, self.address, base)
            if fee:
                self._pull(token_address, sender, self.treasury, fee)
            digest = Web3.keccak(encode(["uint256", "(uint8,address,uint256)", "uint120"], [npk, token, base]))
            self._append_commitment(int.from_bytes(digest, "big"))
            LOGGER.info("Deposited %s of %s (fee %s) for %s", base, checksum(token_address), fee, sender)

    def nullifiers(self, nullifier: int) -> bool:
        return self._load(("nullifier", nullifier), False)

    def commitment_count(self) -> int:
        return self._load("commitment_count")

    def commitment_at(self, index: int) -> int:
        if index >= self.commitment_count():
            raise Revert("ShieldedPool: commitment index out of range")
        return self._load(("commitment", index))

    def _append_commitment(self, commitment: int) -> None:
        count = self.commitment_count()
        self._store(("commitment", count), commitment)
        self._store("commitment_count", count + 1)

    def _pull(self, token: str, owner: str, recipient: str, amount: int) -> None:
        data = encode_function_call(_ERC20_ABI, "transferFrom", [checksum(owner), checksum(recipient), amount])
        if self.world.code_at(token) is None:
            raise Revert("ShieldedPool: token has no code")
        returned = self.world.invoke(self.address, token, data)
        if not returned:
            return
        try:
            (success,) = decode(["bool"], returned)
        except DecodingError as exc:
            raise Revert("ShieldedPool: token transfer failed") from exc
        if not success:
            raise Revert("ShieldedPool: token transfer failed")


__all__ = ["BASIS_POINTS", "MAX_NOTE_VALUE", "ShieldedPool", "get_fee"]
