"""Reference fungible token and wrapped native asset."""

from __future__ import annotations

from relay_adapt.chain.contract import Contract
from relay_adapt.chain.state import Revert, World
from relay_adapt.utils import ZERO_ADDRESS, checksum

MAX_UINT256 = 2**256 - 1


class ERC20Token(Contract):
    """Standard fungible token with an unlimited-allowance shortcut."""

    ABI_FILES = ("erc20_abi.json",)

    def __init__(self, world: World, symbol: str = "TST", *, deployer: str = ZERO_ADDRESS) -> None:
        self.symbol = symbol
        super().__init__(world, deployer=deployer)

    def balance_of(self, owner: str) -> int:
        return self._load(("balance", checksum(owner)))

    def allowance(self, owner: str, spender: str) -> int:
        return self._load(("allowance", checksum(owner), checksum(spender)))

    def total_supply(self) -> int:
        return self._load("total_supply")

    def transfer(self, to: str, value: int) -> bool:
        self._move(self.world.msg_sender, to, value)
        return True

    def transfer_from(self, owner: str, to: str, value: int) -> bool:
        spender = self.world.msg_sender
        allowed = self.allowance(owner, spender)
        if allowed < value:
            raise Revert("ERC20: insufficient allowance")
        if allowed != MAX_UINT256:
            self._store(("allowance", checksum(owner), checksum(spender)), allowed - value)
        self._move(owner, to, value)
        return True

    def approve(self, spender: str, value: int) -> bool:
        self._store(("allowance", checksum(self.world.msg_sender), checksum(spender)), value)
        return True

    def mint(self, to: str, value: int) -> None:
        """Create ``value`` tokens for ``to``; a genesis helper, not part of the ABI."""
        self._store(("balance", checksum(to)), self.balance_of(to) + value)
        self._store("total_supply", self.total_supply() + value)

    def burn(self, owner: str, value: int) -> None:
        balance = self.balance_of(owner)
        if balance < value:
            raise Revert("ERC20: burn amount exceeds balance")
        self._store(("balance", checksum(owner)), balance - value)
        self._store("total_supply", self.total_supply() - value)

    def _move(self, sender: str, recipient: str, value: int) -> None:
        balance = self.balance_of(sender)
        if balance < value:
            raise Revert("ERC20: transfer amount exceeds balance")
        self._store(("balance", checksum(sender)), balance - value)
        self._store(("balance", checksum(recipient)), self.balance_of(recipient) + value)


class WrappedBaseToken(ERC20Token):
    """WETH9-style wrapper: native funds in, tokens out, and back."""

    ABI_FILES = ("erc20_abi.json", "wrapped_base_abi.json")

    def __init__(self, world: World, symbol: str = "WETH", *, deployer: str = ZERO_ADDRESS) -> None:
        super().__init__(world, symbol, deployer=deployer)

    def deposit(self) -> None:
        self.mint(self.world.msg_sender, self.world.msg_value)

    def withdraw(self, wad: int) -> None:
        holder = self.world.msg_sender
        self.burn(holder, wad)
        self.world.invoke(self.address, holder, b"", wad)

    def receive(self) -> None:
        self.deposit()


__all__ = ["ERC20Token", "MAX_UINT256", "WrappedBaseToken"]
