"""Journaled in-memory execution environment.

The :class:`World` keeps native balances, per-contract storage and the call
stack of the transaction currently executing. Every mutation appends an undo
record to a journal so that any call frame, or a whole transaction, can be
rolled back to the exact state it started from.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Hashable, List, Optional, Tuple

from eth_abi import encode
from web3 import Web3

from relay_adapt.contracts.codec import decode_revert_reason, encode_revert_reason
from relay_adapt.utils import ZERO_ADDRESS, checksum, get_logger

if TYPE_CHECKING:  # pragma: no cover
    from relay_adapt.chain.contract import Contract

LOGGER = get_logger("relay_adapt.chain")

_MISSING = object()


class Revert(Exception):
    """Execution failure that unwinds state.

    ``data`` is the raw revert payload seen by callers of a failed low-level
    call, ``Error(string)`` encoded unless a subclass supplies custom error data.
    """

    def __init__(self, message: str = "", data: Optional[bytes] = None) -> None:
        super().__init__(message)
        if data is None:
            data = encode_revert_reason(message) if message else b""
        self.data = data

    @property
    def reason(self) -> Optional[str]:
        return decode_revert_reason(self.data)


@dataclass(frozen=True)
class CallResult:
    """Outcome of one low-level call."""

    success: bool
    return_data: bytes = b""

    def to_abi(self) -> Tuple[bool, bytes]:
        return (self.success, self.return_data)

    @classmethod
    def from_abi(cls, value: Tuple[bool, bytes]) -> "CallResult":
        success, return_data = value
        return cls(success=bool(success), return_data=bytes(return_data))


@dataclass(frozen=True)
class Frame:
    """One entry of the call stack."""

    sender: str
    address: str
    value: int


class World:
    """Accounts, contract storage and transactional execution."""

    def __init__(self) -> None:
        self._balances: Dict[str, int] = {}
        self._storage: Dict[str, Dict[Hashable, Any]] = {}
        self._contracts: Dict[str, "Contract"] = {}
        self._journal: List[Tuple[Any, ...]] = []
        self._frames: List[Frame] = []
        self._origin: Optional[str] = None
        self._deploy_nonce = 0

    # -- accounts -----------------------------------------------------------

    def deploy(self, contract: "Contract", *, deployer: str = ZERO_ADDRESS) -> str:
        """Register ``contract`` and return its freshly derived address."""
        digest = Web3.keccak(encode(["address", "uint256"], [checksum(deployer), self._deploy_nonce]))
        self._deploy_nonce += 1
        address = checksum(Web3.to_hex(digest[12:]))
        self._contracts[address] = contract
        LOGGER.debug("Deployed %s at %s", type(contract).__name__, address)
        return address

    def code_at(self, address: str) -> Optional["Contract"]:
        return self._contracts.get(checksum(address))

    def get_balance(self, address: str) -> int:
        return self._balances.get(checksum(address), 0)

    def fund(self, address: str, amount: int) -> None:
        """Credit native funds out of thin air (genesis allocation)."""
        if amount < 0:
            raise ValueError("amount must be non-negative")
        address = checksum(address)
        self._set_balance(address, self.get_balance(address) + amount)

    def _set_balance(self, address: str, amount: int) -> None:
        self._journal.append(("balance", address, self._balances.get(address, 0)))
        self._balances[address] = amount

    def _move_native(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise Revert("negative value transfer")
        available = self.get_balance(sender)
        if available < amount:
            raise Revert(f"insufficient native balance: {sender} holds {available}, needs {amount}")
        self._set_balance(sender, available - amount)
        self._set_balance(recipient, self.get_balance(recipient) + amount)

    # -- storage ------------------------------------------------------------

    def sload(self, address: str, key: Hashable, default: Any = 0) -> Any:
        return self._storage.get(address, {}).get(key, default)

    def sstore(self, address: str, key: Hashable, value: Any) -> None:
        slots = self._storage.setdefault(address, {})
        self._journal.append(("storage", address, key, slots.get(key, _MISSING)))
        slots[key] = value

    # -- journal ------------------------------------------------------------

    def snapshot(self) -> int:
        return len(self._journal)

    def revert_to(self, snapshot: int) -> None:
        """Undo every journaled mutation recorded after ``snapshot``."""
        while len(self._journal) > snapshot:
            entry = self._journal.pop()
            if entry[0] == "balance":
                _, address, previous = entry
                self._balances[address] = previous
            else:
                _, address, key, previous = entry
                if previous is _MISSING:
                    del self._storage[address][key]
                else:
                    self._storage[address][key] = previous

    # -- call context -------------------------------------------------------

    @property
    def tx_origin(self) -> str:
        if self._origin is None:
            raise RuntimeError("no transaction is executing")
        return self._origin

    @property
    def msg_sender(self) -> str:
        return self._current_frame().sender

    @property
    def msg_value(self) -> int:
        return self._current_frame().value

    @property
    def depth(self) -> int:
        return len(self._frames)

    def _current_frame(self) -> Frame:
        if not self._frames:
            raise RuntimeError("no call frame is executing")
        return self._frames[-1]

    # -- execution ----------------------------------------------------------

    def transact(self, origin: str, to: str, data: bytes = b"", value: int = 0) -> bytes:
        """Run a top-level transaction from ``origin``.

        Either every effect persists, or on :class:`Revert` the state is left
        exactly as it was and the original exception is re-raised.
        """
        if self._frames:
            raise RuntimeError("transact() cannot be nested inside a running transaction")
        self._origin = checksum(origin)
        snapshot = self.snapshot()
        try:
            return self._execute(self._origin, to, data, value)
        except Revert as exc:
            self.revert_to(snapshot)
            LOGGER.info("Transaction from %s to %s reverted: %s", self._origin, checksum(to), exc)
            raise
        except Exception:
            self.revert_to(snapshot)
            raise
        finally:
            self._origin = None
            self._journal.clear()

    def call(self, sender: str, to: str, data: bytes = b"", value: int = 0) -> CallResult:
        """Low-level call: failures unwind the callee and are reported, not raised."""
        try:
            return_data = self._execute(sender, to, data, value)
        except Revert as exc:
            return CallResult(success=False, return_data=exc.data)
        return CallResult(success=True, return_data=return_data)

    def invoke(self, sender: str, to: str, data: bytes = b"", value: int = 0) -> bytes:
        """Call that bubbles the callee's :class:`Revert` to the caller."""
        return self._execute(sender, to, data, value)

    def view(self, to: str, data: bytes, *, sender: str = ZERO_ADDRESS) -> bytes:
        """Execute ``data`` and discard every state change it made."""
        outer = self._origin is None
        if outer:
            self._origin = checksum(sender)
        snapshot = self.snapshot()
        try:
            return self._execute(sender, to, data, 0)
        finally:
            self.revert_to(snapshot)
            if outer:
                self._origin = None

    def _execute(self, sender: str, to: str, data: bytes, value: int) -> bytes:
        sender, to = checksum(sender), checksum(to)
        snapshot = self.snapshot()
        self._frames.append(Frame(sender=sender, address=to, value=value))
        try:
            if value:
                self._move_native(sender, to, value)
            contract = self._contracts.get(to)
            if contract is None:
                return b""
            return contract.dispatch(bytes(data), value)
        except Revert:
            self.revert_to(snapshot)
            raise
        finally:
            self._frames.pop()


__all__ = ["CallResult", "Frame", "Revert", "World"]
