"""Shared fixtures: a fresh world with the adapter and its collaborators deployed."""

import pytest

from relay_adapt.chain import Contract, ERC20Token, Revert, ShieldedPool, World, WrappedBaseToken
from relay_adapt.core import RelayAdapt, RelayAdaptClient, Transaction
from relay_adapt.utils import checksum

ORIGIN = checksum("0x00000000000000000000000000000000000a11ce")
RECIPIENT = checksum("0x0000000000000000000000000000000000000b0b")
TREASURY = checksum("0x000000000000000000000000000000000000fee5")

ORIGIN_FUNDING = 10**21


class Reverter(Contract):
    """Call target whose ``fail`` always reverts and ``ping`` counts calls."""

    ABI = [
        {"type": "function", "name": "fail", "inputs": [], "outputs": [], "stateMutability": "nonpayable"},
        {"type": "function", "name": "ping", "inputs": [], "outputs": [], "stateMutability": "nonpayable"},
    ]

    def fail(self) -> None:
        raise Revert("Reverter: always fails")

    def ping(self) -> None:
        self._store("pings", self.pings + 1)

    @property
    def pings(self) -> int:
        return self._load("pings")


class ReentrantCaller(Contract):
    """Call target that calls back into ``target``.

    ``attack`` reports a failure as its own revert data; ``forward`` lets the
    callee's exception propagate unchanged.
    """

    ABI = [
        {
            "type": "function",
            "name": name,
            "inputs": [{"name": "target", "type": "address"}, {"name": "data", "type": "bytes"}],
            "outputs": [],
            "stateMutability": "nonpayable",
        }
        for name in ("attack", "forward")
    ]

    def attack(self, target: str, data: bytes) -> None:
        result = self.world.call(self.address, target, data)
        if not result.success:
            raise Revert(data=result.return_data)

    def forward(self, target: str, data: bytes) -> None:
        self.world.invoke(self.address, target, data)


def make_transactions(*first_nullifiers):
    """One unbound transaction per first nullifier, each with a commitment."""
    return [
        Transaction(nullifiers=(nullifier, nullifier + 1), commitments=(nullifier * 10,))
        for nullifier in first_nullifiers
    ]


@pytest.fixture
def world():
    return World()


@pytest.fixture
def origin(world):
    world.fund(ORIGIN, ORIGIN_FUNDING)
    return ORIGIN


@pytest.fixture
def recipient():
    return RECIPIENT


@pytest.fixture
def treasury():
    return TREASURY


@pytest.fixture
def pool(world, treasury):
    return ShieldedPool(world, treasury=treasury, deposit_fee_bp=25)


@pytest.fixture
def wrapped_base(world):
    return WrappedBaseToken(world)


@pytest.fixture
def token(world):
    return ERC20Token(world, "TST")


@pytest.fixture
def adapter(world, pool, wrapped_base):
    return RelayAdapt(world, pool=pool.address, wrapped_base=wrapped_base.address)


@pytest.fixture
def client(world, adapter, origin):
    return RelayAdaptClient(world, adapter.address, origin)


@pytest.fixture
def reverter(world):
    return Reverter(world)


@pytest.fixture
def reentrant_caller(world):
    return ReentrantCaller(world)
