"""Tests for the journaled world and ABI dispatch."""

import pytest

from relay_adapt.chain import CallResult, Contract, Revert, World
from relay_adapt.chain.pool import get_fee
from relay_adapt.contracts import decode_revert_reason, encode_function_call
from relay_adapt.core.tokens import ERC20_ABI
from relay_adapt.utils import checksum

from conftest import Reverter


class Nester(Contract):
    ABI = [{"type": "function", "name": "nest", "inputs": [], "outputs": [], "stateMutability": "nonpayable"}]

    def nest(self) -> None:
        self.world.transact(self.address, self.address, b"")


class TestJournal:
    def test_revert_to_restores_balances_and_storage(self, world, recipient):
        world.fund(recipient, 10)
        snapshot = world.snapshot()
        world.fund(recipient, 5)
        world.sstore(recipient, "slot", 1)

        world.revert_to(snapshot)

        assert world.get_balance(recipient) == 10
        assert world.sload(recipient, "slot", None) is None

    def test_nested_snapshots_unwind_independently(self, world, recipient):
        world.sstore(recipient, "slot", "a")
        outer = world.snapshot()
        world.sstore(recipient, "slot", "b")
        inner = world.snapshot()
        world.sstore(recipient, "slot", "c")

        world.revert_to(inner)
        assert world.sload(recipient, "slot") == "b"
        world.revert_to(outer)
        assert world.sload(recipient, "slot") == "a"

    def test_fund_rejects_negative_amounts(self, world, recipient):
        with pytest.raises(ValueError):
            world.fund(recipient, -1)


class TestTransact:
    def test_reverted_transaction_leaves_no_trace(self, world, origin, token, recipient):
        token.mint(origin, 10)
        transfer = encode_function_call(ERC20_ABI, "transfer", [recipient, 11])

        with pytest.raises(Revert, match="transfer amount exceeds balance"):
            world.transact(origin, token.address, transfer, 0)

        assert token.balance_of(origin) == 10
        assert token.balance_of(recipient) == 0

    def test_value_moves_with_transaction(self, world, origin, recipient):
        before = world.get_balance(origin)
        world.transact(origin, recipient, b"", 9)
        assert world.get_balance(recipient) == 9
        assert world.get_balance(origin) == before - 9

    def test_insufficient_native_balance_reverts(self, world, recipient, origin):
        with pytest.raises(Revert, match="insufficient native balance"):
            world.transact(recipient, origin, b"", 1)

    def test_nested_transact_is_a_programming_error(self, world, origin):
        nester = Nester(world)
        with pytest.raises(RuntimeError, match="cannot be nested"):
            world.transact(origin, nester.address, encode_function_call(Nester.ABI, "nest"))
        assert world.depth == 0

    def test_origin_is_only_defined_during_a_transaction(self, world):
        with pytest.raises(RuntimeError):
            world.tx_origin  # noqa: B018


class TestCalls:
    def test_call_reports_failure_with_revert_data(self, world, origin, reverter):
        result = world.call(origin, reverter.address, encode_function_call(Reverter.ABI, "fail"))
        assert result == CallResult(False, result.return_data)
        assert decode_revert_reason(result.return_data) == "Reverter: always fails"

    def test_invoke_bubbles_the_revert(self, world, origin, reverter):
        with pytest.raises(Revert) as excinfo:
            world.invoke(origin, reverter.address, encode_function_call(Reverter.ABI, "fail"))
        assert excinfo.value.reason == "Reverter: always fails"

    def test_view_discards_state_changes(self, world, reverter):
        world.view(reverter.address, encode_function_call(Reverter.ABI, "ping"))
        assert reverter.pings == 0

    def test_call_to_account_without_code_succeeds(self, world, origin, recipient):
        assert world.call(origin, recipient, b"\x01\x02") == CallResult(True, b"")


class TestDispatch:
    def test_unknown_selector_reverts(self, world, origin, reverter):
        result = world.call(origin, reverter.address, b"\xde\xad\xbe\xef")
        assert not result.success
        assert "unknown function selector 0xdeadbeef" in decode_revert_reason(result.return_data)

    def test_value_to_non_payable_function_reverts(self, world, origin, reverter):
        result = world.call(origin, reverter.address, encode_function_call(Reverter.ABI, "ping"), 1)
        assert decode_revert_reason(result.return_data) == "Reverter: ping is not payable"

    def test_contract_without_receive_rejects_native(self, world, origin, reverter):
        result = world.call(origin, reverter.address, b"", 1)
        assert decode_revert_reason(result.return_data) == "Reverter: cannot receive native funds"
        assert world.get_balance(reverter.address) == 0

    def test_malformed_calldata_reverts(self, world, origin, token):
        selector = encode_function_call(ERC20_ABI, "transfer", [origin, 1])[:4]
        result = world.call(origin, token.address, selector + b"\x01")
        assert decode_revert_reason(result.return_data) == "ERC20Token: malformed calldata for transfer"

    def test_deploy_derives_distinct_checksummed_addresses(self):
        world = World()
        first, second = Reverter(world), Reverter(world)
        assert first.address != second.address
        assert first.address == checksum(first.address)
        assert world.code_at(first.address.lower()) is first


class TestTokens:
    def test_unlimited_allowance_is_not_decremented(self, world, origin, token, recipient):
        token.mint(origin, 10)
        world.transact(origin, token.address, encode_function_call(ERC20_ABI, "approve", [recipient, 2**256 - 1]))
        world.transact(recipient, token.address, encode_function_call(ERC20_ABI, "transferFrom", [origin, recipient, 4]))
        assert token.balance_of(recipient) == 4
        assert token.allowance(origin, recipient) == 2**256 - 1

    @pytest.mark.parametrize(
        "amount, inclusive, fee_bp, expected",
        [
            (1_000, True, 25, (998, 2)),
            (10_000, True, 25, (9_975, 25)),
            (10_000, False, 25, (10_000, 25)),
            (1_000, True, 0, (1_000, 0)),
        ],
    )
    def test_get_fee(self, amount, inclusive, fee_bp, expected):
        assert get_fee(amount, inclusive, fee_bp) == expected
