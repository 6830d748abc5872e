"""End-to-end relay tests: batch binding, submission and the bound multicall."""

import pytest
from eth_abi import encode
from web3 import Web3

from relay_adapt.chain import Revert
from relay_adapt.contracts import decode_revert_reason, encode_function_call
from relay_adapt.core import (
    BindingMismatchError,
    Call,
    CallFailure,
    TokenData,
    bind_relay_transactions,
    encode_relay_payload,
    get_adapt_params,
    get_relay_adapt_params,
)

from conftest import Reverter, make_transactions


def test_two_transaction_example_with_no_calls(client, adapter, pool):
    transactions = make_transactions(101, 202)
    fingerprint = get_adapt_params(transactions, encode_relay_payload(7, True, []))
    bound = [tx.bind(adapter.address, fingerprint) for tx in transactions]

    results = client.relay(bound, 7, True, [])

    assert results == []
    assert pool.nullifiers(101) and pool.nullifiers(102)
    assert pool.nullifiers(202) and pool.nullifiers(203)
    assert pool.commitment_count() == 2
    assert [pool.commitment_at(i) for i in range(2)] == [1010, 2020]


def test_tampered_transaction_rejects_whole_batch(client, adapter, pool):
    transactions = bind_relay_transactions(make_transactions(1, 2, 3), adapter.address, 9, True, [])
    tampered = list(transactions)
    tampered[1] = tampered[1].bind(adapter.address, bytes(32))

    with pytest.raises(BindingMismatchError) as excinfo:
        client.relay(tampered, 9, True, [])

    assert excinfo.value.index == 1
    assert excinfo.value.reason == "RelayAdapt: AdaptID Parameters Mismatch"
    assert not pool.nullifiers(1)
    assert pool.commitment_count() == 0


def test_batch_bound_to_other_calls_is_rejected(client, adapter, pool, recipient):
    # detaching a batch from its multicall changes the fingerprint
    transactions = bind_relay_transactions(make_transactions(1), adapter.address, 9, True, [])

    with pytest.raises(BindingMismatchError):
        client.relay(transactions, 9, True, [Call(to=recipient)])
    with pytest.raises(BindingMismatchError):
        client.relay(transactions, 10, True, [])
    with pytest.raises(BindingMismatchError):
        client.relay(transactions, 9, False, [])
    assert pool.commitment_count() == 0


def test_replayed_nullifier_is_rejected_by_pool(client, adapter, pool):
    first = bind_relay_transactions(make_transactions(5), adapter.address, 1, True, [])
    client.relay(first, 1, True, [])

    # a fresh nonce does not make a spent nullifier usable again
    replay = bind_relay_transactions(make_transactions(5), adapter.address, 2, True, [])
    with pytest.raises(Revert, match="Nullifier already seen"):
        client.relay(replay, 2, True, [])
    assert pool.commitment_count() == 1


def test_batch_bound_to_another_adapter_is_rejected_by_pool(client, pool, recipient):
    transactions = bind_relay_transactions(make_transactions(8), recipient, 3, True, [])
    with pytest.raises(Revert, match="AdaptID mismatch"):
        client.relay(transactions, 3, True, [])


def test_strict_call_failure_unwinds_submission(client, adapter, pool, reverter):
    calls = [Call(to=reverter.address, data=encode_function_call(Reverter.ABI, "fail"))]
    transactions = bind_relay_transactions(make_transactions(4), adapter.address, 1, True, calls)

    with pytest.raises(CallFailure):
        client.relay(transactions, 1, True, calls)

    assert not pool.nullifiers(4)
    assert pool.commitment_count() == 0


def test_lenient_call_failure_keeps_submission(client, adapter, pool, reverter):
    calls = [Call(to=reverter.address, data=encode_function_call(Reverter.ABI, "fail"))]
    transactions = bind_relay_transactions(make_transactions(4), adapter.address, 1, False, calls)

    results = client.relay(transactions, 1, False, calls)

    assert not results[0].success
    assert decode_revert_reason(results[0].return_data) == "Reverter: always fails"
    assert pool.nullifiers(4)


def test_wrap_then_deposit_moves_full_amount_into_pool(world, client, adapter, pool, wrapped_base, treasury, origin):
    wrapped = TokenData.erc20(wrapped_base.address)
    calls = [
        client.populate("wrapAllBase"),
        client.populate("deposit", [wrapped.to_abi()], [(11, 22)], 777),
    ]
    transactions = bind_relay_transactions(make_transactions(60), adapter.address, 5, True, calls)
    before = world.get_balance(origin)

    results = client.relay(transactions, 5, True, calls, value=1_000)

    assert [result.success for result in results] == [True, True]
    assert world.get_balance(origin) == before - 1_000
    assert world.get_balance(adapter.address) == 0
    assert world.get_balance(wrapped_base.address) == 1_000
    assert wrapped_base.balance_of(adapter.address) == 0
    assert wrapped_base.balance_of(pool.address) == 998
    assert wrapped_base.balance_of(treasury) == 2

    # one commitment from the batch, one from the deposit
    assert pool.commitment_count() == 2
    note = encode(["uint256", "(uint8,address,uint256)", "uint120"], [777, (0, wrapped_base.address, 0), 998])
    assert pool.commitment_at(1) == int.from_bytes(Web3.keccak(note), "big")


def test_unshield_then_send_to_recipient(world, client, adapter, token, recipient):
    # pool payouts to the adapter are modeled by minting to it before the relay
    token.mint(adapter.address, 300)
    calls = [client.populate("send", [TokenData.erc20(token.address).to_abi()], recipient)]
    transactions = bind_relay_transactions(make_transactions(70), adapter.address, 6, True, calls)

    client.relay(transactions, 6, True, calls)

    assert token.balance_of(recipient) == 300
    assert token.balance_of(adapter.address) == 0


def test_transact_submits_with_custom_payload(client, adapter, pool):
    transactions = make_transactions(31, 32)
    fingerprint = get_adapt_params(transactions, b"custom")
    bound = [tx.bind(adapter.address, fingerprint) for tx in transactions]

    client.transact(bound, b"custom")

    assert pool.nullifiers(31) and pool.nullifiers(32)
    with pytest.raises(BindingMismatchError):
        client.transact(make_transactions(40), b"custom")


def test_relay_fingerprint_view_matches_binding(client, adapter):
    transactions = make_transactions(1, 2)
    calls = [client.populate("wrapAllBase")]
    assert client.get_relay_adapt_params(transactions, 3, True, calls) == get_relay_adapt_params(
        transactions, 3, True, calls
    )
