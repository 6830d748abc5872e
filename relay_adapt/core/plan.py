"""Relay plans: a transaction batch plus the multicall it is bound to, as JSON."""

from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from web3 import Web3

from relay_adapt.core.adapt_params import bind_relay_transactions, get_relay_adapt_params
from relay_adapt.core.models import BoundParams, Call, Transaction
from relay_adapt.utils import ZERO_ADDRESS, hex_to_bytes, load_json_file, to_int


class PlanError(ValueError):
    """Raised when a relay plan is malformed."""


@dataclass(frozen=True)
class RelayPlan:
    transactions: List[Transaction]
    random: int
    require_success: bool
    calls: List[Call]
    value: int = 0

    @property
    def adapt_params(self) -> bytes:
        return get_relay_adapt_params(self.transactions, self.random, self.require_success, self.calls)

    def bound_to(self, adapt_contract: str) -> "RelayPlan":
        """Return the plan with every transaction bound to ``adapt_contract``."""
        transactions = bind_relay_transactions(
            self.transactions, adapt_contract, self.random, self.require_success, self.calls
        )
        return replace(self, transactions=transactions)


def resolve_address(value: str, aliases: Mapping[str, str]) -> str:
    """Resolve a contract alias, or validate a literal address."""
    if value in aliases:
        return aliases[value]
    try:
        return Web3.to_checksum_address(value)
    except (ValueError, TypeError) as exc:
        raise PlanError(f"Unknown call target {value!r}: neither an alias nor an address") from exc


def _parse_transaction(index: int, data: Mapping[str, Any], aliases: Mapping[str, str]) -> Transaction:
    if "nullifiers" not in data:
        raise PlanError(f"transaction {index} missing required key: nullifiers")
    adapt_params = data.get("adapt_params")
    bound = BoundParams(
        adapt_contract=resolve_address(data.get("adapt_contract", ZERO_ADDRESS), aliases),
        adapt_params=hex_to_bytes(adapt_params) if adapt_params else bytes(32),
    )
    if len(bound.adapt_params) != 32:
        raise PlanError(f"transaction {index} adapt_params must be 32 bytes")
    return Transaction(
        nullifiers=tuple(to_int(n) for n in data["nullifiers"]),
        commitments=tuple(to_int(c) for c in data.get("commitments", [])),
        bound_params=bound,
    )


def _parse_call(index: int, data: Mapping[str, Any], aliases: Mapping[str, str]) -> Call:
    if "to" not in data:
        raise PlanError(f"call {index} missing required key: to")
    try:
        payload = hex_to_bytes(data.get("data", "0x"))
    except ValueError as exc:
        raise PlanError(f"call {index} data is not valid hex") from exc
    return Call(to=resolve_address(data["to"], aliases), data=payload, value=to_int(data.get("value", 0)))


def parse_plan(data: Mapping[str, Any], aliases: Optional[Mapping[str, str]] = None) -> RelayPlan:
    aliases = aliases or {}
    missing = [key for key in ("transactions", "random", "require_success", "calls") if key not in data]
    if missing:
        raise PlanError(f"plan missing required keys: {', '.join(missing)}")
    if not isinstance(data["require_success"], bool):
        raise PlanError("require_success must be a boolean")

    return RelayPlan(
        transactions=[_parse_transaction(i, tx, aliases) for i, tx in enumerate(data["transactions"])],
        random=to_int(data["random"]),
        require_success=data["require_success"],
        calls=[_parse_call(i, call, aliases) for i, call in enumerate(data["calls"])],
        value=to_int(data.get("value", 0)),
    )


def load_plan(path: Path, aliases: Optional[Mapping[str, str]] = None) -> RelayPlan:
    """Load a relay plan JSON file."""
    try:
        data = load_json_file(path)
    except FileNotFoundError as exc:
        raise PlanError(f"Plan file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise PlanError(f"Plan file contains invalid JSON: {path}") from exc
    return parse_plan(data, aliases)


def plan_to_dict(plan: RelayPlan) -> Dict[str, Any]:
    """Render a plan back to its JSON form."""
    return {
        "transactions": [
            {
                "nullifiers": [hex(n) for n in tx.nullifiers],
                "commitments": [hex(c) for c in tx.commitments],
                "adapt_contract": tx.bound_params.adapt_contract,
                "adapt_params": "0x" + tx.adapt_params.hex(),
            }
            for tx in plan.transactions
        ],
        "random": hex(plan.random),
        "require_success": plan.require_success,
        "calls": [{"to": call.to, "data": "0x" + call.data.hex(), "value": call.value} for call in plan.calls],
        "value": plan.value,
    }


__all__ = ["PlanError", "RelayPlan", "load_plan", "parse_plan", "plan_to_dict", "resolve_address"]
