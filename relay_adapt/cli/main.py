"""CLI entrypoint for computing, simulating and verifying relay plans."""

from __future__ import annotations

import argparse
import functools
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Mapping, Optional

from dotenv import load_dotenv
from eth_account import Account
from web3 import Web3
from web3.contract import Contract as Web3Contract

from relay_adapt.chain import ShieldedPool, World, WrappedBaseToken
from relay_adapt.chain.state import CallResult
from relay_adapt.config import RelayAdaptConfig, load_config
from relay_adapt.contracts import decode_revert_reason, load_contract_abi
from relay_adapt.core.adapter import RelayAdapt
from relay_adapt.core.client import RelayAdaptClient
from relay_adapt.core.plan import RelayPlan, load_plan
from relay_adapt.utils import ensure_web3_connected, get_logger

LOGGER = get_logger("relay_adapt.cli")

load_dotenv()

# Used for read-only work when no PRIVATE_KEY is configured.
FALLBACK_ORIGIN = "0x000000000000000000000000000000000000dEaD"
DEFAULT_DEPOSIT_FEE_BP = 25
DEFAULT_SIMULATION_FUNDING = 10**20


@dataclass(frozen=True)
class LocalDeployment:
    """Adapter and collaborators deployed into a fresh in-memory world."""

    world: World
    pool: ShieldedPool
    wrapped_base: WrappedBaseToken
    adapter: RelayAdapt
    client: RelayAdaptClient

    def aliases(self) -> Mapping[str, str]:
        return {
            "relay_adapt": self.adapter.address,
            "pool": self.pool.address,
            "wrapped_base": self.wrapped_base.address,
        }


@dataclass(frozen=True)
class SimulationReport:
    adapt_params: bytes
    results: List[CallResult]


def deploy_local(
    origin: str,
    *,
    config: Optional[RelayAdaptConfig] = None,
    funding: Optional[int] = None,
) -> LocalDeployment:
    """Deploy pool, wrapped asset and adapter, and fund ``origin``."""
    world = World()
    fee_bp = config.pool.deposit_fee_bp if config else DEFAULT_DEPOSIT_FEE_BP
    treasury = config.pool.treasury if config else origin
    if funding is None:
        funding = config.defaults.simulation_funding if config else DEFAULT_SIMULATION_FUNDING

    pool = ShieldedPool(world, treasury=treasury, deposit_fee_bp=fee_bp)
    wrapped_base = WrappedBaseToken(world)
    adapter = RelayAdapt(world, pool=pool.address, wrapped_base=wrapped_base.address)
    world.fund(origin, funding)
    LOGGER.info("Deployed local adapter %s (pool %s, wrapped base %s)", adapter.address, pool.address, wrapped_base.address)
    return LocalDeployment(
        world=world,
        pool=pool,
        wrapped_base=wrapped_base,
        adapter=adapter,
        client=RelayAdaptClient(world, adapter.address, origin),
    )


def simulate_plan(plan: RelayPlan, deployment: LocalDeployment) -> SimulationReport:
    """Bind ``plan`` to the local adapter and relay it."""
    bound = plan.bound_to(deployment.adapter.address)
    results = deployment.client.relay(
        bound.transactions,
        bound.random,
        bound.require_success,
        bound.calls,
        value=bound.value,
    )
    return SimulationReport(adapt_params=bound.adapt_params, results=results)


def _http_web3(url: str, *, timeout: int) -> Web3:
    return Web3(Web3.HTTPProvider(url, request_kwargs={"timeout": timeout}))


class AdapterVerifier:
    """Compares locally computed adapt params with a deployed adapter."""

    def __init__(
        self,
        *,
        rpc_url: Optional[str],
        config: RelayAdaptConfig,
        web3_factory: Optional[Callable[[str], Web3]] = None,
    ) -> None:
        self.config = config
        resolved_rpc = rpc_url or config.chain.ensure_rpc_url()
        if web3_factory is None:
            web3_factory = functools.partial(_http_web3, timeout=config.defaults.rpc_timeout)
        self.web3 = web3_factory(resolved_rpc)
        ensure_web3_connected(self.web3, expected_chain_id=config.chain.chain_id)
        LOGGER.info("Connected to chain %s", config.chain.chain_id)

        self.contract: Web3Contract = self.web3.eth.contract(
            address=config.contracts.relay_adapt_address,
            abi=load_contract_abi("relay_adapt_abi.json"),
        )

    def onchain_adapt_params(self, plan: RelayPlan) -> bytes:
        return bytes(
            self.contract.functions.getRelayAdaptParams(
                [transaction.to_abi() for transaction in plan.transactions],
                plan.random,
                plan.require_success,
                [call.to_abi() for call in plan.calls],
            ).call()
        )

    def verify(self, plan: RelayPlan) -> bool:
        local = plan.adapt_params
        onchain = self.onchain_adapt_params(plan)
        if local != onchain:
            LOGGER.error("Adapt params mismatch: local 0x%s, deployed 0x%s", local.hex(), onchain.hex())
            return False
        LOGGER.info("Adapt params match deployed adapter: 0x%s", local.hex())
        return True


def resolve_origin() -> str:
    """Return the origin address derived from ``PRIVATE_KEY``, or the fallback."""
    private_key = (os.getenv("PRIVATE_KEY") or "").strip()
    if private_key:
        return Account.from_key(private_key).address
    LOGGER.warning("PRIVATE_KEY not set, using fallback origin %s", FALLBACK_ORIGIN)
    return FALLBACK_ORIGIN


def _format_result(index: int, result: CallResult) -> str:
    status = "ok" if result.success else "failed"
    reason = decode_revert_reason(result.return_data)
    detail = reason if reason is not None else "0x" + result.return_data.hex()
    return f"  call {index}: {status} {detail}"


def _cmd_params(args: argparse.Namespace) -> None:
    config = load_config(args.config) if args.config else None
    plan = load_plan(args.plan, config.contracts.aliases() if config else None)
    print("0x" + plan.adapt_params.hex())


def _cmd_simulate(args: argparse.Namespace) -> None:
    config = load_config(args.config) if args.config else None
    origin = resolve_origin()
    deployment = deploy_local(origin, config=config)
    plan = load_plan(args.plan, deployment.aliases())
    shortfall = plan.value - deployment.world.get_balance(origin)
    if shortfall > 0:
        deployment.world.fund(origin, shortfall)
    report = simulate_plan(plan, deployment)
    print(f"adapt params: 0x{report.adapt_params.hex()}")
    print(f"{len(report.results)} call result(s):")
    for index, result in enumerate(report.results):
        print(_format_result(index, result))


def _cmd_verify(args: argparse.Namespace) -> None:
    config = load_config(args.config)
    plan = load_plan(args.plan, config.contracts.aliases())
    rpc_url = (os.getenv("RPC_URL") or "").strip() or None
    verifier = AdapterVerifier(rpc_url=rpc_url, config=config)
    if not verifier.verify(plan):
        raise ValueError("locally computed adapt params differ from the deployed adapter")
    print("0x" + plan.adapt_params.hex())


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Bind shielded transaction batches to relay multicalls")
    subparsers = parser.add_subparsers(dest="command", required=True)

    params = subparsers.add_parser("params", help="Print the adapt params of a relay plan")
    params.add_argument("plan", type=Path, help="Relay plan JSON file")
    params.add_argument("--config", type=Path, help="Config JSON used to resolve contract aliases")
    params.set_defaults(handler=_cmd_params)

    simulate = subparsers.add_parser("simulate", help="Relay a plan against a local in-memory deployment")
    simulate.add_argument("plan", type=Path, help="Relay plan JSON file")
    simulate.add_argument("--config", type=Path, help="Config JSON with pool fee, treasury and funding")
    simulate.set_defaults(handler=_cmd_simulate)

    verify = subparsers.add_parser("verify", help="Compare adapt params with the deployed adapter")
    verify.add_argument("plan", type=Path, help="Relay plan JSON file")
    verify.add_argument("--config", type=Path, default=Path("config.json"), help="Config JSON file")
    verify.set_defaults(handler=_cmd_verify)

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    try:
        args.handler(args)
    except Exception as exc:
        print(f"\n❌ Error: {exc}")
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover - CLI entry
    main()
