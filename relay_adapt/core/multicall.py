"""Ordered multicall execution with strict or lenient failure handling."""

from __future__ import annotations

from typing import List, Sequence

from relay_adapt.chain.state import CallResult, World
from relay_adapt.contracts import decode_revert_reason
from relay_adapt.core.errors import CallFailure
from relay_adapt.core.models import Call
from relay_adapt.utils import get_logger

LOGGER = get_logger("relay_adapt.multicall")


def run_multicall(
    world: World,
    executor: str,
    require_success: bool,
    calls: Sequence[Call],
) -> List[CallResult]:
    """Run ``calls`` in order from ``executor`` and collect their results.

    A failed call's own effects are always unwound. With ``require_success``
    the first failure raises :class:`CallFailure`, which discards the whole
    enclosing unit; otherwise it is recorded and the next call runs.
    """
    results: List[CallResult] = []
    for index, call in enumerate(calls):
        result = world.call(executor, call.to, call.data, call.value)
        if not result.success:
            reason = decode_revert_reason(result.return_data) or f"0x{result.return_data.hex()}"
            if require_success:
                LOGGER.warning("Call %s to %s failed, aborting: %s", index, call.to, reason)
                raise CallFailure(index, result.return_data)
            LOGGER.info("Call %s to %s failed, continuing: %s", index, call.to, reason)
        else:
            LOGGER.info("Call %s to %s succeeded (value=%s)", index, call.to, call.value)
        results.append(result)
    return results


__all__ = ["run_multicall"]
