"""Origin-or-self gate for privileged adapter entry points."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar

from relay_adapt.chain.state import World
from relay_adapt.core.errors import AuthorizationError
from relay_adapt.utils import get_logger

LOGGER = get_logger("relay_adapt.guard")

F = TypeVar("F", bound=Callable[..., Any])


def ensure_self_or_origin(world: World, contract_address: str) -> None:
    """Allow only the transaction origin or the contract calling itself."""
    caller = world.msg_sender
    if caller == world.tx_origin or caller == contract_address:
        return
    LOGGER.warning("Rejected call into %s from %s (origin %s)", contract_address, caller, world.tx_origin)
    raise AuthorizationError(caller)


def only_self_or_origin(method: F) -> F:
    """Guard a contract method with :func:`ensure_self_or_origin`."""

    @functools.wraps(method)
    def wrapper(self, *args: Any, **kwargs: Any) -> Any:
        ensure_self_or_origin(self.world, self.address)
        return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


__all__ = ["ensure_self_or_origin", "only_self_or_origin"]
