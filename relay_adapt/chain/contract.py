"""ABI-dispatched contract base class."""

from __future__ import annotations

import re
from typing import Any, Dict, Hashable, List, Mapping, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError

from relay_adapt.chain.state import Revert, World
from relay_adapt.contracts import load_contract_abi
from relay_adapt.contracts.codec import function_table, input_types, output_types
from relay_adapt.utils import ZERO_ADDRESS

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _handler_name(function_name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", function_name).lower()


class Contract:
    """A contract living in a :class:`World`.

    Calldata is routed by 4-byte selector to the method named after the ABI
    function in snake case (``wrapAllBase`` -> ``wrap_all_base``). Arguments
    arrive exactly as ``eth_abi`` decodes them; return values are encoded
    against the function's declared outputs.
    """

    ABI_FILES: Sequence[str] = ()
    ABI: Sequence[Mapping[str, Any]] = ()

    def __init__(self, world: World, *, deployer: str = ZERO_ADDRESS) -> None:
        self.world = world
        self.abi = self.load_abi()
        self._functions = function_table(self.abi)
        self._accepts_native = any(entry.get("type") == "receive" for entry in self.abi)
        self.address = world.deploy(self, deployer=deployer)

    @classmethod
    def load_abi(cls) -> List[Dict[str, Any]]:
        entries: List[Dict[str, Any]] = [dict(entry) for entry in cls.ABI]
        for filename in cls.ABI_FILES:
            entries.extend(load_contract_abi(filename))
        return entries

    def dispatch(self, data: bytes, value: int) -> bytes:
        name = type(self).__name__
        if not data:
            if not self._accepts_native:
                raise Revert(f"{name}: cannot receive native funds")
            self.receive()
            return b""

        fn_abi = self._functions.get(data[:4])
        if fn_abi is None:
            raise Revert(f"{name}: unknown function selector 0x{data[:4].hex()}")
        if value and fn_abi.get("stateMutability") != "payable":
            raise Revert(f"{name}: {fn_abi['name']} is not payable")

        try:
            args = decode(input_types(fn_abi), data[4:])
        except DecodingError as exc:
            raise Revert(f"{name}: malformed calldata for {fn_abi['name']}") from exc

        result = getattr(self, _handler_name(fn_abi["name"]))(*args)

        types = output_types(fn_abi)
        if not types:
            return b""
        if len(types) == 1:
            result = (result,)
        return encode(types, list(result))

    def receive(self) -> None:
        """Accept plain native transfers; override to react to them."""

    def _load(self, key: Hashable, default: Any = 0) -> Any:
        return self.world.sload(self.address, key, default)

    def _store(self, key: Hashable, value: Any) -> None:
        self.world.sstore(self.address, key, value)


__all__ = ["Contract"]
