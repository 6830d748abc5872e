"""ABI calldata and revert-data codec built on ``eth_abi``."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError
from web3 import Web3

ABI = Sequence[Mapping[str, Any]]


def _abi_type(param: Mapping[str, Any]) -> str:
    kind = param["type"]
    if kind.startswith("tuple"):
        inner = ",".join(_abi_type(component) for component in param["components"])
        return f"({inner}){kind[len('tuple'):]}"
    return kind


def input_types(fn_abi: Mapping[str, Any]) -> List[str]:
    return [_abi_type(param) for param in fn_abi.get("inputs", [])]


def output_types(fn_abi: Mapping[str, Any]) -> List[str]:
    return [_abi_type(param) for param in fn_abi.get("outputs", [])]


def function_signature(fn_abi: Mapping[str, Any]) -> str:
    """Return the canonical ``name(type,...)`` signature of a function entry."""
    return f"{fn_abi['name']}({','.join(input_types(fn_abi))})"


def _selector(signature: str) -> bytes:
    return bytes(Web3.keccak(text=signature)[:4])


def function_selector(fn_abi: Mapping[str, Any]) -> bytes:
    return _selector(function_signature(fn_abi))


def find_function(abi: ABI, name: str) -> Mapping[str, Any]:
    """Return the single function entry called ``name``."""
    matches = [entry for entry in abi if entry.get("type") == "function" and entry.get("name") == name]
    if not matches:
        raise ValueError(f"ABI has no function named {name!r}")
    if len(matches) > 1:
        raise ValueError(f"ABI function {name!r} is overloaded")
    return matches[0]


def encode_function_call(abi: ABI, name: str, args: Sequence[Any] = ()) -> bytes:
    """Encode calldata (selector plus arguments) for ``name``."""
    fn_abi = find_function(abi, name)
    return function_selector(fn_abi) + encode(input_types(fn_abi), list(args))


def decode_function_result(abi: ABI, name: str, data: bytes) -> Any:
    """Decode return data; single outputs are unwrapped, none yields ``None``."""
    types = output_types(find_function(abi, name))
    if not types:
        return None
    values = decode(types, data)
    return values[0] if len(values) == 1 else values


ERROR_STRING_SELECTOR = _selector("Error(string)")


def encode_revert_reason(message: str) -> bytes:
    """Encode ``message`` the way Solidity encodes ``revert(string)``."""
    return ERROR_STRING_SELECTOR + encode(["string"], [message])


def decode_revert_reason(data: bytes) -> Optional[str]:
    """Return the ``Error(string)`` message in ``data`` or ``None``."""
    if len(data) < 4 or data[:4] != ERROR_STRING_SELECTOR:
        return None
    try:
        (message,) = decode(["string"], data[4:])
    except DecodingError:
        return None
    return message


def encode_custom_error(name: str, types: Sequence[str], values: Sequence[Any]) -> bytes:
    signature = f"{name}({','.join(types)})"
    return _selector(signature) + encode(list(types), list(values))


def decode_custom_error(name: str, types: Sequence[str], data: bytes) -> Optional[Tuple[Any, ...]]:
    """Decode a custom error if ``data`` carries its selector."""
    selector = _selector(f"{name}({','.join(types)})")
    if len(data) < 4 or data[:4] != selector:
        return None
    return tuple(decode(list(types), data[4:]))


def function_table(abi: ABI) -> Dict[bytes, Mapping[str, Any]]:
    """Map every function selector in ``abi`` to its entry."""
    return {function_selector(entry): entry for entry in abi if entry.get("type") == "function"}


__all__ = [
    "ERROR_STRING_SELECTOR",
    "decode_custom_error",
    "decode_function_result",
    "decode_revert_reason",
    "encode_custom_error",
    "encode_function_call",
    "encode_revert_reason",
    "find_function",
    "function_selector",
    "function_signature",
    "function_table",
    "input_types",
    "output_types",
]
