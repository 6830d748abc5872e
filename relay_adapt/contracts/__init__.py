"""Contract ABIs shipped with the relay adapter."""

from importlib import resources
from typing import Any, Dict, List
import json

from .codec import (
    decode_custom_error,
    decode_function_result,
    decode_revert_reason,
    encode_custom_error,
    encode_function_call,
    encode_revert_reason,
    find_function,
    function_selector,
    function_signature,
)


def load_contract_abi(filename: str) -> List[Dict[str, Any]]:
    """Load an ABI JSON file from the contracts package."""
    with resources.files(__package__).joinpath(filename).open("r", encoding="utf-8") as fh:
        return json.load(fh)


__all__ = [
    "decode_custom_error",
    "decode_function_result",
    "decode_revert_reason",
    "encode_custom_error",
    "encode_function_call",
    "encode_revert_reason",
    "find_function",
    "function_selector",
    "function_signature",
    "load_contract_abi",
]
