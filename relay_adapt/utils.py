"""Utility helpers shared across the chain and core packages."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from web3 import Web3

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


def get_logger(name: str = "relay_adapt") -> logging.Logger:
    """Return a configured logger that prints to stderr."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


def load_json_file(path: Path) -> Dict[str, Any]:
    """Load JSON data from ``path``."""
    with path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def ensure_web3_connected(web3: Web3, *, expected_chain_id: Optional[int] = None) -> None:
    """Validate that ``web3`` is connected and optionally matches the expected chain id."""
    if not web3.is_connected():
        raise ConnectionError("Failed to connect to the configured RPC endpoint")
    if expected_chain_id is not None and web3.eth.chain_id != expected_chain_id:
        raise ValueError(f"RPC chain ID mismatch: expected {expected_chain_id}, got {web3.eth.chain_id}")


def hex_to_bytes(data: str) -> bytes:
    """Convert a hex string (with or without ``0x``) to bytes."""
    data = data[2:] if data.startswith("0x") else data
    return bytes.fromhex(data)


def to_int(value: Union[int, str]) -> int:
    """Parse an int given either natively, as decimal text or as ``0x`` hex."""
    if isinstance(value, bool):
        raise TypeError("boolean is not an integer value")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text, 16) if text.lower().startswith("0x") else int(text)


def checksum(address: str) -> str:
    """Return the EIP-55 form of ``address``."""
    return Web3.to_checksum_address(address)


def is_zero_address(address: str) -> bool:
    return int(address, 16) == 0


__all__ = [
    "ZERO_ADDRESS",
    "checksum",
    "ensure_web3_connected",
    "get_logger",
    "hex_to_bytes",
    "is_zero_address",
    "load_json_file",
    "to_int",
]
