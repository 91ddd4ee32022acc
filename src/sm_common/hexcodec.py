"""Hex string <-> bytes for hashes and chunk payloads crossing the API.

Accepts an optional "0x" prefix; responses always emit bare lowercase hex.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator

HASH_SIZE = 32


def parse_hex(value: Any) -> bytes:
    if isinstance(value, bytes):
        return value
    if not isinstance(value, str):
        raise ValueError("expected a hex string")
    raw = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(raw)
    except ValueError:
        raise ValueError("not a valid hex string") from None


def parse_hash(value: Any) -> bytes:
    data = parse_hex(value)
    if len(data) != HASH_SIZE:
        raise ValueError(f"hash must be {HASH_SIZE} bytes, got {len(data)}")
    return data


HexBytes = Annotated[bytes, BeforeValidator(parse_hex)]
HexHash = Annotated[bytes, BeforeValidator(parse_hash)]
