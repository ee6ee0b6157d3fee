"""Deterministic contract address derivation (CREATE2 rule, EIP-1014).

    address = keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]

init_code is the creation bytes followed by the ABI-encoded constructor
arguments, hashed exactly as the host concatenates them before deployment.
These are pure functions: no state is read and no randomness is involved, so
``Chain.create2`` and ``DeploymentFactory.compute_address`` always agree.
"""

from __future__ import annotations

from typing import Any, Sequence

from eth_abi import encode
from eth_utils import keccak, to_checksum_address

from .errors import InvalidSalt
from .identity import Address, address_bytes

CREATE2_PREFIX: bytes = b"\xff"


def as_salt(value: int | str | bytes) -> bytes:
    """Normalize a salt into exactly 32 bytes.

    Accepts a non-negative int (big-endian, left padded), a 0x-prefixed hex
    string of at most 32 bytes (left padded) or 32 raw bytes.

    Raises:
        InvalidSalt: If the value cannot be represented as a bytes32.
    """
    if isinstance(value, bool):
        raise InvalidSalt("Salt must not be a bool", provided=value)
    if isinstance(value, int):
        if value < 0 or value >= 2**256:
            raise InvalidSalt(f"Salt out of bytes32 range: {value}", provided=value)
        return value.to_bytes(32, "big")
    if isinstance(value, str):
        text = value[2:] if value.startswith(("0x", "0X")) else value
        try:
            raw = bytes.fromhex(text)
        except ValueError:
            raise InvalidSalt(f"Salt is not hex: {value!r}", provided=value)
        if len(raw) > 32:
            raise InvalidSalt(f"Salt longer than 32 bytes: {len(raw)}", provided=value)
        return raw.rjust(32, b"\x00")
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 32:
            raise InvalidSalt(f"Salt must be 32 bytes, got {len(value)}", provided=bytes(value).hex())
        return bytes(value)
    raise InvalidSalt(f"Unsupported salt type: {type(value).__name__}")


def encode_constructor_args(types: Sequence[str], values: Sequence[Any]) -> bytes:
    """ABI-encode constructor arguments as the host appends them to init code."""
    return encode(list(types), list(values))


def init_code_hash(creation_bytes: bytes, encoded_args: bytes = b"") -> bytes:
    """keccak256(creation_bytes ++ encoded_args)."""
    return keccak(creation_bytes + encoded_args)


def derive_address(
    deployer: str,
    salt: int | str | bytes,
    code_hash: bytes,
) -> Address:
    """Compute the address a CREATE2 deployment will occupy.

    Args:
        deployer: Identity performing the creation
        salt: 32-byte salt (see ``as_salt`` for accepted forms)
        code_hash: keccak256 of the full init code

    Returns:
        Checksummed address of the future contract
    """
    if len(code_hash) != 32:
        raise ValueError(f"init code hash must be 32 bytes, got {len(code_hash)}")
    digest = keccak(CREATE2_PREFIX + address_bytes(deployer) + as_salt(salt) + code_hash)
    return Address(to_checksum_address(digest[12:]))
