"""Account identities.

An identity is a 20-byte address. Internally every identity is kept as an
EIP-55 checksummed hex string so it can be used directly as a dict key, logged
and serialized to JSON. ``NULL_ADDRESS`` is the null identity: it never owns
anything, never holds a role and marks mint/burn legs in ``Transfer`` events.
"""

from __future__ import annotations

from typing import NewType

from eth_utils import is_address, keccak, to_canonical_address, to_checksum_address

from .errors import InvalidAddress


Address = NewType("Address", str)

NULL_ADDRESS: Address = Address("0x" + "00" * 20)


def to_address(value: str | bytes) -> Address:
    """Normalize a hex string or 20 raw bytes into a checksummed identity.

    Raises:
        InvalidAddress: If the value is not a well-formed 20-byte address.
    """
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 20:
            raise InvalidAddress(
                f"Address must be 20 bytes, got {len(value)}",
                provided=bytes(value).hex(),
            )
        return Address(to_checksum_address(bytes(value)))
    if not isinstance(value, str) or not is_address(value):
        raise InvalidAddress(f"Not a valid address: {value!r}", provided=repr(value))
    return Address(to_checksum_address(value))


def is_null(address: str) -> bool:
    """True if ``address`` is the null identity."""
    return to_address(address) == NULL_ADDRESS


def address_bytes(address: str) -> bytes:
    """Return the 20 raw bytes of an identity."""
    return to_canonical_address(to_address(address))


def account(label: str) -> Address:
    """Derive a stable identity from a human-readable label.

    Used for test accounts and examples: ``account("alice")`` is the low 20
    bytes of ``keccak256("alice")``.
    """
    return Address(to_checksum_address(keccak(text=label)[-20:]))
