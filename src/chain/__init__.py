"""Contract host and shared substrates.

Usage:
    from src.chain import Chain, account
    from src.chain.contracts import FungibleLedger

    chain = Chain()
    owner = account("owner")
    token = chain.deploy(owner, FungibleLedger, "Forge", "FRG", 18, 1000, owner)
    chain.call(owner, token.address, "transfer", account("alice"), 10)
"""

from __future__ import annotations

from .access import AccessGate, SingleStepOwnership, TwoStepOwnership, ownership_policy
from .address import as_salt, derive_address, encode_constructor_args, init_code_hash
from .environment import Chain
from .errors import ContractError, ErrorCategory, ErrorCode, error_response
from .events import Event
from .identity import NULL_ADDRESS, Address, account, to_address
from .logger import EventLogger
from .pause import PauseSwitch

__all__ = [
    "AccessGate",
    "Address",
    "Chain",
    "ContractError",
    "ErrorCategory",
    "ErrorCode",
    "Event",
    "EventLogger",
    "NULL_ADDRESS",
    "PauseSwitch",
    "SingleStepOwnership",
    "TwoStepOwnership",
    "account",
    "as_salt",
    "derive_address",
    "encode_constructor_args",
    "error_response",
    "init_code_hash",
    "ownership_policy",
    "to_address",
]
