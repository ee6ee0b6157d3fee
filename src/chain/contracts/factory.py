"""Deployment Factory - creates fungible ledgers at precomputed addresses

Callers can learn the exact address a ledger will occupy (``compute_address``)
before committing funds or approvals to it. ``deploy_token`` then creates it
through the host's CREATE2 at that address and hands ownership to the
requester. The factory keeps no record of what it deployed; the
``TokenDeployed`` event is the only trace.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...config import get_validated_config
from ...config_schema import FactoryConfig
from ..access import AccessGate
from ..address import as_salt, derive_address, init_code_hash
from ..arithmetic import require_uint
from ..errors import DeploymentFailed
from ..identity import Address, to_address
from .base import Contract
from .fungible import FungibleLedger, validate_decimals

if TYPE_CHECKING:
    from ..environment import Chain

logger = logging.getLogger(__name__)


class DeploymentFactory(Contract):
    """
    Factory for FungibleLedger instances.

    Every ledger it creates is constructed with the factory itself as
    initial owner (so it can hand ownership over) and with the factory's
    ledger configuration baked into its creation code.
    """

    CONSTRUCTOR_TYPES = ("address",)

    config: FactoryConfig
    access: AccessGate

    @classmethod
    def default_config(cls) -> FactoryConfig:
        return get_validated_config().factory

    def __init__(
        self,
        chain: "Chain",
        address: str,
        deployer: str,
        initial_owner: str,
        config: FactoryConfig | None = None,
    ) -> None:
        super().__init__(chain, address, deployer)
        self.config = config or self.default_config()
        self.access = AccessGate(initial_owner, emitter=self)

        self.register_methods(["owner", "compute_address", "compute_init_code_hash"], mutates=False)
        self.register_methods(["deploy_token", "transfer_ownership", "renounce_ownership"])

    def owner(self) -> Address:
        """Factory owner (allowed to deploy when restricted)."""
        return self.access.owner

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand the factory to new_owner."""
        self.access.transfer_ownership(caller, new_owner)

    def renounce_ownership(self, caller: str) -> None:
        """Leave the factory without an owner."""
        self.access.renounce_ownership(caller)

    def _init_code(self, name: str, symbol: str, decimals: int, initial_supply: int) -> bytes:
        validate_decimals(decimals)
        require_uint(initial_supply, "initial_supply")
        return FungibleLedger.creation_code(self.config.ledger) + FungibleLedger.encode_constructor_args(
            name, symbol, decimals, initial_supply, self.address
        )

    def compute_init_code_hash(
        self, name: str, symbol: str, decimals: int, initial_supply: int
    ) -> bytes:
        """keccak256 of the ledger creation code plus encoded constructor args."""
        return init_code_hash(self._init_code(name, symbol, decimals, initial_supply))

    def compute_address(
        self,
        salt: int | str | bytes,
        name: str,
        symbol: str,
        decimals: int,
        initial_supply: int,
    ) -> Address:
        """Address deploy_token will use for these arguments."""
        return derive_address(
            self.address,
            salt,
            self.compute_init_code_hash(name, symbol, decimals, initial_supply),
        )

    def deploy_token(
        self,
        caller: str,
        salt: int | str | bytes,
        name: str,
        symbol: str,
        decimals: int,
        initial_supply: int,
    ) -> Address:
        """Create a ledger at the salt-derived address and give it to the caller."""
        requester = to_address(caller)
        if self.config.restricted:
            self.access.only_owner(requester)
        salt_bytes = as_salt(salt)
        init_code = self._init_code(name, symbol, decimals, initial_supply)
        ledger_config = self.config.ledger

        def build(chain: "Chain", address: Address) -> FungibleLedger:
            return FungibleLedger(
                chain,
                address,
                self.address,
                name,
                symbol,
                decimals,
                initial_supply,
                self.address,
                config=ledger_config,
            )

        token_address = self.chain.create2(self.address, salt_bytes, init_code, build)
        if token_address is None:
            raise DeploymentFailed(
                f"Creation with salt 0x{salt_bytes.hex()} returned no address",
                salt="0x" + salt_bytes.hex(),
            )

        token = self.chain.get_contract(token_address)
        assert isinstance(token, FungibleLedger)
        if self.config.forward_initial_supply:
            minted = token.balance_of(self.address)
            if minted:
                token.transfer(self.address, requester, minted)
        token.transfer_ownership(self.address, requester)

        self.emit("TokenDeployed", token=token_address, owner=requester, salt=salt_bytes)
        logger.info(
            "Deployed %s (%s) at %s for %s",
            name, symbol, token_address, requester,
        )
        return token_address
