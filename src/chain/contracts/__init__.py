"""Deployable contracts."""

from __future__ import annotations

from .base import Contract, ContractMethod, GovernedContract, MethodInfo
from .factory import DeploymentFactory
from .fungible import FungibleLedger
from .registry import FEE_DENOMINATOR, NonFungibleRegistry

__all__ = [
    "Contract",
    "ContractMethod",
    "DeploymentFactory",
    "FEE_DENOMINATOR",
    "FungibleLedger",
    "GovernedContract",
    "MethodInfo",
    "NonFungibleRegistry",
]
