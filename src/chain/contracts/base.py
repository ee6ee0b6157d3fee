"""Contracts - Base classes and utilities

A contract is a stateful object living at an address on a Chain. It:
1. Registers the methods callers may invoke by name (Chain.call / invoke)
2. Emits events through its Chain
3. Describes its own creation code so its CREATE2 address can be derived

Privileged contracts compose an AccessGate and a PauseSwitch rather than
re-implementing ownership; GovernedContract exposes their entry points.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Sequence, TypedDict

from pydantic import BaseModel

from ..access import AccessGate, OwnershipPolicy
from ..address import encode_constructor_args
from ..identity import Address, to_address
from ..pause import PauseSwitch

if TYPE_CHECKING:
    from ..environment import Chain


class MethodInfo(TypedDict):
    """Information about a contract method for listing."""
    name: str
    mutates: bool
    description: str


@dataclass
class ContractMethod:
    """A method exposed by a contract"""
    name: str
    handler: Callable[..., Any]
    mutates: bool  # False = view, runs without a state snapshot
    description: str


class Contract:
    """Base class for everything deployed on a Chain"""

    # ABI types of the constructor arguments, in order
    CONSTRUCTOR_TYPES: tuple[str, ...] = ()
    CODE_VERSION: str = "1"

    chain: "Chain"
    address: Address
    deployer: Address
    methods: dict[str, ContractMethod]

    def __init__(self, chain: "Chain", address: str, deployer: str) -> None:
        self.chain = chain
        self.address = to_address(address)
        self.deployer = to_address(deployer)
        self.methods = {}

    @classmethod
    def default_config(cls) -> BaseModel | None:
        """Config used when none is passed at construction."""
        return None

    @classmethod
    def creation_code(cls, config: BaseModel | None = None) -> bytes:
        """Bytes identifying this contract's implementation.

        Stands in for EVM creation bytecode: two instances share creation code
        exactly when they share implementation and configuration, since the
        configuration is baked in at creation.
        """
        code = f"{cls.__module__}.{cls.__qualname__}@{cls.CODE_VERSION}"
        config = config or cls.default_config()
        if config is not None:
            code = f"{code}#{config.model_dump_json()}"
        return code.encode()

    @classmethod
    def encode_constructor_args(cls, *args: Any) -> bytes:
        if len(args) != len(cls.CONSTRUCTOR_TYPES):
            raise TypeError(
                f"{cls.__name__} takes {len(cls.CONSTRUCTOR_TYPES)} constructor "
                f"arguments, got {len(args)}"
            )
        return encode_constructor_args(cls.CONSTRUCTOR_TYPES, args)

    def register_method(
        self,
        name: str,
        handler: Callable[..., Any],
        mutates: bool = True,
        description: str = "",
    ) -> None:
        """Register a callable method on this contract"""
        self.methods[name] = ContractMethod(
            name=name,
            handler=handler,
            mutates=mutates,
            description=description,
        )

    def register_methods(self, names: Sequence[str], mutates: bool = True) -> None:
        """Register bound methods by attribute name, using their docstrings."""
        for name in names:
            handler = getattr(self, name)
            doc = (handler.__doc__ or "").strip().split("\n")[0]
            self.register_method(name, handler, mutates=mutates, description=doc)

    def get_method(self, method_name: str) -> ContractMethod | None:
        return self.methods.get(method_name)

    def list_methods(self) -> list[MethodInfo]:
        return [
            {"name": m.name, "mutates": m.mutates, "description": m.description}
            for m in self.methods.values()
        ]

    def emit(self, name: str, **args: Any) -> None:
        """Emit an event from this contract's address."""
        self.chain.emit(name, self.address, args)

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "type": type(self).__name__,
            "deployer": self.deployer,
            "methods": self.list_methods(),
        }


class GovernedContract(Contract):
    """A contract with an owner and a pause switch.

    The AccessGate and PauseSwitch are components held by the contract; this
    class only forwards the standard ownership and pause entry points to them.
    """

    access: AccessGate
    pause_switch: PauseSwitch

    def __init__(
        self,
        chain: "Chain",
        address: str,
        deployer: str,
        initial_owner: str,
        policy: OwnershipPolicy | None = None,
    ) -> None:
        super().__init__(chain, address, deployer)
        self.access = AccessGate(initial_owner, emitter=self, policy=policy)
        self.pause_switch = PauseSwitch(self.access, emitter=self)
        self.register_methods(["owner", "pending_owner", "paused"], mutates=False)
        self.register_methods([
            "transfer_ownership",
            "accept_ownership",
            "renounce_ownership",
            "pause",
            "unpause",
        ])

    def owner(self) -> Address:
        """Current owner (null identity once renounced)."""
        return self.access.owner

    def pending_owner(self) -> Address:
        """Owner awaiting acceptance under the two-step policy."""
        return self.access.pending_owner

    def paused(self) -> bool:
        """Whether transfers and mints are currently blocked."""
        return self.pause_switch.paused

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand ownership to new_owner according to the ownership policy."""
        self.access.transfer_ownership(caller, new_owner)

    def accept_ownership(self, caller: str) -> None:
        """Complete a pending two-step ownership transfer."""
        self.access.accept_ownership(caller)

    def renounce_ownership(self, caller: str) -> None:
        """Irreversibly leave the contract without an owner."""
        self.access.renounce_ownership(caller)

    def pause(self, caller: str) -> None:
        """Block every transfer, mint and burn."""
        self.pause_switch.pause(caller)

    def unpause(self, caller: str) -> None:
        """Lift the pause."""
        self.pause_switch.unpause(caller)
