"""Ownership-based access control shared by every contract.

AccessGate holds a single owner identity and guards privileged operations:
each privileged entry point calls ``gate.only_owner(caller)`` before doing
anything else. How an ownership transfer completes is a pluggable policy
chosen at construction:

- SingleStepOwnership: the new owner takes over immediately
- TwoStepOwnership: the new owner is recorded as pending and must call
  ``accept_ownership`` before the transfer completes

Renouncing sets the owner to the null identity. Nothing can restore an owner
afterwards, so every owner-only operation fails for every caller.
"""

from __future__ import annotations

from typing import Any, Protocol

from .errors import InvalidReceiver, Unauthorized
from .identity import NULL_ADDRESS, Address, to_address


class EventEmitter(Protocol):
    """Anything that can emit an event (contracts implement this)."""

    def emit(self, name: str, **args: Any) -> None: ...


class OwnershipPolicy(Protocol):
    """Strategy deciding how transfer_ownership completes."""

    name: str

    def begin_transfer(self, gate: "AccessGate", new_owner: Address) -> None: ...

    def accept(self, gate: "AccessGate", caller: Address) -> None: ...


class SingleStepOwnership:
    """Ownership moves as soon as the owner transfers it."""

    name = "single_step"

    def begin_transfer(self, gate: "AccessGate", new_owner: Address) -> None:
        gate._set_owner(new_owner)

    def accept(self, gate: "AccessGate", caller: Address) -> None:
        # Nothing is ever pending under this policy
        raise Unauthorized(
            f"{caller} has no pending ownership to accept",
            caller=caller,
        )


class TwoStepOwnership:
    """Ownership moves only once the proposed owner accepts it."""

    name = "two_step"

    def begin_transfer(self, gate: "AccessGate", new_owner: Address) -> None:
        gate._pending_owner = new_owner
        gate._emitter.emit(
            "OwnershipTransferStarted",
            previousOwner=gate.owner,
            newOwner=new_owner,
        )

    def accept(self, gate: "AccessGate", caller: Address) -> None:
        if gate.pending_owner == NULL_ADDRESS or caller != gate.pending_owner:
            raise Unauthorized(
                f"{caller} is not the pending owner",
                caller=caller,
                pending_owner=gate.pending_owner,
            )
        gate._pending_owner = NULL_ADDRESS
        gate._set_owner(caller)


_POLICIES: dict[str, type[SingleStepOwnership] | type[TwoStepOwnership]] = {
    SingleStepOwnership.name: SingleStepOwnership,
    TwoStepOwnership.name: TwoStepOwnership,
}


def ownership_policy(name: str) -> OwnershipPolicy:
    """Look up an ownership policy by its config name."""
    if name not in _POLICIES:
        raise ValueError(f"Unknown ownership policy: {name!r}. Known: {sorted(_POLICIES)}")
    return _POLICIES[name]()


class AccessGate:
    """Single-owner capability check.

    Emits ``OwnershipTransferred(previousOwner, newOwner)`` whenever the owner
    changes, including the initial assignment from the null identity.
    """

    _owner: Address
    _pending_owner: Address
    policy: OwnershipPolicy

    def __init__(
        self,
        initial_owner: str,
        emitter: EventEmitter,
        policy: OwnershipPolicy | None = None,
    ) -> None:
        self._emitter = emitter
        self.policy = policy or SingleStepOwnership()
        self._owner = NULL_ADDRESS
        self._pending_owner = NULL_ADDRESS
        self._set_owner(to_address(initial_owner))

    @property
    def owner(self) -> Address:
        return self._owner

    @property
    def pending_owner(self) -> Address:
        return self._pending_owner

    @property
    def renounced(self) -> bool:
        return self._owner == NULL_ADDRESS

    def only_owner(self, caller: str) -> None:
        """Fail with Unauthorized unless caller is the current owner."""
        if self._owner == NULL_ADDRESS or to_address(caller) != self._owner:
            raise Unauthorized(
                f"{caller} is not the owner",
                caller=caller,
                owner=self._owner,
            )

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        self.only_owner(caller)
        target = to_address(new_owner)
        if target == NULL_ADDRESS:
            raise InvalidReceiver("New owner cannot be the null identity")
        self.policy.begin_transfer(self, target)

    def accept_ownership(self, caller: str) -> None:
        self.policy.accept(self, to_address(caller))

    def renounce_ownership(self, caller: str) -> None:
        """Give up ownership for good.

        ``OwnershipRenounced`` is emitted before the final
        ``OwnershipTransferred(previous, NULL)`` so observers can tell
        renouncement apart from a regular transfer.
        """
        self.only_owner(caller)
        self._emitter.emit("OwnershipRenounced", previousOwner=self._owner)
        self._pending_owner = NULL_ADDRESS
        self._set_owner(NULL_ADDRESS)

    def _set_owner(self, new_owner: Address) -> None:
        previous = self._owner
        self._owner = new_owner
        self._emitter.emit(
            "OwnershipTransferred",
            previousOwner=previous,
            newOwner=new_owner,
        )
