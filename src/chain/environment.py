"""In-memory host for contracts.

Chain provides the four guarantees the contracts rely on:
1. atomic all-or-nothing execution of a single external call
2. storage addressed by contract identity
3. Keccak-256 (through src.chain.address)
4. an authenticated caller identity for every call

Calls run to completion one at a time. Nested calls (a factory creating and
configuring a ledger) join the outermost call's transaction: if anything
raises, every contract's state, the contract table, the deployer nonces and
the event list are restored to what they were before the call.
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Generator, TypeVar

from pydantic import BaseModel

from ..config import get_validated_config
from .address import derive_address, init_code_hash
from .contracts.base import Contract
from .errors import ContractError, DeploymentFailed, InvalidAddress, MethodNotFound, error_response
from .events import Event
from .identity import Address, to_address
from .logger import EventLogger

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=Contract)


@dataclass
class _Snapshot:
    contracts: dict[Address, Contract]
    states: dict[Address, dict[str, Any]]
    nonces: dict[Address, int]
    event_count: int


class Chain:
    """Contract table, event log and transaction boundary."""

    event_logger: EventLogger | None
    _contracts: dict[Address, Contract]
    _events: list[Event]
    _nonces: dict[Address, int]
    _depth: int

    def __init__(self, event_logger: EventLogger | None = None) -> None:
        self.event_logger = event_logger
        self._contracts = {}
        self._events = []
        self._nonces = {}
        self._depth = 0

    @classmethod
    def from_config(cls) -> "Chain":
        """Create a Chain, attaching a JSONL event log if one is configured."""
        events_file = get_validated_config().logging.events_file
        event_logger = EventLogger(output_file=events_file) if events_file else None
        return cls(event_logger=event_logger)

    # ===== CONTRACT TABLE =====

    def has_code(self, address: str) -> bool:
        return to_address(address) in self._contracts

    def get_contract(self, address: str) -> Contract:
        target = to_address(address)
        if target not in self._contracts:
            raise InvalidAddress(f"No contract at {target}", address=target)
        return self._contracts[target]

    def nonce(self, deployer: str) -> int:
        return self._nonces.get(to_address(deployer), 0)

    # ===== CREATION =====

    def create2(
        self,
        deployer: str,
        salt: int | str | bytes,
        init_code: bytes,
        builder: Callable[["Chain", Address], Contract],
    ) -> Address | None:
        """Create a contract at its CREATE2 address.

        Returns None when the address is already occupied. The builder runs
        the constructor; if it raises, nothing is left behind.
        """
        address = derive_address(deployer, salt, init_code_hash(init_code))
        if address in self._contracts:
            logger.warning("CREATE2 collision at %s (deployer %s)", address, deployer)
            return None
        with self.atomic():
            contract = builder(self, address)
            self._contracts[address] = contract
        logger.debug("Created %s at %s", type(contract).__name__, address)
        return address

    def deploy(
        self,
        deployer: str,
        contract_cls: type[C],
        *args: Any,
        salt: int | str | bytes | None = None,
        config: BaseModel | None = None,
    ) -> C:
        """Deploy contract_cls with constructor args, on behalf of deployer.

        Without a salt, the deployer's nonce is used (and incremented), so
        repeated deployments of the same contract land at distinct addresses.
        """
        creator = to_address(deployer)
        with self.atomic():
            if salt is None:
                salt = self._nonces.get(creator, 0)
                self._nonces[creator] = salt + 1
            init_code = contract_cls.creation_code(config) + contract_cls.encode_constructor_args(*args)

            def build(chain: "Chain", address: Address) -> Contract:
                if config is None:
                    return contract_cls(chain, address, creator, *args)
                return contract_cls(chain, address, creator, *args, config=config)

            address = self.create2(creator, salt, init_code, build)
            if address is None:
                raise DeploymentFailed(f"Address for salt {salt!r} is already occupied")
        contract = self._contracts[address]
        assert isinstance(contract, contract_cls)
        return contract

    # ===== CALLS =====

    def call(self, sender: str, address: str, method: str, *args: Any) -> Any:
        """Invoke a registered method as sender.

        View methods receive only args; mutating methods receive the sender
        first and run atomically.
        """
        contract = self.get_contract(address)
        entry = contract.get_method(method)
        if entry is None:
            raise MethodNotFound(
                f"{type(contract).__name__} has no method '{method}'",
                method=method,
                available=sorted(contract.methods),
            )
        if not entry.mutates:
            return entry.handler(*args)

        caller = to_address(sender)
        try:
            with self.atomic():
                return entry.handler(caller, *args)
        except ContractError as exc:
            logger.info("Reverted %s.%s from %s: %s", contract.address, method, caller, exc)
            if self.event_logger is not None:
                self.event_logger.log_rollback(caller, contract.address, method, str(exc))
            raise

    def invoke(
        self,
        sender: str,
        address: str,
        method: str,
        args: list[Any] | None = None,
    ) -> dict[str, Any]:
        """Dict-protocol wrapper around call().

        Returns {"success": True, "result": ...} or the standard error
        response for a ContractError.
        """
        try:
            result = self.call(sender, address, method, *(args or []))
        except ContractError as exc:
            return error_response(exc)
        return {"success": True, "result": result}

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """Transaction boundary. Nested uses join the outermost one."""
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = self._snapshot()
        self._depth = 1
        try:
            yield
        except Exception:
            self._restore(snapshot)
            raise
        else:
            self._flush(snapshot.event_count)
        finally:
            self._depth = 0

    def _snapshot(self) -> _Snapshot:
        # Contracts and the chain itself are shared, not copied
        memo: dict[int, Any] = {id(self): self}
        for contract in self._contracts.values():
            memo[id(contract)] = contract
        states = {
            address: copy.deepcopy(vars(contract), memo)
            for address, contract in self._contracts.items()
        }
        return _Snapshot(
            contracts=dict(self._contracts),
            states=states,
            nonces=dict(self._nonces),
            event_count=len(self._events),
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        for address, state in snapshot.states.items():
            contract = snapshot.contracts[address]
            vars(contract).clear()
            vars(contract).update(state)
        self._contracts = snapshot.contracts
        self._nonces = snapshot.nonces
        del self._events[snapshot.event_count:]

    def _flush(self, start: int) -> None:
        if self.event_logger is None:
            return
        for event in self._events[start:]:
            self.event_logger.log_event(event)

    # ===== EVENTS =====

    def emit(self, name: str, emitter: str, args: dict[str, Any]) -> None:
        """Record an event. Outside a call it is logged immediately."""
        event = Event(name=name, emitter=emitter, args=dict(args), sequence=len(self._events) + 1)
        self._events.append(event)
        if self._depth == 0 and self.event_logger is not None:
            self.event_logger.log_event(event)

    def events(self, name: str | None = None, emitter: str | None = None) -> list[Event]:
        """Emitted events, optionally filtered by name and/or emitter."""
        target = to_address(emitter) if emitter is not None else None
        return [
            e for e in self._events
            if (name is None or e.name == name) and (target is None or e.emitter == target)
        ]
