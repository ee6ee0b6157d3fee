"""Binary operational gate.

Active -> Paused via ``pause``; Paused -> Active via ``unpause``; both are
owner-only. Self-transitions are rejected (``AlreadyPaused`` /
``AlreadyActive``) so a caller always learns whether its call changed state.

``require_active`` is meant to be called from exactly one place per contract:
the chokepoint through which every balance or ownership change flows.
"""

from __future__ import annotations

from .access import AccessGate, EventEmitter
from .errors import AlreadyActive, AlreadyPaused, OperationPaused
from .identity import to_address


class PauseSwitch:
    """Pausable state owned by a contract."""

    _paused: bool

    def __init__(self, gate: AccessGate, emitter: EventEmitter) -> None:
        self._gate = gate
        self._emitter = emitter
        self._paused = False

    @property
    def paused(self) -> bool:
        return self._paused

    def pause(self, caller: str) -> None:
        self._gate.only_owner(caller)
        if self._paused:
            raise AlreadyPaused("Contract is already paused")
        self._paused = True
        self._emitter.emit("Paused", account=to_address(caller))

    def unpause(self, caller: str) -> None:
        self._gate.only_owner(caller)
        if not self._paused:
            raise AlreadyActive("Contract is not paused")
        self._paused = False
        self._emitter.emit("Unpaused", account=to_address(caller))

    def require_active(self) -> None:
        """Fail with OperationPaused while paused."""
        if self._paused:
            raise OperationPaused("Operation rejected: contract is paused")
