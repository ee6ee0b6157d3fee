"""Structured notifications emitted by contracts.

Events are the only audit channel for external observers. The order of the
fields in ``args`` is part of each event's contract and must not change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Event:
    """A single emitted event.

    Attributes:
        name: Event name (e.g. "Transfer", "BatchMinted")
        emitter: Address of the contract that emitted it
        args: Ordered event fields
        sequence: Position in the host's global event order
    """

    name: str
    emitter: str
    args: dict[str, Any] = field(default_factory=dict)
    sequence: int = 0

    def __getitem__(self, key: str) -> Any:
        return self.args[key]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSONL logging."""
        return {
            "name": self.name,
            "emitter": self.emitter,
            "sequence": self.sequence,
            "args": {k: _jsonable(v) for k, v in self.args.items()},
        }


def _jsonable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value
