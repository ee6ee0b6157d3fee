"""JSONL event logger - append-only record of every emitted contract event"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import get
from .events import Event


class EventLogger:
    """Append-only JSONL event log with per-run directory support.

    Supports two modes:
    1. Per-run mode (run_id + logs_dir): logs/{run_id}/events.jsonl, with
       logs/latest -> {run_id}
    2. Single-file mode (output_file only): file is cleared on creation

    Events of a call are written only once the call commits; a reverted call
    leaves a single ``call_reverted`` record instead. Every line carries a
    monotonic ``log_sequence``.
    """

    output_path: Path
    _logs_dir: Path | None
    _run_id: str | None
    _sequence: int

    def __init__(
        self,
        output_file: str | None = None,
        logs_dir: str | None = None,
        run_id: str | None = None,
    ) -> None:
        self._logs_dir = Path(logs_dir) if logs_dir else None
        self._run_id = run_id
        self._sequence = 0

        if logs_dir and run_id:
            self._setup_per_run_logging()
        else:
            self._setup_single_file(output_file)

    def _setup_per_run_logging(self) -> None:
        if self._logs_dir is None or self._run_id is None:
            raise ValueError("Both logs_dir and run_id required for per-run mode")

        run_dir = self._logs_dir / self._run_id
        run_dir.mkdir(parents=True, exist_ok=True)
        self.output_path = run_dir / "events.jsonl"
        self.output_path.write_text("")

        latest_link = self._logs_dir / "latest"
        if latest_link.is_symlink() or latest_link.is_file():
            latest_link.unlink()
        if not latest_link.exists():
            latest_link.symlink_to(self._run_id)

    def _setup_single_file(self, output_file: str | None) -> None:
        resolved_file = output_file or get("logging.events_file") or "events.jsonl"
        if not isinstance(resolved_file, str):
            resolved_file = "events.jsonl"
        self.output_path = Path(resolved_file)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text("")

    def log(self, event_type: str, data: dict[str, Any]) -> None:
        """Append one record to the JSONL file."""
        self._sequence += 1
        record: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "log_sequence": self._sequence,
            "event_type": event_type,
            **data,
        }
        with open(self.output_path, "a") as f:
            f.write(json.dumps(record) + "\n")

    def log_event(self, event: Event) -> None:
        """Record a contract event."""
        self.log("contract_event", event.to_dict())

    def log_rollback(self, sender: str, target: str, method: str, error: str) -> None:
        """Record a call whose effects were discarded."""
        self.log("call_reverted", {
            "sender": sender,
            "target": target,
            "method": method,
            "error": error,
        })

    def read_recent(self, n: int | None = None) -> list[dict[str, Any]]:
        """Read the last N records from the log.

        N defaults to logging.default_recent from config.
        """
        if n is None:
            default_recent = get("logging.default_recent")
            n = default_recent if isinstance(default_recent, int) else 50
        if not self.output_path.exists():
            return []
        lines = [line for line in self.output_path.read_text().split("\n") if line]
        recent = lines[-n:] if len(lines) > n else lines
        return [json.loads(line) for line in recent]

    @property
    def run_id(self) -> str | None:
        return self._run_id

    @property
    def logs_dir(self) -> Path | None:
        return self._logs_dir
