from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Protocol

from selfheal.core.metadata import HealingEvent, OperationRecord


class TelemetrySink(Protocol):
    def emit_healing_event(self, event: HealingEvent) -> None: ...

    def emit_operation(self, record: OperationRecord) -> None: ...


class MemoryTelemetrySink:
    """Keeps telemetry records in process for reporters and assertions."""

    def __init__(self) -> None:
        self.healing_events: list[HealingEvent] = []
        self.operations: list[OperationRecord] = []

    def emit_healing_event(self, event: HealingEvent) -> None:
        self.healing_events.append(event)

    def emit_operation(self, record: OperationRecord) -> None:
        self.operations.append(record)


class HealingAuditLogger:
    """Appends healing events and resolution records as JSON lines."""

    def __init__(self, root: str | Path = "artifacts") -> None:
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.healing_events_path = self.root / "healing_events.jsonl"
        self.operations_path = self.root / "operations.jsonl"
        self.snapshot_path = self.root / "learning_snapshot.json"

    def emit_healing_event(self, event: HealingEvent) -> None:
        self._append(self.healing_events_path, asdict(event))

    def emit_operation(self, record: OperationRecord) -> None:
        self._append(self.operations_path, asdict(record))

    def read_healing_events(self) -> list[dict]:
        if not self.healing_events_path.exists():
            return []
        with self.healing_events_path.open("r", encoding="utf-8") as handle:
            return [json.loads(line) for line in handle if line.strip()]

    def write_learning_snapshot(self, store) -> Path:
        self.snapshot_path.write_text(
            json.dumps(store.snapshot(), indent=2, sort_keys=True),
            encoding="utf-8",
        )
        return self.snapshot_path

    @staticmethod
    def _append(path: Path, payload: dict) -> None:
        with path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(payload) + "\n")
