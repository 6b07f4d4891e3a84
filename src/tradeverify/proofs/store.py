from __future__ import annotations

import json
import logging
import os
import threading
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Union

from pydantic import ValidationError

from tradeverify.proofs.models import AuditEvent, InvalidEventRecord

logger = logging.getLogger(__name__)

ChainRecord = Union[AuditEvent, InvalidEventRecord]


class EventStore(Protocol):
    """The persistence operations the audit chain needs."""

    def insert_event(self, event: AuditEvent) -> AuditEvent: ...

    def latest_event_hash(self, trade_id: str) -> Optional[str]: ...

    def list_events(self, trade_id: str) -> List[AuditEvent]: ...

    def list_records(self, trade_id: str) -> List[ChainRecord]: ...


def _default_path() -> Path:
    base = Path(os.getenv("TV_DATA_ROOT", "."))
    return base / "data" / "trade_events.jsonl"


def _require_persistable(event: AuditEvent) -> None:
    if not event.trade_id:
        raise ValueError("trade_id is required for persistence")
    if not event.event_hash:
        raise ValueError("event_hash is required for persistence")


def valid_events(records: List[ChainRecord]) -> List[AuditEvent]:
    return [record for record in records if isinstance(record, AuditEvent)]


class InMemoryEventStore:
    """Process-local store keeping each trade's events in insertion order."""

    def __init__(self) -> None:
        self._events: Dict[str, List[AuditEvent]] = defaultdict(list)
        self._lock = threading.Lock()

    def insert_event(self, event: AuditEvent) -> AuditEvent:
        _require_persistable(event)
        with self._lock:
            self._events[event.trade_id].append(event)
        return event

    def latest_event_hash(self, trade_id: str) -> Optional[str]:
        with self._lock:
            events = self._events.get(trade_id)
            return events[-1].event_hash if events else None

    def list_events(self, trade_id: str) -> List[AuditEvent]:
        with self._lock:
            return list(self._events.get(trade_id, []))

    def list_records(self, trade_id: str) -> List[ChainRecord]:
        return list(self.list_events(trade_id))


class JsonlEventStore:
    """JSONL-backed event log with append + scan semantics.

    File order is creation order, so a trade's chain is the subsequence of
    lines carrying its ``trade_id``.  A line that mentions the trade but no
    longer parses as an event stays in the chain as an ``InvalidEventRecord``.
    """

    def __init__(self, path: Path | None = None):
        self.path = path or _default_path()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def insert_event(self, event: AuditEvent) -> AuditEvent:
        _require_persistable(event)
        serialized = json.dumps(event.serializable_dict(), sort_keys=True)
        with self._lock:
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(serialized + "\n")
        return event

    def _scan(self, trade_id: str) -> List[ChainRecord]:
        if not self.path.exists():
            return []
        # Any line naming the trade id belongs to its chain, even if damaged.
        marker = json.dumps(trade_id)
        records: List[ChainRecord] = []
        with self._lock:
            with self.path.open("r", encoding="utf-8") as handle:
                for line_no, line in enumerate(handle, start=1):
                    if not line.strip():
                        continue
                    try:
                        record = json.loads(line)
                    except json.JSONDecodeError:
                        record = None
                    if isinstance(record, dict) and isinstance(record.get("trade_id"), str):
                        if record["trade_id"] != trade_id:
                            continue
                    elif marker not in line:
                        logger.warning("Skipping unreadable event line %s in %s", line_no, self.path)
                        continue
                    if not isinstance(record, dict):
                        records.append(InvalidEventRecord(trade_id, line_no, "line is not a JSON object"))
                        continue
                    try:
                        records.append(AuditEvent.model_validate(record))
                    except ValidationError as exc:
                        logger.warning("Invalid event record for trade %s at line %s", trade_id, line_no)
                        records.append(
                            InvalidEventRecord(trade_id, line_no, f"{exc.error_count()} validation error(s)")
                        )
        return records

    def trade_ids(self) -> List[str]:
        """Trade ids in order of first appearance."""

        if not self.path.exists():
            return []
        seen: Dict[str, None] = {}
        with self._lock:
            with self.path.open("r", encoding="utf-8") as handle:
                for line in handle:
                    try:
                        trade_id = json.loads(line).get("trade_id")
                    except (json.JSONDecodeError, AttributeError):
                        continue
                    if isinstance(trade_id, str) and trade_id:
                        seen.setdefault(trade_id)
        return list(seen)

    def latest_event_hash(self, trade_id: str) -> Optional[str]:
        events = self.list_events(trade_id)
        return events[-1].event_hash if events else None

    def list_events(self, trade_id: str) -> List[AuditEvent]:
        return valid_events(self._scan(trade_id))

    def list_records(self, trade_id: str) -> List[ChainRecord]:
        return self._scan(trade_id)


_DEFAULT_STORE: JsonlEventStore | None = None


def get_default_store() -> JsonlEventStore:
    """Return a module-level event store instance."""

    global _DEFAULT_STORE
    if _DEFAULT_STORE is None:
        _DEFAULT_STORE = JsonlEventStore()
    return _DEFAULT_STORE
