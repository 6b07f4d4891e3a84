"""Hash-chained, tamper-evident event log per trade.

Each event's hash covers its own payload and the hash of the event before
it, so editing any stored payload or pointer invalidates the chain from that
point on::

    event 0: hash_0 = sha256(canon(data_0) + "genesis")   previous = None
    event 1: hash_1 = sha256(canon(data_1) + hash_0)      previous = hash_0
    event 2: hash_2 = sha256(canon(data_2) + hash_1)      previous = hash_1

Verification walks the chain in creation order and checks, at every index,
the ``previous_hash`` pointer first and the recomputed hash second.  The two
failure kinds are reported separately: a broken link and a tampered payload.
"""

from __future__ import annotations

import json
import logging
import threading
import weakref
from typing import Any, Dict, List, Optional

from tradeverify.observability import log_event
from tradeverify.proofs.canonical import CANONICAL_VERSION, canonical_json, compute_event_hash
from tradeverify.proofs.models import (
    EVENT_HASH_MISMATCH,
    INVALID_EVENT_RECORD,
    PREVIOUS_HASH_MISMATCH,
    AuditEvent,
    ChainVerification,
    InvalidEventRecord,
)
from tradeverify.proofs.store import EventStore, get_default_store

logger = logging.getLogger(__name__)


class AuditChain:
    """Append and verify per-trade audit chains on top of an event store.

    Usage::

        chain = AuditChain(JsonlEventStore(path))
        chain.append("trade-42", "lc_check", {"verdict": "COMPLIANT", ...})
        chain.append("trade-42", "status_change", {"status": "in_transit"})

        report = chain.verify("trade-42")
        assert report.valid
    """

    def __init__(self, store: EventStore | None = None) -> None:
        self.store = store or get_default_store()
        # Entries live only while some append holds the lock.
        self._locks: "weakref.WeakValueDictionary[str, threading.Lock]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _trade_lock(self, trade_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(trade_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[trade_id] = lock
            return lock

    def append(
        self,
        trade_id: str,
        event_type: str,
        event_data: Dict[str, Any],
        *,
        session_id: Optional[str] = None,
    ) -> AuditEvent:
        """Append an event chained to the trade's most recent event."""

        # Store exactly what gets hashed: the JSON form of the payload.
        payload = json.loads(canonical_json(event_data))
        if not isinstance(payload, dict):
            raise ValueError("event_data must be a JSON object")

        # Fetch-last and insert must not interleave for one trade, or two
        # events would share a previous_hash and fork the chain.
        with self._trade_lock(trade_id):
            previous_hash = self.store.latest_event_hash(trade_id)
            event = AuditEvent(
                trade_id=trade_id,
                session_id=session_id,
                event_type=event_type,
                event_data=payload,
                previous_hash=previous_hash,
                event_hash=compute_event_hash(payload, previous_hash, CANONICAL_VERSION),
                canonical_version=CANONICAL_VERSION,
            )
            self.store.insert_event(event)

        log_event(
            "audit event appended",
            trade_id=trade_id,
            event_type=event_type,
            event_hash=event.event_hash,
        )
        return event

    def get_chain(self, trade_id: str) -> List[AuditEvent]:
        """Return the trade's events in creation order."""

        return self.store.list_events(trade_id)

    def verify(self, trade_id: str) -> ChainVerification:
        """Recompute every link and hash; report the first broken index."""

        events = self.store.list_records(trade_id)
        total = len(events)

        for index, event in enumerate(events):
            if isinstance(event, InvalidEventRecord):
                logger.warning(
                    "Audit chain record unreadable for trade %s at index %s: %s", trade_id, index, event.error
                )
                return ChainVerification(
                    valid=False, total_events=total, broken_at=index, reason=INVALID_EVENT_RECORD
                )

            expected_previous = events[index - 1].event_hash if index else None
            if event.previous_hash != expected_previous:
                logger.warning(
                    "Audit chain link broken for trade %s at index %s", trade_id, index
                )
                return ChainVerification(
                    valid=False, total_events=total, broken_at=index, reason=PREVIOUS_HASH_MISMATCH
                )

            try:
                recomputed = compute_event_hash(event.event_data, event.previous_hash, event.canonical_version)
            except ValueError:
                recomputed = None
            if recomputed != event.event_hash:
                logger.warning(
                    "Audit chain payload tampered for trade %s at index %s", trade_id, index
                )
                return ChainVerification(
                    valid=False, total_events=total, broken_at=index, reason=EVENT_HASH_MISMATCH
                )

        return ChainVerification(valid=True, total_events=total)


def verify_audit_chain(trade_id: str, store: EventStore | None = None) -> ChainVerification:
    return AuditChain(store).verify(trade_id)
