"""Move audit chains from the JSONL log into the ``trade_events`` table.

Events keep their ids, hashes and timestamps, so a migrated chain verifies
exactly as it did in the log.  Backfill is idempotent: events already present
(by ``event_id``) are skipped, which allows re-running during the cut-over
while the JSONL log is still being written.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from tradeverify.db.event_store import SqlEventStore, event_to_row
from tradeverify.db.models import TradeEvent
from tradeverify.proofs.audit_chain import AuditChain
from tradeverify.proofs.models import InvalidEventRecord
from tradeverify.proofs.store import JsonlEventStore

logger = logging.getLogger(__name__)

COMMIT_BATCH = 100


def backfill_events(
    session: Session,
    source: JsonlEventStore,
    trade_ids: Optional[Iterable[str]] = None,
) -> int:
    """Copy JSONL events into the table; returns the number of new rows."""

    migrated = 0
    for trade_id in trade_ids or source.trade_ids():
        existing = {
            event_id
            for (event_id,) in session.query(TradeEvent.event_id).filter_by(trade_id=trade_id)
        }
        for event in source.list_records(trade_id):
            if isinstance(event, InvalidEventRecord):
                logger.warning(
                    "Not migrating invalid record for trade %s at line %s: %s", trade_id, event.position, event.error
                )
                continue
            if event.event_id in existing:
                continue
            session.add(event_to_row(event))
            migrated += 1
            if migrated % COMMIT_BATCH == 0:
                session.commit()
                logger.info("Migrated %s audit events...", migrated)

    session.commit()
    logger.info("Backfill complete: %s new audit events", migrated)
    return migrated


def verify_migration(
    source: JsonlEventStore,
    target: SqlEventStore,
    trade_ids: Optional[Iterable[str]] = None,
) -> Dict[str, Dict[str, object]]:
    """Compare per-trade event counts and re-verify each migrated chain."""

    chain = AuditChain(target)
    results: Dict[str, Dict[str, object]] = {}
    for trade_id in trade_ids or source.trade_ids():
        jsonl_count = len(source.list_records(trade_id))
        report = chain.verify(trade_id)
        results[trade_id] = {
            "jsonl": jsonl_count,
            "sql": report.total_events,
            "match": jsonl_count == report.total_events,
            "valid": report.valid,
        }
    return results
