from __future__ import annotations

import logging
from typing import List, Optional

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from tradeverify.db.models import TradeEvent
from tradeverify.db.session import get_session_factory, get_standalone_session
from tradeverify.proofs.models import AuditEvent, InvalidEventRecord
from tradeverify.proofs.store import ChainRecord, valid_events

logger = logging.getLogger(__name__)


def event_to_row(event: AuditEvent) -> TradeEvent:
    return TradeEvent(
        event_id=event.event_id,
        trade_id=event.trade_id,
        session_id=event.session_id,
        event_type=event.event_type,
        event_data=event.event_data,
        previous_hash=event.previous_hash,
        event_hash=event.event_hash,
        canonical_version=event.canonical_version,
        created_at=event.created_at,
    )


def row_to_event(row: TradeEvent) -> AuditEvent:
    return AuditEvent(
        event_id=row.event_id,
        trade_id=row.trade_id,
        session_id=row.session_id,
        event_type=row.event_type,
        event_data=row.event_data,
        previous_hash=row.previous_hash,
        event_hash=row.event_hash,
        canonical_version=row.canonical_version,
        created_at=row.created_at,
    )


class SqlEventStore:
    """Audit event store on the ``trade_events`` table.

    Chains are read in ``created_at`` order with the insertion sequence as
    tie-break.  Cross-process appends to the same trade still need a
    per-trade lock in the database (e.g. ``pg_advisory_xact_lock``).
    """

    def __init__(self, session_factory: sessionmaker | None = None):
        self._session_factory = session_factory or get_session_factory()

    def insert_event(self, event: AuditEvent) -> AuditEvent:
        if not event.trade_id or not event.event_hash:
            raise ValueError("trade_id and event_hash are required for persistence")
        with get_standalone_session(self._session_factory) as session:
            session.add(event_to_row(event))
        return event

    def latest_event_hash(self, trade_id: str) -> Optional[str]:
        stmt = (
            select(TradeEvent.event_hash)
            .where(TradeEvent.trade_id == trade_id)
            .order_by(TradeEvent.created_at.desc(), TradeEvent.seq.desc())
            .limit(1)
        )
        with get_standalone_session(self._session_factory) as session:
            return session.execute(stmt).scalar_one_or_none()

    def list_events(self, trade_id: str) -> List[AuditEvent]:
        return valid_events(self.list_records(trade_id))

    def list_records(self, trade_id: str) -> List[ChainRecord]:
        stmt = (
            select(TradeEvent)
            .where(TradeEvent.trade_id == trade_id)
            .order_by(TradeEvent.created_at.asc(), TradeEvent.seq.asc())
        )
        records: List[ChainRecord] = []
        with get_standalone_session(self._session_factory) as session:
            for row in session.execute(stmt).scalars():
                try:
                    records.append(row_to_event(row))
                except ValidationError as exc:
                    logger.warning("Invalid trade_events row %s for trade %s", row.seq, trade_id)
                    records.append(
                        InvalidEventRecord(trade_id, row.seq, f"{exc.error_count()} validation error(s)")
                    )
        return records
