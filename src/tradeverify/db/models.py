"""SQLAlchemy models for the relational audit-event backend.

Reference schema for deployments that keep audit chains in a database
instead of the JSONL log.  Events are insert-only; nothing in the package
updates or deletes rows.
"""

from __future__ import annotations

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class TradeEvent(Base):
    """One hash-chained audit event for a trade."""

    __tablename__ = "trade_events"

    # Insertion sequence breaks ties between equal created_at values.
    seq = Column(Integer, primary_key=True, autoincrement=True)
    event_id = Column(String(64), nullable=False, unique=True)
    trade_id = Column(String(64), nullable=False)
    session_id = Column(String(128), nullable=True, index=True)
    event_type = Column(String(64), nullable=False)
    event_data = Column(JSON, nullable=False)

    previous_hash = Column(String(64), nullable=True)  # None for the first event of a trade
    event_hash = Column(String(64), nullable=False)
    canonical_version = Column(String(8), nullable=False, default="1")

    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_trade_events_trade_created", "trade_id", "created_at"),)
