"""Relational backend for audit chains.

Provides the SQLAlchemy event table, session management, an event store and
the JSONL backfill used when moving a deployment onto the database.
"""

from tradeverify.db.event_store import SqlEventStore
from tradeverify.db.migrate import backfill_events, verify_migration
from tradeverify.db.models import Base, TradeEvent
from tradeverify.db.session import (
    database_url,
    drop_all,
    get_engine,
    get_session_factory,
    get_standalone_session,
    init_db,
)

__all__ = [
    # Models
    "Base",
    "TradeEvent",
    # Session management
    "database_url",
    "get_engine",
    "get_session_factory",
    "get_standalone_session",
    "init_db",
    "drop_all",
    # Stores
    "SqlEventStore",
    # Migration
    "backfill_events",
    "verify_migration",
]
