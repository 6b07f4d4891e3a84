from __future__ import annotations

from sqlalchemy import create_engine, inspect

from tradeverify.db.event_store import SqlEventStore
from tradeverify.db.session import (
    database_url,
    drop_all,
    get_session_factory,
    get_standalone_session,
    init_db,
)
from tradeverify.db.models import TradeEvent
from tradeverify.proofs.audit_chain import AuditChain
from tradeverify.proofs.models import EVENT_HASH_MISMATCH, INVALID_EVENT_RECORD

TRADE = "trade-42"


def _store(db_path):
    engine = create_engine(f"sqlite:///{db_path}")
    init_db(engine)
    return SqlEventStore(get_session_factory(engine)), engine


def test_database_url_prefers_explicit_setting(monkeypatch):
    monkeypatch.setenv("TV_DATABASE_URL", "postgresql://tv:tv@localhost/tradeverify")
    assert database_url() == "postgresql://tv:tv@localhost/tradeverify"


def test_database_url_defaults_to_sqlite_under_data_root(tmp_path, monkeypatch):
    monkeypatch.delenv("TV_DATABASE_URL", raising=False)
    monkeypatch.setenv("TV_DATA_ROOT", str(tmp_path))
    assert database_url() == f"sqlite:///{tmp_path / 'data' / 'tradeverify.db'}"
    assert (tmp_path / "data").is_dir()


def test_chain_round_trips_through_the_table(tmp_path):
    store, _ = _store(tmp_path / "events.db")
    chain = AuditChain(store)
    appended = [
        chain.append(TRADE, "created", {"buyer": "Bristol Roasters Limited"}),
        chain.append(TRADE, "lc_check", {"verdict": "COMPLIANT", "totalChecks": 14}),
        chain.append(TRADE, "status_change", {"status": "shipped"}, session_id="s-1"),
    ]

    reopened, _ = _store(tmp_path / "events.db")
    events = reopened.list_events(TRADE)
    assert [event.event_hash for event in events] == [event.event_hash for event in appended]
    assert events[2].session_id == "s-1"
    assert reopened.latest_event_hash(TRADE) == appended[-1].event_hash
    assert AuditChain(reopened).verify(TRADE).valid


def test_unknown_trade_has_no_head(tmp_path):
    store, _ = _store(tmp_path / "events.db")
    assert store.latest_event_hash("nobody") is None
    assert store.list_events("nobody") == []


def test_edited_row_is_detected(tmp_path):
    store, engine = _store(tmp_path / "events.db")
    chain = AuditChain(store)
    chain.append(TRADE, "created", {"buyer": "Bristol Roasters Limited"})
    chain.append(TRADE, "lc_check", {"verdict": "DISCREPANCIES_FOUND"})

    with get_standalone_session(get_session_factory(engine)) as session:
        row = session.query(TradeEvent).filter_by(trade_id=TRADE, event_type="lc_check").one()
        row.event_data = {"verdict": "COMPLIANT"}

    report = chain.verify(TRADE)
    assert report.broken_at == 1
    assert report.reason == EVENT_HASH_MISMATCH


def test_drop_all_removes_the_table(tmp_path):
    _, engine = _store(tmp_path / "events.db")
    assert "trade_events" in inspect(engine).get_table_names()
    drop_all(engine)
    assert "trade_events" not in inspect(engine).get_table_names()


def test_row_that_no_longer_validates_breaks_the_chain(tmp_path):
    store, engine = _store(tmp_path / "events.db")
    chain = AuditChain(store)
    chain.append(TRADE, "created", {"buyer": "Bristol Roasters Limited"})
    chain.append(TRADE, "lc_check", {"verdict": "DISCREPANCIES_FOUND"})

    with get_standalone_session(get_session_factory(engine)) as session:
        row = session.query(TradeEvent).filter_by(trade_id=TRADE, event_type="lc_check").one()
        row.event_data = ["forged"]

    report = chain.verify(TRADE)
    assert report.valid is False
    assert report.broken_at == 1
    assert report.reason == INVALID_EVENT_RECORD
    assert len(store.list_events(TRADE)) == 1
