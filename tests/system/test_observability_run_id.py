from __future__ import annotations

import logging

from tests.helpers.tampering import overwrite_event
from tests.helpers.trade_factory import AS_OF, make_documents, make_lc
from tradeverify.observability import current_run_id, log_event, new_run_id, run_scope
from tradeverify.proofs.audit_chain import AuditChain
from tradeverify.proofs.engine import record_lc_check
from tradeverify.proofs.store import InMemoryEventStore


def test_scoped_run_id_is_attached_to_log_payload(caplog):
    with run_scope("run-123"):
        with caplog.at_level(logging.INFO, logger="tradeverify.observability"):
            log_event("lc check recorded", trade_id="trade-42")

    record = caplog.records[-1]
    assert record.payload == {"run_id": "run-123", "trade_id": "trade-42"}


def test_scope_restores_outer_run_id():
    outer = new_run_id()
    with run_scope("inner") as bound:
        assert bound == "inner"
        assert current_run_id() == "inner"
    assert current_run_id() == outer


def test_empty_scope_keeps_current_run_id():
    outer = new_run_id()
    with run_scope(None) as bound:
        assert bound == outer
    assert current_run_id() == outer


def test_recorded_check_logs_under_its_session(caplog):
    outer = new_run_id()
    chain = AuditChain(InMemoryEventStore())
    with caplog.at_level(logging.INFO, logger="tradeverify.observability"):
        record = record_lc_check(
            trade_id="trade-42",
            lc=make_lc(),
            documents=make_documents(),
            chain=chain,
            session_id="session-9",
            as_of=AS_OF,
        )
    appended = [
        entry.payload
        for entry in caplog.records
        if getattr(entry, "payload", {}).get("event_hash") is not None
    ]
    assert appended[-1]["run_id"] == "session-9"
    assert appended[-1]["event_hash"] == record.event.event_hash
    assert current_run_id() == outer


def test_chain_append_is_logged_with_event_hash(caplog):
    chain = AuditChain(InMemoryEventStore())
    with caplog.at_level(logging.INFO, logger="tradeverify.observability"):
        event = chain.append("trade-42", "created", {"buyer": "Bristol Roasters"})
    payloads = [getattr(record, "payload", {}) for record in caplog.records]
    assert any(payload.get("event_hash") == event.event_hash for payload in payloads)


def test_tampering_is_logged_as_warning(caplog):
    store = InMemoryEventStore()
    chain = AuditChain(store)
    chain.append("trade-42", "created", {"buyer": "Bristol Roasters"})
    overwrite_event(store, "trade-42", 0, event_data={"buyer": "Someone Else"})

    with caplog.at_level(logging.WARNING, logger="tradeverify.proofs.audit_chain"):
        chain.verify("trade-42")
    assert "payload tampered" in caplog.text
