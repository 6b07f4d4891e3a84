from __future__ import annotations

from tests.helpers.trade_factory import AS_OF, make_documents, make_invoice, make_lc
from tradeverify.proofs.audit_chain import AuditChain
from tradeverify.proofs.engine import LC_CHECK_EVENT, compute_check_hash, record_lc_check
from tradeverify.proofs.store import InMemoryEventStore

STAMP = "2026-03-20T09:00:00+00:00"


def _record(chain: AuditChain, documents=None):
    return record_lc_check(
        trade_id="trade-42",
        lc=make_lc(),
        documents=documents if documents is not None else make_documents(),
        chain=chain,
        session_id="session-1",
        as_of=AS_OF,
        timestamp=STAMP,
    )


def test_check_is_appended_to_the_trade_chain():
    chain = AuditChain(InMemoryEventStore())
    record = _record(chain)

    assert record.event.event_type == LC_CHECK_EVENT
    assert record.event.session_id == "session-1"
    assert record.event.event_data == {
        "lcReference": "LC-2026-0042",
        "verdict": "COMPLIANT",
        "totalChecks": 14,
        "matches": 14,
        "warnings": 0,
        "criticals": 0,
        "integrityHash": record.integrity_hash,
        "timestamp": STAMP,
    }
    assert chain.verify("trade-42").valid


def test_integrity_hash_is_reproducible():
    first = _record(AuditChain(InMemoryEventStore()))
    second = _record(AuditChain(InMemoryEventStore()))
    assert first.integrity_hash == second.integrity_hash
    assert first.integrity_hash == compute_check_hash(make_lc(), make_documents(), first.results, STAMP)


def test_integrity_hash_changes_with_any_result():
    record = _record(AuditChain(InMemoryEventStore()))
    altered = list(record.results)
    altered[0] = altered[0].model_copy(update={"explanation": "edited"})
    assert compute_check_hash(make_lc(), make_documents(), altered, STAMP) != record.integrity_hash
    assert compute_check_hash(make_lc(), make_documents(), record.results, STAMP + "x") != record.integrity_hash


def test_repeated_checks_extend_the_chain():
    chain = AuditChain(InMemoryEventStore())
    first = _record(chain)
    second = _record(chain, documents=[make_invoice(currency="EUR")])

    assert second.event.previous_hash == first.event.event_hash
    assert second.summary.criticals == 1
    assert "Currency" in second.correction.email
    assert second.to_dict()["correctionEmail"] == second.correction.email
    assert chain.verify("trade-42").total_events == 2
