from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Sequence

from tradeverify.lc.corrections import CorrectionNotice, build_correction_notice
from tradeverify.lc.engine import run_cross_check
from tradeverify.lc.models import CheckResultItem, CheckSummary, LcTerms, TradeDocument
from tradeverify.observability import run_scope
from tradeverify.proofs.audit_chain import AuditChain
from tradeverify.proofs.canonical import compute_payload_hash
from tradeverify.proofs.models import AuditEvent

LC_CHECK_EVENT = "lc_check"


def compute_check_hash(
    lc: LcTerms,
    documents: Sequence[TradeDocument],
    results: Sequence[CheckResultItem],
    timestamp: str,
) -> str:
    """Integrity hash binding the inputs and results of one LC check."""

    material: Dict[str, Any] = {
        "lcFields": lc.wire_dict(),
        "documents": [doc.wire_dict() for doc in documents],
        "results": [item.wire_dict() for item in results],
        "timestamp": timestamp,
    }
    return compute_payload_hash(material)


@dataclass(frozen=True)
class LcCheckRecord:
    results: list[CheckResultItem]
    summary: CheckSummary
    integrity_hash: str
    timestamp: str
    correction: CorrectionNotice
    event: AuditEvent

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [item.wire_dict() for item in self.results],
            "summary": self.summary.wire_dict(),
            "integrityHash": self.integrity_hash,
            "timestamp": self.timestamp,
            "correctionEmail": self.correction.email,
            "correctionWhatsApp": self.correction.whatsapp,
            "eventHash": self.event.event_hash,
        }


def record_lc_check(
    *,
    trade_id: str,
    lc: LcTerms,
    documents: Sequence[TradeDocument],
    chain: AuditChain,
    session_id: str | None = None,
    as_of: date | None = None,
    timestamp: str | None = None,
) -> LcCheckRecord:
    """Run an LC cross-check and append its digest to the trade's audit chain.

    Log lines emitted while recording carry ``session_id`` as their run id.
    """

    with run_scope(session_id):
        outcome = run_cross_check(lc, documents, as_of=as_of)
        stamped_at = timestamp or datetime.now(timezone.utc).isoformat()
        integrity_hash = compute_check_hash(lc, documents, outcome.results, stamped_at)
        correction = build_correction_notice(lc, outcome.results)

        summary = outcome.summary
        event = chain.append(
            trade_id,
            LC_CHECK_EVENT,
            {
                "lcReference": lc.lc_reference,
                "verdict": summary.verdict.value,
                "totalChecks": summary.total_checks,
                "matches": summary.matches,
                "warnings": summary.warnings,
                "criticals": summary.criticals,
                "integrityHash": integrity_hash,
                "timestamp": stamped_at,
            },
            session_id=session_id,
        )
    return LcCheckRecord(
        results=outcome.results,
        summary=summary,
        integrity_hash=integrity_hash,
        timestamp=stamped_at,
        correction=correction,
        event=event,
    )
