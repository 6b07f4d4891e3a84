"""Cross-check LC terms against a presented document set.

Results are emitted in document order and, within a document, in the fixed
field order of its type.  Consumers rely on that order, and the integrity
hash of a check is computed over it, so the engine must stay free of I/O and
clocks: the presentation deadline is evaluated against an explicit ``as_of``.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from tradeverify.lc import comparators as cmp
from tradeverify.lc.models import (
    LC_TERMS_LABEL,
    CheckResultItem,
    CheckSummary,
    CrossCheckResult,
    DocumentType,
    LcTerms,
    Severity,
    TradeDocument,
)

logger = logging.getLogger(__name__)

DocumentChecker = Callable[[LcTerms, TradeDocument, str, date], Iterable[Optional[CheckResultItem]]]


class UnsupportedDocumentTypeError(ValueError):
    """Raised when a document type has no entry in the dispatch table."""


def _invoice_checks(lc: LcTerms, doc: TradeDocument, label: str, as_of: date):
    yield cmp.compare_party_name("Beneficiary Name", lc.beneficiary_name, doc.value_of("beneficiaryName"), label)
    yield cmp.compare_currency(lc.currency, doc.value_of("currency"), label)
    yield cmp.compare_amount(lc.total_amount, cmp.parse_number(doc.value_of("totalAmount")), label)
    quantity = cmp.parse_number(doc.value_of("quantity"))
    if quantity > 0:
        yield cmp.compare_quantity(lc.quantity, quantity, label)
    yield cmp.compare_goods_description(lc.goods_description, doc.value_of("goodsDescription"), label)
    yield cmp.compare_incoterms(lc.incoterms, doc.value_of("incoterms"), label)


def _bill_of_lading_checks(lc: LcTerms, doc: TradeDocument, label: str, as_of: date):
    shipper = doc.value_of("shipperName")
    if shipper:
        yield cmp.compare_party_name("Shipper Name (vs Beneficiary)", lc.beneficiary_name, shipper, label)
    yield cmp.compare_port("Port of Loading", lc.port_of_loading, doc.value_of("portOfLoading"), label)
    yield cmp.compare_port("Port of Discharge", lc.port_of_discharge, doc.value_of("portOfDischarge"), label)

    shipped_raw = doc.value_of("shippedOnBoardDate")
    shipped = cmp.parse_date(shipped_raw)
    latest = cmp.parse_date(lc.latest_shipment_date)
    if shipped is not None and latest is not None:
        yield cmp.compare_shipment_date(
            latest,
            shipped,
            lc_value=lc.latest_shipment_date,
            document_value=shipped_raw,
            document_type=label,
        )
        yield cmp.check_presentation_deadline(shipped, as_of, label)

    yield cmp.check_bl_number(doc.value_of("blNumber"), label)
    quantity = cmp.parse_number(doc.value_of("quantity"))
    if quantity > 0:
        yield cmp.compare_quantity(lc.quantity, quantity, label)


def _certificate_of_origin_checks(lc: LcTerms, doc: TradeDocument, label: str, as_of: date):
    exporter = doc.value_of("exporterName")
    if exporter:
        yield cmp.compare_party_name("Exporter Name (vs Beneficiary)", lc.beneficiary_name, exporter, label)
    yield cmp.compare_origin(lc.country_of_origin, doc.value_of("originCountry"), label)


def _phytosanitary_checks(lc: LcTerms, doc: TradeDocument, label: str, as_of: date):
    exporter = doc.value_of("exporterName")
    if exporter:
        yield cmp.compare_party_name("Exporter Name (vs Beneficiary)", lc.beneficiary_name, exporter, label)


def _packing_list_checks(lc: LcTerms, doc: TradeDocument, label: str, as_of: date):
    quantity = cmp.parse_number(doc.value_of("quantity"))
    if quantity > 0:
        yield cmp.compare_quantity(lc.quantity, quantity, label)


def _no_checks(lc: LcTerms, doc: TradeDocument, label: str, as_of: date):
    return ()


DOCUMENT_CHECKS: Dict[DocumentType, DocumentChecker] = {
    DocumentType.COMMERCIAL_INVOICE: _invoice_checks,
    DocumentType.BILL_OF_LADING: _bill_of_lading_checks,
    DocumentType.CERTIFICATE_OF_ORIGIN: _certificate_of_origin_checks,
    DocumentType.PHYTOSANITARY_CERTIFICATE: _phytosanitary_checks,
    DocumentType.PACKING_LIST: _packing_list_checks,
    DocumentType.OTHER: _no_checks,
}


def _lc_reference_check(lc: LcTerms) -> Optional[CheckResultItem]:
    if lc.lc_reference and lc.lc_reference.strip():
        return None
    return CheckResultItem(
        field_name="LC Reference",
        lc_value="(empty)",
        document_value="N/A",
        document_type=LC_TERMS_LABEL,
        severity=Severity.AMBER,
        ucp_rule=cmp.GENERAL,
        explanation="LC reference number is empty. Ensure this is populated for traceability.",
    )


def _document_results(lc: LcTerms, doc: TradeDocument, as_of: date) -> List[CheckResultItem]:
    checker = DOCUMENT_CHECKS.get(doc.document_type)
    if checker is None:
        raise UnsupportedDocumentTypeError(f"Unsupported document type: {doc.document_type!r}")
    label = doc.document_type.label
    items = [item for item in checker(lc, doc, label, as_of) if item is not None]
    ched = cmp.check_ched_reference(doc.value_of("chedReference"), label)
    if ched is not None:
        items.append(ched)
    return items


def run_cross_check(
    lc: LcTerms,
    documents: Sequence[TradeDocument],
    *,
    as_of: date | None = None,
) -> CrossCheckResult:
    """Cross-check *documents* against *lc* and summarise the outcome."""

    reference_day = as_of or datetime.now(timezone.utc).date()
    results: List[CheckResultItem] = []

    reference_item = _lc_reference_check(lc)
    if reference_item is not None:
        results.append(reference_item)

    for doc in documents:
        results.extend(_document_results(lc, doc, reference_day))

    summary = CheckSummary.from_results(results)
    logger.debug(
        "LC cross-check complete",
        extra={
            "payload": {
                "documents": len(documents),
                "total_checks": summary.total_checks,
                "verdict": summary.verdict.value,
            }
        },
    )
    return CrossCheckResult(results=results, summary=summary)
