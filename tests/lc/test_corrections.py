from __future__ import annotations

from tests.helpers.trade_factory import AS_OF, make_bill_of_lading, make_documents, make_invoice, make_lc
from tradeverify.lc.corrections import build_correction_notice
from tradeverify.lc.engine import run_cross_check
from tradeverify.lc.models import Severity


def test_clean_check_produces_no_notice():
    lc = make_lc()
    outcome = run_cross_check(lc, make_documents(), as_of=AS_OF)
    notice = build_correction_notice(lc, outcome.results)
    assert notice.is_empty
    assert notice.to_dict() == {"email": "", "whatsapp": ""}


def test_notice_lists_every_red_item_and_nothing_else():
    lc = make_lc()
    documents = [
        make_invoice(totalAmount="60,000", currency="EUR", quantity="20500"),
        make_bill_of_lading(blNumber=""),
    ]
    outcome = run_cross_check(lc, documents, as_of=AS_OF)
    criticals = [item for item in outcome.results if item.severity is Severity.RED]
    assert [item.field_name for item in criticals] == ["Currency", "Total Amount"]

    notice = build_correction_notice(lc, outcome.results)
    assert notice.email.startswith("Subject: URGENT")
    assert "Dear Kenya Coffee Exporters Ltd," in notice.email
    assert "LC reference LC-2026-0042" in notice.email
    assert "1. Commercial Invoice: Currency" in notice.email
    assert "2. Commercial Invoice: Total Amount" in notice.email
    assert "3." not in notice.email
    # AMBER items (tolerated quantity, empty B/L number) stay out of the notice.
    assert "Quantity" not in notice.email
    assert "B/L Number" not in notice.whatsapp

    assert notice.whatsapp.startswith("*URGENT: Document Discrepancies*")
    assert "LC Ref: LC-2026-0042" in notice.whatsapp
    assert "   Shows: EUR" in notice.whatsapp


def test_notice_without_reference_uses_placeholder():
    lc = make_lc(lc_reference="")
    outcome = run_cross_check(lc, [make_invoice(currency="GBP")], as_of=AS_OF)
    notice = build_correction_notice(lc, outcome.results)
    assert "LC Ref: (not specified)" in notice.whatsapp
