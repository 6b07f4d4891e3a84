"""Field comparators for LC document examination.

Each comparator is a pure function over already-extracted string or numeric
values.  None of them raise: values that cannot be parsed are treated as
absent and the caller decides whether to skip the check.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from tradeverify.lc.models import CheckResultItem, ComparisonOutcome, Severity
from tradeverify.lc.normalizer import normalize_name

ART_14D = "UCP 600 Art. 14(d)"
ART_14C = "UCP 600 Art. 14(c)"
ART_18A = "UCP 600 Art. 18(a)"
ART_18C = "UCP 600 Art. 18(c)"
ART_20A = "UCP 600 Art. 20(a)(ii)"
ISBP_745 = "ISBP 745"
GENERAL = "General"

QUANTITY_TOLERANCE = Decimal("0.05")
PRESENTATION_PERIOD_DAYS = 21
GOODS_OVERLAP_THRESHOLD = 0.5

CHED_PATTERN = re.compile(r"^GBCHD\d{4}\.\d{7}$")
CHED_FORMAT_HINT = "GBCHDYYYY.NNNNNNN"

NOT_SPECIFIED = "Not specified"

_NUMBER_PREFIX = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")
_DATE_FORMATS = (
    "%Y-%m-%d",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
)


# ---------------------------------------------------------------------------
# Value parsing
# ---------------------------------------------------------------------------

def parse_number(value: str | None) -> float:
    """Read the leading number of *value*, ignoring commas and whitespace.

    "52,400.00 USD" -> 52400.0; empty or unparseable input -> 0.0.
    """

    if not value:
        return 0.0
    cleaned = re.sub(r"[,\s]", "", value)
    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return 0.0
    try:
        number = float(match.group(0))
    except ValueError:
        return 0.0
    return number if math.isfinite(number) else 0.0


def parse_date(value: str | None) -> date | None:
    """Parse a calendar date, returning None for anything unparseable."""

    if not value or not value.strip():
        return None
    raw = value.strip()
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(raw, fmt).date()
        except ValueError:
            continue
    return None


def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _to_decimal(value: float) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal(0)


def _item(
    field_name: str,
    lc_value: str,
    document_value: str,
    document_type: str,
    severity: Severity,
    ucp_rule: str,
    explanation: str,
) -> CheckResultItem:
    return CheckResultItem(
        field_name=field_name,
        lc_value=lc_value,
        document_value=document_value,
        document_type=document_type,
        severity=severity,
        ucp_rule=ucp_rule,
        explanation=explanation,
    )


# ---------------------------------------------------------------------------
# Names
# ---------------------------------------------------------------------------

def compare_names(reference: str, candidate: str) -> ComparisonOutcome:
    """Compare a document party name against the LC beneficiary.

    Containment is only ever a warning: a missing legal suffix and a
    different company can look alike, so a human has to look.
    """

    reference = reference or ""
    if not candidate or not candidate.strip():
        return (
            Severity.RED,
            "Document field empty. Bank will reject: UCP 600 Art. 14(d) requires "
            "data in a document to be consistent with the credit.",
        )
    if reference.strip() == candidate.strip():
        return Severity.GREEN, "Exact match with LC terms."
    if reference.strip().lower() == candidate.strip().lower():
        return Severity.GREEN, "Case-insensitive match, acceptable under UCP 600 Art. 14(d)."

    norm_reference = normalize_name(reference)
    norm_candidate = normalize_name(candidate)
    if norm_reference == norm_candidate:
        return (
            Severity.GREEN,
            "Match after normalizing abbreviations (Ltd/Limited, &/and, SARL, etc.).",
        )
    if norm_reference in norm_candidate or norm_candidate in norm_reference:
        return (
            Severity.AMBER,
            "Partial match, review. Names are similar but not identical and the bank "
            "may query the presentation under UCP 600 Art. 14(d).",
        )
    return (
        Severity.RED,
        "Name mismatch, likely rejection. The name on this document does not match "
        "the LC beneficiary (UCP 600 Art. 14(d)).",
    )


def compare_party_name(
    field_name: str,
    lc_name: str,
    doc_name: str,
    document_type: str,
) -> CheckResultItem:
    severity, explanation = compare_names(lc_name, doc_name)
    return _item(
        field_name,
        lc_name,
        doc_name if doc_name and doc_name.strip() else "(empty)",
        document_type,
        severity,
        ART_14D,
        explanation,
    )


# ---------------------------------------------------------------------------
# Money and quantity
# ---------------------------------------------------------------------------

def compare_amount(lc_amount: float, doc_amount: float, document_type: str) -> CheckResultItem:
    """A drawing may never exceed the credit amount, so there is no AMBER band."""

    lc_value = format_number(lc_amount)
    if doc_amount == 0 or not math.isfinite(doc_amount):
        return _item(
            "Total Amount",
            lc_value,
            NOT_SPECIFIED,
            document_type,
            Severity.RED,
            ART_18A,
            "Invoice amount is missing or zero, cannot verify against the LC amount.",
        )
    doc_value = format_number(doc_amount)
    if not math.isfinite(lc_amount) or lc_amount <= 0:
        return _item(
            "Total Amount",
            "(not declared)",
            doc_value,
            document_type,
            Severity.AMBER,
            ART_18A,
            "LC amount is not declared, cannot verify the invoice amount against the credit.",
        )
    if doc_amount > lc_amount:
        return _item(
            "Total Amount",
            lc_value,
            doc_value,
            document_type,
            Severity.RED,
            ART_18A,
            f"Invoice amount ({doc_value}) exceeds LC amount ({lc_value}). A credit amount "
            "may never be exceeded; the bank will reject.",
        )
    return _item(
        "Total Amount",
        lc_value,
        doc_value,
        document_type,
        Severity.GREEN,
        ART_18A,
        "Invoice amount does not exceed LC amount.",
    )


def compare_quantity(lc_qty: float, doc_qty: float, document_type: str) -> CheckResultItem:
    """Compare quantities with the ISBP 745 five percent band (inclusive)."""

    lc_value = format_number(lc_qty)
    if doc_qty == 0 or not math.isfinite(doc_qty):
        return _item(
            "Quantity",
            lc_value,
            NOT_SPECIFIED,
            document_type,
            Severity.AMBER,
            ART_14D,
            "Quantity not specified on this document.",
        )
    doc_value = format_number(doc_qty)
    if not math.isfinite(lc_qty) or lc_qty <= 0:
        return _item(
            "Quantity",
            "(not declared)",
            doc_value,
            document_type,
            Severity.AMBER,
            ART_14D,
            "LC quantity is not declared, cannot verify the document quantity.",
        )

    lc_dec = _to_decimal(lc_qty)
    diff = abs(_to_decimal(doc_qty) - lc_dec) / lc_dec
    pct = f"{float(diff) * 100:.1f}%"
    if diff == 0:
        return _item(
            "Quantity",
            lc_value,
            doc_value,
            document_type,
            Severity.GREEN,
            ART_14D,
            "Quantity matches LC terms exactly.",
        )
    if diff <= QUANTITY_TOLERANCE:
        return _item(
            "Quantity",
            lc_value,
            doc_value,
            document_type,
            Severity.AMBER,
            ISBP_745,
            f"Quantity difference is {pct}, within 5% tolerance. Verify the LC tolerance "
            "clause; ISBP 745 tolerance may apply for bulk goods.",
        )
    return _item(
        "Quantity",
        lc_value,
        doc_value,
        document_type,
        Severity.RED,
        ART_14D,
        f"Quantity difference is {pct}, exceeds tolerance of 5%. Documents are "
        "inconsistent; the bank will reject.",
    )


def compare_currency(lc_currency: str, doc_currency: str, document_type: str) -> Optional[CheckResultItem]:
    lc_value = (lc_currency or "").strip().upper()
    doc_value = (doc_currency or "").strip().upper()
    if not doc_value:
        return None
    if doc_value != lc_value:
        return _item(
            "Currency",
            lc_value,
            doc_value,
            document_type,
            Severity.RED,
            ART_18A,
            f"Invoice currency ({doc_value}) does not match LC currency ({lc_value}). "
            "Bank will reject.",
        )
    return _item(
        "Currency",
        lc_value,
        doc_value,
        document_type,
        Severity.GREEN,
        ART_18A,
        "Currency matches LC terms.",
    )


# ---------------------------------------------------------------------------
# Free text and coded references
# ---------------------------------------------------------------------------

def _significant_words(text: str) -> list[str]:
    return [word for word in text.split() if len(word) > 2]


def goods_word_overlap(lc_description: str, doc_description: str) -> float:
    """Share of the LC's significant words that also appear in the document."""

    lc_words = _significant_words(lc_description.strip().lower())
    if not lc_words:
        return 0.0
    doc_words = set(_significant_words(doc_description.strip().lower()))
    overlap = sum(1 for word in lc_words if word in doc_words)
    return overlap / len(lc_words)


def compare_goods_description(
    lc_description: str,
    doc_description: str,
    document_type: str,
) -> Optional[CheckResultItem]:
    doc_raw = (doc_description or "").strip()
    if not doc_raw:
        return None
    lc_goods = (lc_description or "").strip().lower()
    doc_goods = doc_raw.lower()

    if lc_goods == doc_goods:
        severity = Severity.GREEN
        explanation = "Goods description on invoice corresponds exactly with LC."
    elif lc_goods in doc_goods or doc_goods in lc_goods:
        severity = Severity.GREEN
        explanation = "Goods description on invoice substantially corresponds with LC terms."
    elif goods_word_overlap(lc_goods, doc_goods) >= GOODS_OVERLAP_THRESHOLD:
        severity = Severity.AMBER
        explanation = (
            "Goods description partially matches LC terms. The invoice must correspond "
            "with the credit; review wording carefully."
        )
    else:
        severity = Severity.RED
        explanation = (
            "Goods description on invoice does not correspond with LC terms. Bank will "
            "reject: Art. 18(c) requires the invoice description to correspond with the credit."
        )
    return _item(
        "Goods Description",
        lc_description,
        doc_raw,
        document_type,
        severity,
        ART_18C,
        explanation,
    )


def compare_incoterms(lc_incoterms: str, doc_incoterms: str, document_type: str) -> Optional[CheckResultItem]:
    doc_value = (doc_incoterms or "").strip().upper()
    if not doc_value:
        return None
    if doc_value != (lc_incoterms or "").strip().upper():
        return _item(
            "Incoterms",
            lc_incoterms,
            doc_incoterms,
            document_type,
            Severity.RED,
            ART_18C,
            f"Invoice Incoterms ({doc_incoterms}) do not match LC Incoterms ({lc_incoterms}). "
            "Critical discrepancy; the bank will reject.",
        )
    return _item(
        "Incoterms",
        lc_incoterms,
        doc_incoterms,
        document_type,
        Severity.GREEN,
        ART_18C,
        "Incoterms on invoice match LC terms.",
    )


def compare_port(
    field_name: str,
    lc_port: str,
    doc_port: str,
    document_type: str,
) -> Optional[CheckResultItem]:
    doc_norm = (doc_port or "").strip().lower()
    if not doc_norm:
        return None
    lc_norm = (lc_port or "").strip().lower()
    label = field_name.lower()

    if doc_norm == lc_norm:
        severity = Severity.GREEN
        explanation = f"{field_name} matches LC terms."
    elif doc_norm in lc_norm or lc_norm in doc_norm:
        severity = Severity.AMBER
        explanation = f"{field_name} partially matches. Verify the {label} is consistent with LC terms."
    else:
        severity = Severity.RED
        explanation = f"{field_name} on B/L does not match LC. Bank will reject."
    return _item(field_name, lc_port, doc_port, document_type, severity, ART_20A, explanation)


def compare_origin(lc_origin: str, doc_origin: str, document_type: str) -> Optional[CheckResultItem]:
    doc_norm = (doc_origin or "").strip().lower()
    if not doc_norm:
        return None
    lc_norm = (lc_origin or "").strip().lower()
    if doc_norm == lc_norm or lc_norm in doc_norm or doc_norm in lc_norm:
        return _item(
            "Country of Origin",
            lc_origin,
            doc_origin,
            document_type,
            Severity.GREEN,
            ART_14D,
            "Country of origin on the certificate matches LC.",
        )
    return _item(
        "Country of Origin",
        lc_origin,
        doc_origin,
        document_type,
        Severity.RED,
        ART_14D,
        "Country of origin on the certificate does not match LC. Bank will reject.",
    )


def check_bl_number(bl_number: str, document_type: str) -> Optional[CheckResultItem]:
    if (bl_number or "").strip():
        return None
    return _item(
        "B/L Number",
        "Expected",
        "(empty)",
        document_type,
        Severity.AMBER,
        GENERAL,
        "B/L number is empty. Ensure this reference is populated for document tracking.",
    )


def check_ched_reference(reference: str, document_type: str) -> Optional[CheckResultItem]:
    """Format check only: the reference may be optional for the corridor."""

    if not reference:
        return None
    if CHED_PATTERN.match(reference):
        return _item(
            "CHED Reference",
            "Valid format",
            reference,
            document_type,
            Severity.GREEN,
            GENERAL,
            "CHED reference format is valid.",
        )
    return _item(
        "CHED Reference",
        CHED_FORMAT_HINT,
        reference,
        document_type,
        Severity.AMBER,
        GENERAL,
        f"CHED reference format appears incorrect. Expected: {CHED_FORMAT_HINT} "
        "(e.g. GBCHD2026.0012345).",
    )


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

def compare_shipment_date(
    latest_shipment: date,
    shipped_on_board: date,
    *,
    lc_value: str,
    document_value: str,
    document_type: str,
) -> CheckResultItem:
    if shipped_on_board <= latest_shipment:
        return _item(
            "Shipment Date",
            lc_value,
            document_value,
            document_type,
            Severity.GREEN,
            ART_14C,
            "B/L shipped date is on or before LC latest shipment date.",
        )
    return _item(
        "Shipment Date",
        lc_value,
        document_value,
        document_type,
        Severity.RED,
        ART_14C,
        f"B/L shipped date ({document_value}) is after LC latest shipment date "
        f"({lc_value}). Late shipment; the bank will reject.",
    )


def check_presentation_deadline(
    shipped_on_board: date,
    as_of: date,
    document_type: str,
) -> CheckResultItem:
    elapsed = (as_of - shipped_on_board).days
    lc_value = f"Within {PRESENTATION_PERIOD_DAYS} days of shipment"
    doc_value = f"{elapsed} days since shipment"
    if elapsed > PRESENTATION_PERIOD_DAYS:
        return _item(
            "Presentation Deadline",
            lc_value,
            doc_value,
            document_type,
            Severity.RED,
            ART_14C,
            f"Presentation deadline exceeded. {elapsed} days have passed since the B/L date; "
            f"UCP 600 Art. 14(c) requires presentation within {PRESENTATION_PERIOD_DAYS} "
            "calendar days of shipment.",
        )
    return _item(
        "Presentation Deadline",
        lc_value,
        doc_value,
        document_type,
        Severity.GREEN,
        ART_14C,
        f"{elapsed} days since shipment, within the {PRESENTATION_PERIOD_DAYS}-day "
        "presentation period.",
    )
