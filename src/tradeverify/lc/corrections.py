"""Supplier-facing amendment requests built from critical discrepancies."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence

from tradeverify.lc.models import CheckResultItem, LcTerms, Severity

UNSPECIFIED_REFERENCE = "(not specified)"


@dataclass(frozen=True)
class CorrectionNotice:
    email: str
    whatsapp: str

    @property
    def is_empty(self) -> bool:
        return not self.email and not self.whatsapp

    def to_dict(self) -> Dict[str, str]:
        return {"email": self.email, "whatsapp": self.whatsapp}


def _email(lc: LcTerms, reference: str, criticals: Sequence[CheckResultItem]) -> str:
    lines: List[str] = [
        "Subject: URGENT: Document Discrepancies Found, Please Amend",
        "",
        f"Dear {lc.beneficiary_name},",
        "",
        f"We have reviewed the documents submitted against LC reference {reference} and found "
        "the following critical discrepancies that will cause the bank to reject the presentation:",
        "",
    ]
    for index, item in enumerate(criticals, start=1):
        lines.extend(
            [
                f"{index}. {item.document_type}: {item.field_name}",
                f"   Your document shows: {item.document_value}",
                f"   The LC requires: {item.lc_value}",
                f"   Rule: {item.ucp_rule}",
                "   Please amend and reissue.",
                "",
            ]
        )
    lines.extend(
        [
            "Please correct these discrepancies and resubmit the amended documents as soon as possible.",
            "",
            "Best regards",
        ]
    )
    return "\n".join(lines)


def _whatsapp(reference: str, criticals: Sequence[CheckResultItem]) -> str:
    lines: List[str] = ["*URGENT: Document Discrepancies*", f"LC Ref: {reference}", ""]
    for index, item in enumerate(criticals, start=1):
        lines.extend(
            [
                f"{index}. *{item.document_type}*: {item.field_name}",
                f"   Shows: {item.document_value}",
                f"   LC requires: {item.lc_value}",
                "   _Please amend and reissue._",
            ]
        )
    lines.extend(["", "Please correct and resend ASAP."])
    return "\n".join(lines)


def build_correction_notice(lc: LcTerms, results: Sequence[CheckResultItem]) -> CorrectionNotice:
    """Return email and chat texts listing every RED item, or an empty notice."""

    criticals = [item for item in results if item.severity is Severity.RED]
    if not criticals:
        return CorrectionNotice(email="", whatsapp="")
    reference = lc.lc_reference.strip() or UNSPECIFIED_REFERENCE
    return CorrectionNotice(email=_email(lc, reference, criticals), whatsapp=_whatsapp(reference, criticals))
