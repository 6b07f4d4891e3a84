from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Severity(str, Enum):
    """Outcome of a single field comparison."""

    GREEN = "GREEN"
    AMBER = "AMBER"
    RED = "RED"


class CheckVerdict(str, Enum):
    COMPLIANT = "COMPLIANT"
    COMPLIANT_WITH_NOTES = "COMPLIANT_WITH_NOTES"
    DISCREPANCIES_FOUND = "DISCREPANCIES_FOUND"


class DocumentType(str, Enum):
    COMMERCIAL_INVOICE = "commercial_invoice"
    BILL_OF_LADING = "bill_of_lading"
    CERTIFICATE_OF_ORIGIN = "certificate_of_origin"
    PHYTOSANITARY_CERTIFICATE = "phytosanitary_certificate"
    PACKING_LIST = "packing_list"
    OTHER = "other"

    @property
    def label(self) -> str:
        return DOCUMENT_TYPE_LABELS[self]


DOCUMENT_TYPE_LABELS: Dict[DocumentType, str] = {
    DocumentType.COMMERCIAL_INVOICE: "Commercial Invoice",
    DocumentType.BILL_OF_LADING: "Bill of Lading",
    DocumentType.CERTIFICATE_OF_ORIGIN: "Certificate of Origin",
    DocumentType.PHYTOSANITARY_CERTIFICATE: "Phytosanitary Certificate",
    DocumentType.PACKING_LIST: "Packing List",
    DocumentType.OTHER: "Other Document",
}

LC_TERMS_LABEL = "LC Terms"


class _WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python; both accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        allow_inf_nan=False,
    )

    def wire_dict(self) -> Dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)


class LcTerms(_WireModel):
    """Letter of credit terms as declared by the buyer's bank."""

    beneficiary_name: str = ""
    applicant_name: str = ""
    goods_description: str = ""
    hs_code: str = ""
    quantity: float = 0.0
    quantity_unit: str = ""
    unit_price: float = 0.0
    currency: str = ""
    total_amount: float = Field(default=0.0, ge=0.0)
    country_of_origin: str = ""
    port_of_loading: str = ""
    port_of_discharge: str = ""
    latest_shipment_date: str = ""
    lc_expiry_date: str = ""
    incoterms: str = ""
    partial_shipments_allowed: bool = False
    transhipment_allowed: bool = False
    lc_reference: str = ""
    issuing_bank: str = ""
    advising_bank: str = ""
    issuing_bank_swift: str = ""
    advising_bank_swift: str = ""


class TradeDocument(_WireModel):
    """One presented document: a type tag plus free-form string fields."""

    document_type: DocumentType
    fields: Dict[str, str] = Field(default_factory=dict)

    def value_of(self, name: str) -> str:
        return self.fields.get(name) or ""


class CheckResultItem(_WireModel):
    field_name: str
    lc_value: str
    document_value: str
    document_type: str
    severity: Severity
    ucp_rule: str
    explanation: str


class CheckSummary(_WireModel):
    total_checks: int
    matches: int
    warnings: int
    criticals: int
    pass_rate: int
    verdict: CheckVerdict

    @classmethod
    def from_results(cls, results: Sequence[CheckResultItem]) -> "CheckSummary":
        matches = sum(1 for item in results if item.severity is Severity.GREEN)
        warnings = sum(1 for item in results if item.severity is Severity.AMBER)
        criticals = sum(1 for item in results if item.severity is Severity.RED)
        total = len(results)
        # Half rounds up, never to even.
        pass_rate = (matches * 200 + total) // (total * 2) if total else 0

        if criticals:
            verdict = CheckVerdict.DISCREPANCIES_FOUND
        elif warnings:
            verdict = CheckVerdict.COMPLIANT_WITH_NOTES
        else:
            verdict = CheckVerdict.COMPLIANT

        return cls(
            total_checks=total,
            matches=matches,
            warnings=warnings,
            criticals=criticals,
            pass_rate=pass_rate,
            verdict=verdict,
        )


@dataclass(frozen=True)
class CrossCheckResult:
    results: List[CheckResultItem]
    summary: CheckSummary

    def to_dict(self) -> Dict[str, object]:
        return {
            "results": [item.wire_dict() for item in self.results],
            "summary": self.summary.wire_dict(),
        }


ComparisonOutcome = tuple[Severity, str]
