"""Letter-of-credit document examination."""

from .comparators import compare_amount, compare_names, compare_quantity, parse_date, parse_number
from .corrections import CorrectionNotice, build_correction_notice
from .engine import UnsupportedDocumentTypeError, run_cross_check
from .models import (
    CheckResultItem,
    CheckSummary,
    CheckVerdict,
    CrossCheckResult,
    DocumentType,
    LcTerms,
    Severity,
    TradeDocument,
)
from .normalizer import normalize_name

__all__ = [
    "CheckResultItem",
    "CheckSummary",
    "CheckVerdict",
    "CorrectionNotice",
    "CrossCheckResult",
    "DocumentType",
    "LcTerms",
    "Severity",
    "TradeDocument",
    "UnsupportedDocumentTypeError",
    "build_correction_notice",
    "compare_amount",
    "compare_names",
    "compare_quantity",
    "normalize_name",
    "parse_date",
    "parse_number",
    "run_cross_check",
]
