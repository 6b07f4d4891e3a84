from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tradeverify.proofs.canonical import CANONICAL_VERSION

PREVIOUS_HASH_MISMATCH = "previous_hash_mismatch"
EVENT_HASH_MISMATCH = "event_hash_mismatch"
INVALID_EVENT_RECORD = "invalid_event_record"


def _new_event_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEvent(BaseModel):
    """One immutable entry in a trade's hash-chained audit log."""

    event_id: str = Field(default_factory=_new_event_id)
    trade_id: str
    session_id: Optional[str] = None
    event_type: str
    event_data: Dict[str, Any]
    previous_hash: Optional[str] = None
    event_hash: str
    canonical_version: str = CANONICAL_VERSION
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("trade_id", "event_type")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be a non-empty string")
        return value

    def serializable_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")


@dataclass(frozen=True)
class ChainVerification:
    """Outcome of walking a trade's chain; never raised, always returned."""

    valid: bool
    total_events: int
    broken_at: Optional[int] = None
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"valid": self.valid, "totalEvents": self.total_events}
        if not self.valid:
            payload["brokenAt"] = self.broken_at
            payload["reason"] = self.reason
        return payload


@dataclass(frozen=True)
class InvalidEventRecord:
    """A stored line attributed to a trade that no longer parses as an event.

    ``position`` is the line number in a JSONL log or the row sequence in SQL.
    The record keeps its place in the chain so verification can report it.
    """

    trade_id: str
    position: int
    error: str
