"""Audit chain storage and hashing utilities."""

from .audit_chain import AuditChain, verify_audit_chain
from .canonical import canonical_json, canonicalize, compute_event_hash, compute_payload_hash
from .engine import LcCheckRecord, compute_check_hash, record_lc_check
from .models import AuditEvent, ChainVerification, InvalidEventRecord
from .store import EventStore, InMemoryEventStore, JsonlEventStore, get_default_store

__all__ = [
    "AuditChain",
    "AuditEvent",
    "ChainVerification",
    "EventStore",
    "InMemoryEventStore",
    "InvalidEventRecord",
    "JsonlEventStore",
    "LcCheckRecord",
    "canonical_json",
    "canonicalize",
    "compute_check_hash",
    "compute_event_hash",
    "compute_payload_hash",
    "get_default_store",
    "record_lc_check",
    "verify_audit_chain",
]
