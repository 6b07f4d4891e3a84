"""Canonical JSON serialization and hashing utilities.

Every hash stored in an audit chain is computed over the output of one of the
canonicalizers registered here.  A registered canonicalizer must never
change: historical chains are re-verified with the exact function their
events were hashed with.  New serialization rules get a new version key.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from hashlib import sha256
from typing import Any, Callable, Dict, Optional

GENESIS = "genesis"
CANONICAL_VERSION = "1"


def _default(value: Any):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    raise TypeError(f"Object of type {type(value)} is not JSON serializable")


def canonical_json(obj: Any) -> str:
    """Serialize *obj* to canonical JSON suitable for hashing."""

    return json.dumps(obj, sort_keys=True, separators=(",", ":"), default=_default)


CANONICALIZERS: Dict[str, Callable[[Any], str]] = {
    "1": canonical_json,
}


def canonicalize(obj: Any, version: str = CANONICAL_VERSION) -> str:
    try:
        serializer = CANONICALIZERS[version]
    except KeyError:
        raise ValueError(f"Unknown canonicalization version: {version!r}") from None
    return serializer(obj)


def sha256_hex(data: str) -> str:
    return sha256(data.encode("utf-8")).hexdigest()


def compute_payload_hash(payload: Any) -> str:
    """Return a SHA-256 hex digest of the canonical payload."""

    return sha256_hex(canonical_json(payload))


def compute_event_hash(
    event_data: Dict[str, Any],
    previous_hash: Optional[str],
    version: str = CANONICAL_VERSION,
) -> str:
    """SHA-256 of the canonical event payload chained to its predecessor."""

    return sha256_hex(canonicalize(event_data, version) + (previous_hash or GENESIS))
