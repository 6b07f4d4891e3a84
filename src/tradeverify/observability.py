"""Run-scoped log correlation for tradeverify.

Every ``log_event`` record carries the active run id in its ``payload``.  The
CLI starts a fresh run per invocation; a caller acting for a known session
narrows it with ``run_scope`` so the audit log lines of that session can be
joined back to its events.
"""

from __future__ import annotations

import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

logger = logging.getLogger(__name__)

_run_id_ctx: ContextVar[Optional[str]] = ContextVar("run_id", default=None)


def new_run_id() -> str:
    """Start a new run for the current context and return its id."""

    value = str(uuid.uuid4())
    _run_id_ctx.set(value)
    return value


def current_run_id() -> Optional[str]:
    return _run_id_ctx.get()


@contextmanager
def run_scope(run_id: Optional[str]) -> Iterator[Optional[str]]:
    """Use *run_id* inside the block, restoring the outer id afterwards.

    ``None`` leaves the current run id in place.
    """

    if run_id is None:
        yield current_run_id()
        return
    token = _run_id_ctx.set(run_id)
    try:
        yield run_id
    finally:
        _run_id_ctx.reset(token)


def log_event(message: str, **extra: object) -> None:
    payload = {"run_id": current_run_id(), **extra}
    logger.info(message, extra={"payload": payload})
