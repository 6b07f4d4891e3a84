"""Command-line interface for tradeverify."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import ValidationError

from ..lc.corrections import build_correction_notice
from ..lc.engine import UnsupportedDocumentTypeError, run_cross_check
from ..lc.models import LcTerms, TradeDocument
from ..observability import new_run_id, run_scope
from ..proofs.audit_chain import AuditChain
from ..proofs.engine import compute_check_hash, record_lc_check
from ..proofs.store import EventStore, JsonlEventStore
from ..readiness.models import ReadinessInputs
from ..readiness.scorer import compute_readiness_score
from ..readiness.status import evaluate_compliance_readiness

BACKENDS = ("jsonl", "sql")


def _emit(payload: Dict[str, Any]) -> None:
    click.echo(json.dumps(payload, indent=2))


def _load_json(handle) -> Any:
    try:
        return json.load(handle)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"not valid JSON: {exc}", param_hint="PAYLOAD") from exc


def _open_store(backend: str, store_path: Optional[Path]) -> EventStore:
    if backend == "sql":
        from ..db.event_store import SqlEventStore
        from ..db.session import init_db

        init_db()
        return SqlEventStore()
    return JsonlEventStore(store_path)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log at DEBUG level.")
def cli(verbose: bool) -> None:
    """tradeverify command suite."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(message)s",
    )
    new_run_id()


@cli.group()
def lc() -> None:
    """Letter-of-credit document examination."""


@lc.command("check")
@click.argument("payload", type=click.File("r"))
@click.option(
    "--as-of",
    "as_of",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Day the presentation deadline is evaluated against (default: today, UTC).",
)
@click.option("--trade-id", default=None, help="Record the check on this trade's audit chain.")
@click.option(
    "--store-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSONL event log (default: $TV_DATA_ROOT/data/trade_events.jsonl).",
)
def lc_check(payload, as_of, trade_id: Optional[str], store_path: Optional[Path]) -> None:
    """Cross-check the documents in PAYLOAD against its LC terms."""

    raw = _load_json(payload)
    if not isinstance(raw, dict):
        raise click.BadParameter("expected an object with lcFields and documents", param_hint="PAYLOAD")
    try:
        terms = LcTerms.model_validate(raw.get("lcFields") or {})
        documents = [TradeDocument.model_validate(item) for item in raw.get("documents") or []]
    except ValidationError as exc:
        raise click.ClickException(f"invalid check payload:\n{exc}") from exc

    check_day: Optional[date] = as_of.date() if as_of else None
    try:
        if trade_id:
            record = record_lc_check(
                trade_id=trade_id,
                lc=terms,
                documents=documents,
                chain=AuditChain(JsonlEventStore(store_path)),
                as_of=check_day,
            )
            _emit(record.to_dict())
            return

        outcome = run_cross_check(terms, documents, as_of=check_day)
    except UnsupportedDocumentTypeError as exc:
        raise click.ClickException(str(exc)) from exc

    stamped_at = datetime.now(timezone.utc).isoformat()
    notice = build_correction_notice(terms, outcome.results)
    _emit(
        {
            **outcome.to_dict(),
            "integrityHash": compute_check_hash(terms, documents, outcome.results, stamped_at),
            "timestamp": stamped_at,
            "correctionEmail": notice.email,
            "correctionWhatsApp": notice.whatsapp,
        }
    )


@cli.group()
def readiness() -> None:
    """Trade readiness scoring."""


@readiness.command("score")
@click.argument("payload", type=click.File("r"))
def readiness_score(payload) -> None:
    """Score the readiness inputs in PAYLOAD."""

    try:
        inputs = ReadinessInputs.model_validate(_load_json(payload))
    except ValidationError as exc:
        raise click.ClickException(f"invalid readiness payload:\n{exc}") from exc

    result = compute_readiness_score(inputs)
    status = evaluate_compliance_readiness(inputs)
    _emit({"readiness": result.model_dump(mode="json"), "status": status.model_dump(mode="json")})


@cli.group()
@click.option("--backend", type=click.Choice(BACKENDS), default="jsonl", show_default=True)
@click.option(
    "--store-path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSONL event log (jsonl backend only).",
)
@click.pass_context
def audit(ctx: click.Context, backend: str, store_path: Optional[Path]) -> None:
    """Hash-chained audit trail per trade."""

    ctx.obj = AuditChain(_open_store(backend, store_path))


@audit.command("append")
@click.argument("trade_id")
@click.argument("event_type")
@click.argument("payload", type=click.File("r"))
@click.option("--session-id", default=None)
@click.pass_obj
def audit_append(chain: AuditChain, trade_id: str, event_type: str, payload, session_id: Optional[str]) -> None:
    """Append the JSON object in PAYLOAD to TRADE_ID's chain."""

    try:
        with run_scope(session_id):
            event = chain.append(trade_id, event_type, _load_json(payload), session_id=session_id)
    except (ValueError, ValidationError) as exc:
        raise click.ClickException(str(exc)) from exc
    _emit(event.serializable_dict())


@audit.command("show")
@click.argument("trade_id")
@click.pass_obj
def audit_show(chain: AuditChain, trade_id: str) -> None:
    """Print TRADE_ID's events in creation order."""

    events = chain.get_chain(trade_id)
    _emit({"tradeId": trade_id, "events": [event.serializable_dict() for event in events]})


@audit.command("verify")
@click.argument("trade_id")
@click.pass_obj
def audit_verify(chain: AuditChain, trade_id: str) -> None:
    """Verify TRADE_ID's chain; exits with status 1 when it is broken."""

    report = chain.verify(trade_id)
    _emit({"tradeId": trade_id, **report.to_dict()})
    if not report.valid:
        raise SystemExit(1)


@cli.group()
def db() -> None:
    """Relational audit backend ($TV_DATABASE_URL)."""


@db.command("init")
def db_init() -> None:
    """Create the audit tables."""

    from ..db.session import database_url, init_db

    init_db()
    click.echo(f"Initialised {database_url()}")


@db.command("migrate")
@click.argument("source", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--mode", type=click.Choice(["backfill", "verify"]), default="backfill", show_default=True)
@click.option("--trade-id", "trade_ids", multiple=True, help="Limit to these trades (repeatable).")
def db_migrate(source: Path, mode: str, trade_ids) -> None:
    """Copy or verify the audit chains of the JSONL log SOURCE in the database."""

    from ..db.event_store import SqlEventStore
    from ..db.migrate import backfill_events, verify_migration
    from ..db.session import get_standalone_session, init_db

    init_db()
    log_store = JsonlEventStore(source)
    if mode == "backfill":
        with get_standalone_session() as session:
            migrated = backfill_events(session, log_store, trade_ids or None)
        _emit({"mode": mode, "migrated": migrated})
        return

    results = verify_migration(log_store, SqlEventStore(), trade_ids or None)
    _emit({"mode": mode, "trades": results})
    if not all(entry["match"] and entry["valid"] for entry in results.values()):
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
