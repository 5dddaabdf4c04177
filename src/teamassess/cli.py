"""Typer CLI entrypoint for the assessment core."""

from __future__ import annotations

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError

from .config import ConfigManager
from .container import create_container
from .logging import configure_logging
from .pipeline import AuditLogger, TestBundle, json_default
from .schemas import CalendarItem, Membership, RosterAssignment, Test
from .schemas.config import load_config

app = typer.Typer(help="Assessment grading and visibility CLI.")


def _load_settings(config: Optional[Path]) -> dict[str, Any]:
    if not config:
        return {}
    loaded = ConfigManager.read(config)
    try:
        return load_config(loaded).to_settings()
    except ValidationError as exc:
        raise typer.BadParameter(f"Invalid config file: {exc}", param_name="config") from exc


def _read_json(path: Path, param_name: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"Invalid JSON: {exc}", param_name=param_name) from exc


def _load_bundle(path: Path) -> TestBundle:
    try:
        return TestBundle.model_validate(_read_json(path, "test"))
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="test") from exc


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, ensure_ascii=False, indent=2, default=json_default))


@app.command()
def grade(
    test: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Test bundle JSON path."),
    attempts: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Attempts JSONL path."),
    output: Path = typer.Option(
        ...,
        exists=False,
        file_okay=True,
        dir_okay=False,
        resolve_path=True,
        help="Output JSON path.",
    ),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
    log_level: str = typer.Option("INFO", help="Log level for structured logging."),
    audit_log: Optional[Path] = typer.Option(None, dir_okay=False, help="Audit log output (JSONL)."),
) -> None:
    """Auto-grade attempts and write graded results."""
    settings = _load_settings(config)
    configure_logging(log_level)

    container = create_container(settings=settings)
    pipeline = container.pipeline()
    audit_logger = AuditLogger(audit_log) if audit_log else None

    results = pipeline.run(
        test_path=test,
        attempts_path=attempts,
        output_path=output,
        audit_logger=audit_logger,
    )
    typer.echo(f"Graded {len(results)} attempts. Results saved to {output}.")


@app.command()
def release(
    test: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Test JSON path."),
    attempt: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Graded attempt JSON path."),
    admin: bool = typer.Option(False, "--admin", help="Render for an admin viewer."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Print the attempt as the viewer is allowed to see it."""
    configure_logging(log_level)
    raw_test = _read_json(test, "test")
    if isinstance(raw_test, dict) and "test" in raw_test:
        raw_test = raw_test["test"]
    try:
        test_model = Test.model_validate(raw_test)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc), param_name="test") from exc
    raw_attempt = _read_json(attempt, "attempt")
    if not isinstance(raw_attempt, dict):
        raise typer.BadParameter("Attempt must be a JSON object", param_name="attempt")

    policy = create_container().release_policy()
    _echo_json(policy.filter_attempt(raw_attempt, test_model, is_admin=admin))


@app.command()
def access(
    membership: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Membership JSON path."),
    items: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Calendar items JSON array path."),
    roster: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="Roster assignments JSON array path."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Print the ids of calendar items visible to a membership."""
    configure_logging(log_level)
    try:
        member = Membership.model_validate(_read_json(membership, "membership"))
        calendar = [CalendarItem.model_validate(i) for i in _read_json(items, "items")]
        entries = [RosterAssignment.model_validate(r) for r in _read_json(roster, "roster")] if roster else []
    except (ValidationError, TypeError) as exc:
        raise typer.BadParameter(str(exc)) from exc

    engine = create_container().access_engine()
    visible = engine.visible_calendar_items(calendar, member, entries)
    _echo_json([item.id for item in visible])


@app.command()
def available(
    test: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Test bundle JSON path."),
    attempts_used: Optional[int] = typer.Option(None, min=0, help="Attempts already used by the member."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Print whether the test accepts submissions right now."""
    configure_logging(log_level)
    bundle = _load_bundle(test)
    window = create_container().availability()
    result = window.check(bundle.test, attempts_used=attempts_used)
    _echo_json({**asdict(result), "late": window.is_late(bundle.test)})


@app.command()
def render(
    test: Path = typer.Option(..., exists=True, readable=True, dir_okay=False, help="Test bundle JSON path."),
    attempt_id: str = typer.Option(..., help="Attempt id seeding the order."),
    log_level: str = typer.Option("WARNING", help="Log level for structured logging."),
) -> None:
    """Print question and option order for one attempt."""
    configure_logging(log_level)
    bundle = _load_bundle(test)
    rendered = create_container().randomizer().render(bundle.test, bundle.questions, attempt_id)
    _echo_json([{"id": q.id, "options": [o.id for o in q.options]} for q in rendered])


@app.command("hash-password")
def hash_password(
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Password protecting test edits."),
    config: Optional[Path] = typer.Option(None, exists=True, readable=True, dir_okay=False, help="YAML config path."),
) -> None:
    """Print an Argon2id digest for a test admin password."""
    container = create_container(settings=_load_settings(config))
    typer.echo(container.credential_verifier().hash(password))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
