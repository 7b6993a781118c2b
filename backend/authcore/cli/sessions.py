"""Flask CLI commands for session-store housekeeping."""

from __future__ import annotations

from datetime import timedelta

import click
from flask import current_app
from flask.cli import with_appcontext

from authcore.core.extensions import db
from authcore.core.sessions import get_auth_service


@click.group("sessions")
def sessions_cli() -> None:
    """Session credential store maintenance."""


@sessions_cli.command("init-db")
@with_appcontext
def init_db_command() -> None:
    """Create the session tables (development and tests; use migrations elsewhere)."""
    db.create_all()
    click.echo("Session tables created.")


@sessions_cli.command("prune")
@click.option(
    "--older-than-days",
    type=click.IntRange(min=0),
    default=30,
    show_default=True,
    help="Delete records expired or revoked more than this many days ago.",
)
@with_appcontext
def prune_command(older_than_days: int) -> None:
    """Physically delete dead session records past the audit window."""
    outcome = get_auth_service().prune(timedelta(days=older_than_days))
    if not outcome.ok:
        raise click.ClickException("Prune failed: session store unavailable")
    backend = current_app.config.get("SESSION_BACKEND", "sqlalchemy")
    click.echo(f"Pruned {outcome.value} session record(s) from {backend}.")
