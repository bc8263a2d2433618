"""Flask CLI commands for user bootstrap and refresh-token housekeeping."""

from __future__ import annotations

import logging
from datetime import timedelta

import click
from flask.cli import with_appcontext

from survey_basket.api.deps import get_auth_service
from survey_basket.core.time import utcnow
from survey_basket.uow import SQLAlchemyUnitOfWork

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """User account management commands."""


@users_cli.command("create")
@click.option("--email", required=True, help="Login email of the new user.")
@click.password_option("--password", help="Plain-text password (prompted when omitted).")
@click.option("--first-name", default="", help="Display first name.")
@click.option("--last-name", default="", help="Display last name.")
@with_appcontext
def create_user(email: str, password: str, first_name: str, last_name: str) -> None:
    """Create a user that can log in through ``POST /auth/login``."""
    with SQLAlchemyUnitOfWork() as uow:
        if uow.users.exists_by_email(email):
            raise click.UsageError(f"A user with email {email!r} already exists.")
        user = uow.users.create(
            email=email, password=password, first_name=first_name, last_name=last_name
        )
        user_id = user.id
    LOGGER.info("cli.users.created user_id=%s", user_id)
    click.echo(f"Created user {user_id} <{email.strip().lower()}>")


@click.group("auth")
def auth_cli() -> None:
    """Authentication maintenance commands."""


@auth_cli.command("purge-tokens")
@click.option(
    "--days",
    type=click.IntRange(min=0),
    default=0,
    show_default=True,
    help="Keep tokens that became inactive within the last N days.",
)
@with_appcontext
def purge_tokens(days: int) -> None:
    """Delete refresh tokens that expired or were revoked before the cutoff.

    Best-effort sweep: honouring a token never depends on it, since activity
    is computed on read.
    """
    cutoff = utcnow() - timedelta(days=days)
    deleted = get_auth_service().ledger.purge_inactive(older_than=cutoff)
    LOGGER.info("cli.auth.purged deleted=%s", deleted)
    click.echo(f"Purged {deleted} inactive refresh token(s).")
