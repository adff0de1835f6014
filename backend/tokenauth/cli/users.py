"""Flask CLI commands for principal administration."""

from __future__ import annotations

import logging

import click
from flask.cli import with_appcontext

from tokenauth.core.components import get_components
from tokenauth.models.enums import Role
from tokenauth.services._shared.errors import ServiceError

LOGGER = logging.getLogger(__name__)


@click.group("users")
def users_cli() -> None:
    """Principal administration commands."""


@users_cli.command("create-admin")
@click.option("--name", required=True, help="Display name of the administrator.")
@click.option("--email", required=True, help="Login email of the administrator.")
@click.option(
    "--password",
    required=True,
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Initial password (prompted when omitted).",
)
@with_appcontext
def create_admin_command(name: str, email: str, password: str) -> None:
    """Create a confirmed ADMIN, or promote the principal owning ``email``."""
    principals = get_components().principals
    try:
        existing = principals.get_by_email(email)
        if existing is None:
            admin = principals.create(
                name=name, email=email, password=password, role=Role.ADMIN, confirmed=True
            )
            action = "created"
        else:
            principals.confirm(existing.id)
            admin = principals.set_role(existing.id, Role.ADMIN)
            action = "promoted"
    except ServiceError as exc:
        raise click.ClickException(str(exc)) from exc
    LOGGER.info("cli.admin_%s", action, extra={"principal_id": admin.id})
    click.echo(f"Admin {action}: {admin.email} ({admin.id})")
