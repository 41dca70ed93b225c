"""CLI commands for managing users."""

from __future__ import annotations

import secrets

import pydantic as p
from sqlalchemy.orm import Session

import classwork.lib.cli as click
from classwork.auth import local as local_auth
from classwork.core import di
from classwork.errors import ClassworkError
from classwork.model import UserRole
from classwork.storage import user as user_storage


@click.group("user")
def user():
    """Manage teachers and students."""
    ...


@user.command("create")
@click.argument("email")
@click.argument("name")
@click.option("--role", "-r", type=click.EnumType(UserRole), required=True, help="teacher or student")
@click.option("--password", "-p", help="Password (if not provided, a random one is generated)")
@di.inject
def user_create(
    email: str,
    name: str,
    role: UserRole,
    password: str | None,
    session: Session = di.Manage["storage.persistent.session"],
) -> None:
    """Create a new user.

    EMAIL is the user's email address (used for login).
    NAME is the user's display name.
    """
    generated_password = None
    if not password:
        generated_password = secrets.token_urlsafe(12)
        password = generated_password

    try:
        new_user = local_auth.sign_up(email, p.Secret(password), name, role, session=session)
    except ClassworkError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Created {new_user.role.value} {new_user.user_id} <{new_user.email}>")
    if generated_password:
        click.echo(f"Generated password: {generated_password}")


@user.command("set-password")
@click.argument("email")
@click.option("--password", "-p", prompt=True, hide_input=True, confirmation_prompt=True)
@di.inject
def user_set_password(
    email: str,
    password: str,
    session: Session = di.Manage["storage.persistent.session"],
) -> None:
    """Replace a user's password."""
    if len(password) < local_auth.MinPasswordLength:
        raise click.ClickException(f"password must be at least {local_auth.MinPasswordLength} characters")

    with session.begin():
        existing = user_storage.get(email=email, session=session)
        if existing is None:
            raise click.ClickException(f"no user with email '{email}'")
        user_storage.update(existing.user_id, password=p.Secret(password), session=session)

    click.echo(f"Updated password for {existing.email}")
