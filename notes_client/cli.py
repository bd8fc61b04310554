"""Command-line front end for notes_client.

A thin presentation layer over the stores: each command builds a
NotesClient, restores the persisted session and runs one flow.
"""

import asyncio
import logging
import sys
from collections.abc import Awaitable
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import click

from .app import NotesClient
from .config.loader import load_config
from .config.settings import ClientSettings
from .errors import FormValidationError
from .models.notes import Note
from .operations import OperationResult

T = TypeVar("T")


class InvalidInput(click.ClickException):
    """User input rejected by client-side validation."""

    exit_code = 2


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def run_flow(settings: ClientSettings, flow: Callable[[NotesClient], Awaitable[T]]) -> T:
    """Run one async flow against a fresh client.

    Validation errors abort with status 2, one message per field.
    """

    async def runner() -> T:
        async with NotesClient(settings) as client:
            await client.start()
            return await flow(client)

    try:
        return asyncio.run(runner())
    except FormValidationError as e:
        raise InvalidInput("; ".join(f"{field}: {message}" for field, message in e.field_errors.items())) from e


def check(result: OperationResult[T]) -> T | None:
    """Abort with status 1 when an operation failed."""
    if not result.ok:
        raise click.ClickException(result.error or "Request failed")
    return result.value


def format_note(note: Note) -> str:
    stamp = note.updated_at.strftime("%Y-%m-%d %H:%M")
    return f"[{note.id}] {note.title} ({stamp})\n    {note.body}"


def require_session(client: NotesClient) -> None:
    if not client.session.state.is_authenticated:
        raise click.ClickException("Not signed in. Run 'notes-client login' first.")


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to client.yaml (default: $NOTES_CLIENT_HOME/config/client.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """Notes client - passwordless sign-in and note management."""
    settings = load_config(config_path)
    configure_logging(settings.log_level)
    ctx.obj = settings


# --- Session commands ---


@cli.command()
@click.option("--email", prompt=True, help="Email address to sign up with")
@click.option("--name", prompt=True, help="Your name")
@click.option("--dob", "date_of_birth", prompt="Date of birth (YYYY-MM-DD)", help="Date of birth, YYYY-MM-DD")
@click.pass_obj
def signup(settings: ClientSettings, email: str, name: str, date_of_birth: str) -> None:
    """Create an account with a one-time code."""

    async def flow(client: NotesClient) -> None:
        check(await client.session.request_signup_otp(email, name))
        code = click.prompt(f"Enter the code sent to {email}")
        user = check(await client.session.verify_signup(name, date_of_birth, email, code))
        click.echo(f"Welcome, {user.display_name}!")

    run_flow(settings, flow)


@cli.command()
@click.option("--email", prompt=True, help="Email address of your account")
@click.option("--remember-me", is_flag=True, default=False, help="Ask for a long-lived session")
@click.pass_obj
def login(settings: ClientSettings, email: str, remember_me: bool) -> None:
    """Sign in with a one-time code."""

    async def flow(client: NotesClient) -> None:
        check(await client.session.request_login_otp(email))
        code = click.prompt(f"Enter the code sent to {email}")
        user = check(await client.session.verify_login(email, code, remember_me=remember_me))
        click.echo(f"Signed in as {user.display_name} <{user.email}>")

    run_flow(settings, flow)


@cli.command()
@click.pass_obj
def whoami(settings: ClientSettings) -> None:
    """Show the signed-in user."""

    async def flow(client: NotesClient) -> None:
        require_session(client)
        user = client.session.state.user
        click.echo(f"{user.display_name} <{user.email}>")

    run_flow(settings, flow)


@cli.command()
@click.pass_obj
def logout(settings: ClientSettings) -> None:
    """Sign out and forget the persisted session."""

    async def flow(client: NotesClient) -> None:
        result = await client.session.sign_out()
        if not result.ok:
            click.echo(f"Warning: {result.error}", err=True)
        click.echo("Signed out")

    run_flow(settings, flow)


# --- Notes commands ---


@cli.group()
def notes() -> None:
    """Manage your notes."""


@notes.command("list")
@click.pass_obj
def list_notes(settings: ClientSettings) -> None:
    """List notes, newest first."""

    async def flow(client: NotesClient) -> None:
        require_session(client)
        items = check(await client.notes.list())
        if not items:
            click.echo("No notes yet")
        for note in items:
            click.echo(format_note(note))

    run_flow(settings, flow)


@notes.command("add")
@click.option("--title", prompt=True, help="Note title (at least 3 characters)")
@click.option("--body", prompt=True, help="Note text (at least 10 characters)")
@click.pass_obj
def add_note(settings: ClientSettings, title: str, body: str) -> None:
    """Create a note."""

    async def flow(client: NotesClient) -> None:
        require_session(client)
        note = check(await client.notes.create(title, body))
        click.echo(f"Created note {note.id}")

    run_flow(settings, flow)


@notes.command("edit")
@click.argument("note_id", type=int)
@click.option("--title", default=None, help="New title")
@click.option("--body", default=None, help="New text")
@click.pass_obj
def edit_note(settings: ClientSettings, note_id: int, title: str | None, body: str | None) -> None:
    """Update a note's title and/or text."""
    if title is None and body is None:
        raise click.UsageError("Nothing to change: pass --title and/or --body")

    async def flow(client: NotesClient) -> None:
        require_session(client)
        note = check(await client.notes.update(note_id, title=title, body=body))
        click.echo(f"Updated note {note.id}")

    run_flow(settings, flow)


@notes.command("rm")
@click.argument("note_id", type=int)
@click.pass_obj
def remove_note(settings: ClientSettings, note_id: int) -> None:
    """Delete a note."""

    async def flow(client: NotesClient) -> None:
        require_session(client)
        check(await client.notes.delete(note_id))
        click.echo(f"Deleted note {note_id}")

    run_flow(settings, flow)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
