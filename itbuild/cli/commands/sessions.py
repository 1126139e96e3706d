"""Key and session commands for the ItBuild CLI."""

from __future__ import annotations

from datetime import datetime

import typer
from rich.console import Console
from rich.table import Table

from itbuild.cli.commands import run_authenticated
from itbuild.config import RESULT_SUCCESS

console = Console()


def _fmt_time(value: datetime | None) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else ""


def keys() -> None:
    """List the keys registered for the account."""
    user_keys = run_authenticated(lambda auth: auth.get_user_keys())

    if not user_keys:
        console.print("[yellow]No keys found.[/yellow]")
        return

    table = Table(title="User Keys")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Public Key", max_width=50)
    table.add_column("Created")
    table.add_column("Current", style="green")

    for key in user_keys:
        table.add_row(
            str(key.id),
            key.key_type,
            key.public_key,
            _fmt_time(key.created_at),
            "*" if key.current else "",
        )

    console.print(table)


def list_sessions() -> None:
    """List the account's live sessions."""
    sessions = run_authenticated(lambda auth: auth.get_sessions())

    if not sessions:
        console.print("[yellow]No sessions found.[/yellow]")
        return

    table = Table(title="Sessions")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("User Agent", max_width=40)
    table.add_column("IP")
    table.add_column("Login Type")
    table.add_column("Created")
    table.add_column("Last Access")
    table.add_column("Current", style="green")

    for session in sessions:
        table.add_row(
            str(session.id),
            session.user_agent or "",
            session.ip or "",
            session.login_type or "",
            _fmt_time(session.created_at),
            _fmt_time(session.last_access_at),
            "*" if session.current else "",
        )

    console.print(table)


def login_log() -> None:
    """Show the account's login history."""
    entries = run_authenticated(lambda auth: auth.get_login_log())

    if not entries:
        console.print("[yellow]No logins recorded.[/yellow]")
        return

    table = Table(title="Login Log")
    table.add_column("Time")
    table.add_column("Key ID", style="cyan")
    table.add_column("Sign #")
    table.add_column("IP")
    table.add_column("Device", max_width=40)
    table.add_column("Login Type")

    for entry in entries:
        table.add_row(
            _fmt_time(entry.time),
            str(entry.key_id),
            str(entry.key_sign_num),
            entry.ip or "",
            entry.device_info or "",
            entry.login_type or "",
        )

    console.print(table)


def close_sessions(
    session_id: int = typer.Option(None, "--id", help="Session to close (default: all but the current one)"),
) -> None:
    """Close a session, or every session except the current one."""
    outcome = run_authenticated(lambda auth: auth.close_sessions(session_id))

    if outcome.lower() != RESULT_SUCCESS.lower():
        console.print(f"[red]Server answered: {outcome}[/red]")
        raise typer.Exit(1)

    if session_id is None:
        console.print("[green]Closed all other sessions.[/green]")
    else:
        console.print(f"[green]Session {session_id} closed.[/green]")
