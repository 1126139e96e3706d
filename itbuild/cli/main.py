"""Main entry point for the ItBuild CLI."""

from __future__ import annotations

try:
    import typer
except ImportError:
    import sys

    print("ItBuild CLI requires extras: pip install itbuild-auth[cli]")
    sys.exit(1)

from .commands import auth, sessions

app = typer.Typer(
    name="itbuild",
    help="ItBuild CLI - Log in with your user key and manage sessions",
    no_args_is_help=True,
)

app.add_typer(auth.app, name="auth")
app.command("keys")(sessions.keys)
app.command("sessions")(sessions.list_sessions)
app.command("login-log")(sessions.login_log)
app.command("close-sessions")(sessions.close_sessions)


def _version_callback(value: bool) -> None:
    """Handle --version and exit early."""
    if value:
        from itbuild import __version__

        typer.echo(f"itbuild {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show the CLI version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """ItBuild CLI root callback."""
    _ = version


@app.command()
def version() -> None:
    """Show the CLI version."""
    from itbuild import __version__

    typer.echo(f"itbuild {__version__}")


if __name__ == "__main__":
    app()
