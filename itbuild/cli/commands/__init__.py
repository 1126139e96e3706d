"""CLI command modules."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

import typer
from rich.console import Console

from itbuild.credentials import resolve_private_key
from itbuild.exceptions import ConfigurationError
from itbuild.result import Result

T = TypeVar("T")

_console = Console()


def run_authenticated(action: Callable[[Any], Awaitable[Result[T]]]) -> T:
    """Log in with the stored user key, run ``action``, and unwrap its result.

    Prints the error and exits with status 1 if the login or the action fails.
    """
    from itbuild.client import ItBuildAuth

    private_key = resolve_private_key()
    if not private_key:
        _console.print("[red]No private key found. Run 'itbuild auth set-key' or set ITBUILD_PRIVATE_KEY.[/red]")
        raise typer.Exit(1)

    async def _run() -> Result[T]:
        async with ItBuildAuth() as auth:
            login = await auth.authenticate_with_user_key(private_key)
            if login.error is not None:
                return login
            return await action(auth)

    try:
        result = asyncio.run(_run())
    except ConfigurationError as e:
        _console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    if result.error is not None:
        _console.print(f"[red]{result.error}[/red]")
        raise typer.Exit(1)
    return result.result
