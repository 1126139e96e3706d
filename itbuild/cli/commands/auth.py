"""Configuration and key storage commands for the ItBuild CLI."""

from __future__ import annotations

import typer
from rich.console import Console

from itbuild.credentials import (
    delete_private_key,
    get_config_path,
    get_stored_private_key,
    load_config,
    resolve_base_url,
    save_config,
    store_private_key,
)
from itbuild.exceptions import InvalidInputError
from itbuild.signing import sign_challenge

app = typer.Typer(help="Manage connection settings and the user key")
console = Console()


@app.command()
def configure(
    base_url: str = typer.Option(..., "--base-url", help="Base URL of the ItBuild API"),
    device_id: str = typer.Option(None, "--device-id", help="Device identifier (generated if omitted)"),
) -> None:
    """Save the API base URL and device identifier."""
    save_config(base_url=base_url, device_id=device_id)
    console.print(f"[green]Saved settings to {get_config_path()}[/green]")


@app.command("set-key")
def set_key(
    private_key: str = typer.Option(
        ..., prompt="Private key (hex)", hide_input=True, help="Hex encoded Ed25519 private key"
    ),
) -> None:
    """Store the user key in the system keyring."""
    private_key = private_key.strip()
    try:
        # Signing a dummy challenge validates the key format before storing it.
        public_key, _ = sign_challenge(private_key, "AAAA")
    except InvalidInputError as e:
        console.print(f"[red]Invalid private key: {e}[/red]")
        raise typer.Exit(1)

    if not store_private_key(private_key):
        console.print("[red]No system keyring available. Set ITBUILD_PRIVATE_KEY instead.[/red]")
        raise typer.Exit(1)

    console.print("[green]Private key stored.[/green]")
    console.print(f"  Public key: {public_key}")


@app.command("forget-key")
def forget_key() -> None:
    """Remove the user key from the system keyring."""
    if delete_private_key():
        console.print("[green]Private key removed.[/green]")
    else:
        console.print("[yellow]No stored private key found.[/yellow]")


@app.command()
def status() -> None:
    """Show the current configuration."""
    config = load_config() or {}
    base_url = resolve_base_url()

    console.print(f"  Config file: {get_config_path()}")
    console.print(f"  Base URL: {base_url or '[yellow]not set[/yellow]'}")
    console.print(f"  Device ID: {config.get('device_id') or '[yellow]not set[/yellow]'}")
    if get_stored_private_key():
        console.print("  Private key: [green]stored in keyring[/green]")
    else:
        console.print("  Private key: [yellow]not stored[/yellow]")

    if not base_url:
        raise typer.Exit(1)
