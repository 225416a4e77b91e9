"""CLI: pairchat auth login|register|status|logout"""

from typing import Optional

import click
from rich.console import Console

from pairchat.client import AsyncPairChat
from pairchat.config import DEFAULT_BASE_URL

console = Console()


def _load_config() -> dict:
    from pairchat.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from pairchat.cli.main import _save_config
    _save_config(cfg)


def _run(coro):
    from pairchat.cli.main import _run
    return _run(coro)


def _remember(cfg: dict, result: dict, url: str) -> None:
    _save_config({**cfg, "access_token": result["token"], "user_id": result["id"],
                  "username": result["username"], "base_url": url})
    console.print("[dim]Token saved to ~/.pairchat/config.json[/dim]")


@click.group()
def auth():
    """Authentication commands."""


@auth.command("login")
@click.option("--base-url", default=None, help="Chat backend base URL")
@click.option("-u", "--username", default=None)
def auth_login(base_url: Optional[str], username: Optional[str]):
    """Log in with username and password."""

    async def _login():
        cfg = _load_config()
        url = base_url or cfg.get("base_url", DEFAULT_BASE_URL)
        client = AsyncPairChat(base_url=url)
        name = username or click.prompt("Username")
        password = click.prompt("Password", hide_input=True)
        try:
            with console.status("Logging in..."):
                result = await client.auth.login(name, password)
        finally:
            await client.close()
        console.print(f"[green]Logged in as {result['username']} (ID: {result['id']})[/green]")
        _remember(cfg, result, url)

    _run(_login())


@auth.command("register")
@click.option("--base-url", default=None, help="Chat backend base URL")
def auth_register(base_url: Optional[str]):
    """Create an account."""

    async def _register():
        cfg = _load_config()
        url = base_url or cfg.get("base_url", DEFAULT_BASE_URL)
        client = AsyncPairChat(base_url=url)
        name = click.prompt("Username")
        email = click.prompt("Email")
        password = click.prompt("Password", hide_input=True, confirmation_prompt=True)
        try:
            with console.status("Registering..."):
                result = await client.auth.register(name, email, password)
        finally:
            await client.close()
        console.print(f"[green]Registered {result['username']} (ID: {result['id']})[/green]")
        _remember(cfg, result, url)

    _run(_register())


@auth.command("status")
def auth_status():
    """Show current auth status."""
    cfg = _load_config()
    if cfg.get("access_token"):
        console.print(f"[green]Logged in[/green] as {cfg.get('username', 'unknown')} (ID: {cfg.get('user_id')})")
    else:
        console.print("[yellow]Not logged in. Run `pairchat auth login`.[/yellow]")


@auth.command("logout")
def auth_logout():
    """Clear saved credentials."""
    _save_config({})
    console.print("[green]Logged out.[/green]")
