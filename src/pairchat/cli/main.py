"""
pairchat CLI: `pairchat` command.

Commands:
  pairchat auth login              Username/password login
  pairchat chats list              Chats visible to you
  pairchat chats request <user>    Ask another user to chat
  pairchat chat <room-id>          Interactive chat
  pairchat send <room-id> <msg>    One-shot message
  pairchat notifications list      Unread notifications
"""

import asyncio
import logging

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install pairchat[cli]")

from pairchat.client import AsyncPairChat
from pairchat.config import DEFAULT_BASE_URL, load_config, save_config

console = Console()


def _load_config() -> dict:
    return load_config()


def _save_config(cfg: dict) -> None:
    save_config(cfg)


def _get_client() -> AsyncPairChat:
    cfg = _load_config()
    if not cfg.get("access_token"):
        console.print("[red]Not logged in. Run `pairchat auth login` first.[/red]")
        raise SystemExit(1)
    return AsyncPairChat(
        access_token=cfg["access_token"],
        base_url=cfg.get("base_url", DEFAULT_BASE_URL),
    )


def _run(coro):
    return asyncio.run(coro)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Log polling and state changes")
def main(verbose: bool):
    """pairchat CLI: chat with another user."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# Register subcommands from separate modules
from pairchat.cli.auth import auth
from pairchat.cli.chat import chat_cmd, send_cmd
from pairchat.cli.chats import chats
from pairchat.cli.notifications import notifications

main.add_command(auth)
main.add_command(chat_cmd)
main.add_command(send_cmd)
main.add_command(chats)
main.add_command(notifications)


if __name__ == "__main__":
    main()
