"""CLI: pairchat notifications list|read"""

import click
from rich.console import Console
from rich.table import Table

console = Console()


def _get_client():
    from pairchat.cli.main import _get_client
    return _get_client()


def _run(coro):
    from pairchat.cli.main import _run
    return _run(coro)


@click.group()
def notifications():
    """Chat notifications."""


@notifications.command("list")
def notifications_list():
    """Show unread notifications."""

    async def _list():
        client = _get_client()
        try:
            items = await client.chats.notifications()
        finally:
            await client.close()
        if not items:
            console.print("[dim]No unread notifications.[/dim]")
            return
        table = Table(title=f"Notifications ({len(items)} unread)")
        table.add_column("ID", style="bold")
        table.add_column("Type")
        table.add_column("Message")
        table.add_column("Chat room")
        for n in items:
            table.add_row(n.id, n.type, n.message, n.chat_room_id or "")
        console.print(table)

    _run(_list())


@notifications.command("read")
@click.argument("notification_id")
def notifications_read(notification_id):
    """Mark a notification as read."""

    async def _read():
        client = _get_client()
        try:
            await client.chats.mark_notification_read(notification_id)
        finally:
            await client.close()
        console.print("[green]Marked as read.[/green]")

    _run(_read())
