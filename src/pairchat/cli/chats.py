"""CLI: pairchat chats list|request|accept|decline"""

import json

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
def chats():
    """Chat room management."""


@chats.command("list")
@click.option("--json-output", "--json", is_flag=True)
def chats_list(json_output):
    """List chats visible to you."""

    async def _list():
        client = _get_client()
        try:
            rooms = await client.chats.active(force_refresh=True)
        finally:
            await client.close()
        if json_output:
            click.echo(json.dumps([r.model_dump(mode="json", by_alias=True) for r in rooms], indent=2))
            return
        table = Table(title=f"Chats ({len(rooms)})")
        table.add_column("ID", style="bold")
        table.add_column("With")
        table.add_column("Active")
        table.add_column("Joined")
        table.add_column("Unread")
        for r in rooms:
            other = r.counterpart.username if r.counterpart else ""
            table.add_row(r.id, other, "yes" if r.is_active else "no",
                          "yes" if r.has_joined else "no", str(r.unread_count))
        console.print(table)

    _run(_list())


@chats.command("request")
@click.argument("recipient_id")
def chats_request(recipient_id):
    """Ask another user to chat."""

    async def _request():
        client = _get_client()
        try:
            with console.status("Sending chat request..."):
                room_id = await client.chats.request(recipient_id)
        finally:
            await client.close()
        console.print(f"[green]Chat request sent. Chat room: {room_id}[/green]")

    _run(_request())


@chats.command("accept")
@click.argument("chat_room_id")
def chats_accept(chat_room_id):
    """Accept a chat request."""

    async def _accept():
        client = _get_client()
        try:
            with console.status("Accepting..."):
                await client.chats.accept(chat_room_id)
        finally:
            await client.close()
        console.print(f"[green]Accepted. Open it with `pairchat chat {chat_room_id}`.[/green]")

    _run(_accept())


@chats.command("decline")
@click.argument("chat_room_id")
def chats_decline(chat_room_id):
    """Decline a chat request."""

    async def _decline():
        client = _get_client()
        try:
            with console.status("Declining..."):
                await client.chats.decline(chat_room_id)
        finally:
            await client.close()
        console.print(f"[green]Chat request {chat_room_id} declined.[/green]")

    _run(_decline())
