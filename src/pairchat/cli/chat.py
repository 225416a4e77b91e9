"""CLI: pairchat chat, pairchat send"""

import asyncio
import functools
from typing import Optional

import click
from rich.console import Console

from pairchat.controller import ChatSessionController
from pairchat.errors import SessionError
from pairchat.models.message import Message
from pairchat.models.state import ChatPhase

console = Console()

PHASE_BANNERS = {
    ChatPhase.PENDING: "[yellow]Waiting for chat to activate. Messages will appear once both users have joined.[/yellow]",
    ChatPhase.VERIFYING: "[cyan]Checking chat status...[/cyan]",
    ChatPhase.READY: "[green]Chat is active. You can now send messages.[/green]",
}


def _load_config() -> dict:
    from pairchat.cli.main import _load_config
    return _load_config()


def _get_client():
    from pairchat.cli.main import _get_client
    return _get_client()


def _run(coro):
    from pairchat.cli.main import _run
    return _run(coro)


def _render(msg: Message, user_id: Optional[str]) -> None:
    who = "You" if msg.is_from(user_id) else (msg.author_username or "User")
    console.print(f"[dim]{msg.created_at:%H:%M}[/dim] [bold]{who}:[/bold] {msg.text}")


async def _watch(controller: ChatSessionController, user_id: Optional[str], every: float = 1.0) -> None:
    """Print phase changes and newly fetched messages while the REPL waits for input."""
    seen: set[str] = set()
    phase = None
    while True:
        view = controller.current_state()
        if view.phase != phase:
            phase = view.phase
            console.print(PHASE_BANNERS[phase])
        for msg in view.messages:
            if msg.id not in seen:
                seen.add(msg.id)
                _render(msg, user_id)
        await asyncio.sleep(every)


@click.command("chat")
@click.argument("chat_room_id")
def chat_cmd(chat_room_id: str):
    """Interactive chat in a chat room."""

    async def _chat():
        user_id = _load_config().get("user_id")
        client = _get_client()
        controller = client.controller()
        try:
            with console.status("Opening chat..."):
                view = await controller.select_session(chat_room_id)
        except SessionError as e:
            console.print(f"[red]{e}[/red]")
            await client.close()
            return

        console.print(f"[bold]{view.counterpart_name}[/bold] [dim]({chat_room_id})[/dim]")
        console.print("[cyan]Type your message, /refresh to re-check status, /quit to exit[/cyan]\n")
        watcher = asyncio.create_task(_watch(controller, user_id))
        loop = asyncio.get_running_loop()
        try:
            while True:
                text = await loop.run_in_executor(None, functools.partial(click.prompt, "", prompt_suffix="> "))
                if text.lower() in ("/quit", "/exit"):
                    break
                if text.lower() == "/refresh":
                    await controller.refresh_status()
                    await controller.refresh_messages()
                    continue
                if not controller.current_state().local_state.is_ready:
                    console.print("[yellow]Waiting for chat to activate...[/yellow]")
                    continue
                sent = await controller.on_send(text)
                if sent is None:
                    notice = controller.current_state().notice
                    if notice:
                        console.print(f"[red]{notice}[/red]")
        except (KeyboardInterrupt, EOFError, click.Abort):
            pass
        finally:
            watcher.cancel()
            await controller.aclose()
            await client.close()

    _run(_chat())


@click.command("send")
@click.argument("chat_room_id")
@click.argument("message")
def send_cmd(chat_room_id: str, message: str):
    """Send a one-shot message."""

    async def _send():
        client = _get_client()
        controller = client.controller()
        try:
            await controller.select_session(chat_room_id)
            sent = await controller.on_send(message)
            if sent is None:
                console.print(f"[red]{controller.current_state().notice or 'Nothing to send.'}[/red]")
                raise SystemExit(1)
            console.print(f"[green]Sent ({sent.id})[/green]")
        except SessionError as e:
            console.print(f"[red]{e}[/red]")
            raise SystemExit(1)
        finally:
            await controller.aclose()
            await client.close()

    _run(_send())
