"""
Message sending with an optimistic ready transition.

A successful send proves the chat is usable, so the sender runs the caller's
``on_sent`` callback and the controller promotes the chat to ready at once
instead of waiting for the next poll. Nothing is appended locally: the next
message poll picks the new message up.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional

from pairchat.config import DEFAULT_NOTICE_TTL_S
from pairchat.errors import SendError
from pairchat.models.message import Message

log = logging.getLogger("pairchat.sender")

SendMessage = Callable[[str, str], Coroutine[Any, Any, Message]]


class MessageSender:
    def __init__(
        self,
        send_message: SendMessage,
        logger: Optional[logging.Logger] = None,
    ):
        self._send_message = send_message
        self._log = logger or log

    async def send(
        self,
        session_id: Optional[str],
        text: str,
        on_sent: Optional[Callable[[], None]] = None,
    ) -> Message:
        """Send ``text`` to ``session_id``. Raises SendError on failure; never retries.

        ``on_sent`` runs once the backend has stored the message.
        """
        if not session_id:
            raise ValueError("No chat selected")
        if not text or not text.strip():
            raise ValueError("Message text is empty")

        try:
            message = await self._send_message(session_id, text)
        except SendError as e:
            kind = "server" if e.is_server_error else "network"
            self._log.error(f"Failed to send message to chat room {session_id} ({kind}): {e}")
            raise

        self._log.debug(f"Sent message {message.id} to chat room {session_id}")
        if on_sent is not None:
            on_sent()
        return message


class SendNotice:
    """A user-facing error line that clears itself after ``ttl`` seconds."""

    def __init__(self, ttl: float = DEFAULT_NOTICE_TTL_S):
        self._ttl = ttl
        self._message: Optional[str] = None
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def message(self) -> Optional[str]:
        return self._message

    def post(self, message: str) -> None:
        self._cancel_timer()
        self._message = message
        self._timer = asyncio.get_running_loop().call_later(self._ttl, self._expire)

    def clear(self) -> None:
        self._cancel_timer()
        self._message = None

    def _expire(self) -> None:
        self._timer = None
        self._message = None

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
