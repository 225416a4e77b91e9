"""
PairChat / AsyncPairChat: main clients.
"""

import asyncio
import logging
from typing import Any, Optional

import httpx

from pairchat.auth import Auth
from pairchat.chats import ChatsAPI
from pairchat.config import DEFAULT_BASE_URL, ChatConfig
from pairchat.controller import ChatSessionController
from pairchat.errors import ConnectionError
from pairchat.models.state import ChatView
from pairchat.transport.http import HttpClient


class AsyncPairChat:
    """Async client (primary)."""

    def __init__(
        self,
        access_token: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        config: Optional[ChatConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ChatConfig()
        self.http = HttpClient(base_url=base_url, token=access_token, transport=transport)
        self.auth = Auth(self.http)
        self.chats = ChatsAPI(self.http, cache_ttl=self.config.sessions_cache_ttl)

    @property
    def authenticated(self) -> bool:
        return self.http.token is not None

    def controller(self, logger: Optional[logging.Logger] = None) -> ChatSessionController:
        """A controller wired to this client's chat-room capabilities."""
        return ChatSessionController(
            fetch_sessions=self.chats.active,
            fetch_messages=self.chats.messages,
            send_message=self.chats.send,
            config=self.config,
            logger=logger,
        )

    async def open_chat(self, session_id: str, logger: Optional[logging.Logger] = None) -> ChatSessionController:
        """Select ``session_id`` on a fresh controller and start polling it."""
        self._ensure_authenticated()
        controller = self.controller(logger)
        await controller.select_session(session_id)
        return controller

    async def close(self) -> None:
        await self.http.close()

    def _ensure_authenticated(self) -> None:
        if not self.authenticated:
            raise ConnectionError("Not logged in. Call auth.login() first.")


class PairChat:
    """Sync wrapper around AsyncPairChat. Runs the event loop internally.

    Pollers only advance while the loop runs, so a synchronous caller sees
    fresh state after ``wait()`` or any other blocking call.
    """

    def __init__(self, **kwargs: Any):
        self._async = AsyncPairChat(**kwargs)
        self._loop = asyncio.new_event_loop()
        self._controller: Optional[ChatSessionController] = None

    def _run(self, coro: Any) -> Any:
        return self._loop.run_until_complete(coro)

    @property
    def auth(self) -> Auth:
        return self._async.auth

    @property
    def chats(self) -> ChatsAPI:
        return self._async.chats

    def login(self, username: str, password: str) -> dict[str, Any]:
        return self._run(self._async.auth.login(username, password))

    def open_chat(self, session_id: str) -> ChatView:
        if self._controller is not None:
            self._run(self._controller.on_close())
        self._controller = self._run(self._async.open_chat(session_id))
        return self._controller.current_state()

    def send(self, text: str) -> Optional[str]:
        """Send to the open chat. Returns the new message id, or None on failure."""
        message = self._run(self._require_controller().on_send(text))
        return message.id if message else None

    def wait(self, seconds: float) -> ChatView:
        self._run(asyncio.sleep(seconds))
        return self.state()

    def state(self) -> ChatView:
        return self._require_controller().current_state()

    def close_chat(self) -> None:
        if self._controller is not None:
            self._run(self._controller.on_close())
            self._controller = None

    def close(self) -> None:
        self.close_chat()
        self._run(self._async.close())
        self._loop.close()

    def _require_controller(self) -> ChatSessionController:
        if self._controller is None:
            raise ConnectionError("No chat open. Call open_chat() first.")
        return self._controller
