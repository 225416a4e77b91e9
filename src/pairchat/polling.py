"""
Periodic pollers.

Each poller owns exactly one asyncio task. ``stop()`` cancels it (and any
fetch in flight) and is safe to call any number of times. A failed tick is
logged and the loop carries on at the same cadence: there is no backoff and
no failure limit, only external cancellation.

The two pollers are independent timers and their fetches may interleave in
any order.
"""

import asyncio
import logging
from typing import Any, Callable, Coroutine, Optional, Sequence

from pairchat.config import DEFAULT_ACTIVATION_INTERVAL_S, DEFAULT_MESSAGE_INTERVAL_S
from pairchat.errors import TransientFetchError
from pairchat.models.message import Message
from pairchat.models.session import SessionSnapshot

log = logging.getLogger("pairchat.polling")

FetchSessions = Callable[[bool], Coroutine[Any, Any, Sequence[SessionSnapshot]]]
FetchMessages = Callable[[str], Coroutine[Any, Any, Sequence[Message]]]


class PeriodicTask:
    def __init__(self, interval: float, name: str, logger: Optional[logging.Logger] = None):
        self._interval = interval
        self._name = name
        self._log = logger or log
        self._task: Optional[asyncio.Task[None]] = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def interval(self) -> float:
        return self._interval

    def _launch(self) -> None:
        self.stop()
        self.ticks = 0
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self._name)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            self.ticks += 1
            try:
                finished = await self.tick()
            except Exception as e:
                self._log.warning(f"{self._name}: tick {self.ticks} failed, retrying in {self._interval}s: {e}")
                continue
            if finished:
                self._log.debug(f"{self._name}: finished after {self.ticks} ticks")
                if self._task is asyncio.current_task():
                    self._task = None
                return

    async def tick(self) -> bool:
        """Run one poll. Return True to end the loop."""
        raise NotImplementedError

    def stop(self) -> None:
        task, self._task = self._task, None
        if task is None or task.done():
            return
        # A tick that stops its own poller just drops the handle; the loop exits on return.
        if task is asyncio.current_task():
            return
        task.cancel()


class ActivationPoller(PeriodicTask):
    """Re-fetches the session list until this session's snapshot settles."""

    def __init__(self, interval: float = DEFAULT_ACTIVATION_INTERVAL_S, logger: Optional[logging.Logger] = None):
        super().__init__(interval, "activation-poller", logger)
        self._session_id: Optional[str] = None
        self._fetch_sessions: Optional[FetchSessions] = None
        self._on_settled: Optional[Callable[[SessionSnapshot], None]] = None
        self._message_count: Callable[[], int] = lambda: 0

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    def start(
        self,
        session_id: str,
        fetch_sessions: FetchSessions,
        on_settled: Callable[[SessionSnapshot], None],
        message_count: Optional[Callable[[], int]] = None,
    ) -> None:
        self._session_id = session_id
        self._fetch_sessions = fetch_sessions
        self._on_settled = on_settled
        self._message_count = message_count or (lambda: 0)
        self._log.info(f"Starting status polling for chat room {session_id} every {self._interval}s")
        self._launch()

    async def tick(self) -> bool:
        if self._fetch_sessions is None or self._on_settled is None:
            return True
        try:
            sessions = await self._fetch_sessions(True)
        except Exception as e:
            raise TransientFetchError(f"Failed to fetch chat sessions: {e}", {"session_id": self._session_id}) from e

        entry = next((s for s in sessions if s.id == self._session_id), None)
        if entry is None:
            self._log.debug(f"Chat room {self._session_id} not in session list yet")
            return False
        if entry.is_active or self._message_count() > 0:
            self._log.info(f"Chat room {self._session_id} settled (active={entry.is_active}, joined={entry.has_joined})")
            self._on_settled(entry)
            return True
        return False


class MessagePoller(PeriodicTask):
    """Re-fetches the message list on a fixed cadence, whatever the chat's state."""

    def __init__(self, interval: float = DEFAULT_MESSAGE_INTERVAL_S, logger: Optional[logging.Logger] = None):
        super().__init__(interval, "message-poller", logger)
        self._session_id: Optional[str] = None
        self._fetch_messages: Optional[FetchMessages] = None
        self._on_messages: Optional[Callable[[str, Sequence[Message]], None]] = None

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    def start(
        self,
        session_id: str,
        fetch_messages: FetchMessages,
        on_messages: Optional[Callable[[str, Sequence[Message]], None]] = None,
    ) -> None:
        self._session_id = session_id
        self._fetch_messages = fetch_messages
        self._on_messages = on_messages
        self._launch()

    async def tick(self) -> bool:
        if self._fetch_messages is None or self._session_id is None:
            return True
        session_id = self._session_id
        try:
            messages = await self._fetch_messages(session_id)
        except Exception as e:
            raise TransientFetchError(f"Failed to fetch messages: {e}", {"session_id": session_id}) from e
        if self._on_messages is not None:
            self._on_messages(session_id, messages)
        return False
