"""
Chat session controller. Owns the selected chat, its messages, the derived
local state and both pollers.

Lifecycle of a selected chat:

    PENDING    not active
    VERIFYING  active, not yet joined
    READY      active and joined (terminal while the chat stays selected)

A message-bearing fetch, a settled status poll or a successful send can jump
straight to READY. State only ever moves forward: every update is merged
into the current state, never assigned over it.

Selecting another chat or closing the current one stops both pollers before
anything else happens and bumps a selection generation. Every async result
carries the generation and chat id that issued it and is dropped if either
no longer matches.
"""

import functools
import logging
from typing import Optional, Sequence

from pairchat.config import ChatConfig
from pairchat.errors import SendError, SessionError
from pairchat.models.message import Message
from pairchat.models.session import SessionSnapshot
from pairchat.models.state import ChatView, LocalChatState
from pairchat.polling import ActivationPoller, FetchMessages, FetchSessions, MessagePoller
from pairchat.reconciler import StatusReconciler
from pairchat.sender import MessageSender, SendMessage, SendNotice

log = logging.getLogger("pairchat.controller")


class ChatSessionController:
    def __init__(
        self,
        fetch_sessions: FetchSessions,
        fetch_messages: FetchMessages,
        send_message: SendMessage,
        config: Optional[ChatConfig] = None,
        logger: Optional[logging.Logger] = None,
        reconciler: Optional[StatusReconciler] = None,
    ):
        self._config = config or ChatConfig()
        self._log = logger or log
        self._fetch_sessions = fetch_sessions
        self._fetch_messages = fetch_messages
        self._reconciler = reconciler or StatusReconciler()

        self._activation = ActivationPoller(self._config.activation_interval, self._log)
        self._message_poller = MessagePoller(self._config.message_interval, self._log)
        self._sender = MessageSender(send_message, logger=self._log)
        self._notice = SendNotice(self._config.notice_ttl)

        self._generation = 0
        self._sent_generation: Optional[int] = None
        self._session_id: Optional[str] = None
        self._session: Optional[SessionSnapshot] = None
        self._messages: tuple[Message, ...] = ()
        self._state = LocalChatState()

    @property
    def session_id(self) -> Optional[str]:
        return self._session_id

    @property
    def activation_poller(self) -> ActivationPoller:
        return self._activation

    @property
    def message_poller(self) -> MessagePoller:
        return self._message_poller

    def current_state(self) -> ChatView:
        return ChatView(
            session=self._session,
            messages=self._messages,
            local_state=self._state,
            phase=self._reconciler.phase(self._state),
            polling=self._activation.running,
            notice=self._notice.message,
        )

    async def select_session(self, session_id: str) -> ChatView:
        """Make ``session_id`` the current chat and start polling it.

        Raises SessionError if the chat is not visible to the current user. A
        failed lookup leaves no chat selected.
        """
        self._reset(session_id)
        generation = self._generation
        self._log.info(f"Opening chat room {session_id}")

        try:
            snapshot = await self._lookup(generation, session_id)
        except Exception:
            if self._is_current(generation, session_id):
                self._reset(None)
            raise
        if snapshot is None or not self._is_current(generation, session_id):
            return self.current_state()
        self._session = snapshot
        self._apply(self._reconciler.compute(snapshot, 0))

        try:
            messages = await self._fetch_messages(session_id)
        except Exception as e:
            self._log.warning(f"Initial message fetch for chat room {session_id} failed: {e}")
        else:
            self._on_messages(generation, session_id, messages)

        if not self._is_current(generation, session_id):
            return self.current_state()

        # Poll on the snapshot's own flags even when messages already force
        # readiness. A send that succeeded meanwhile has already ended polling.
        if self._reconciler.needs_polling(snapshot, len(self._messages)) and self._sent_generation != generation:
            self._activation.start(
                session_id,
                self._fetch_sessions,
                functools.partial(self._on_settled, generation),
                message_count=lambda: len(self._messages),
            )
        self._message_poller.start(
            session_id,
            self._fetch_messages,
            functools.partial(self._on_messages, generation),
        )
        return self.current_state()

    async def on_send(self, text: str) -> Optional[Message]:
        """Send ``text`` to the current chat.

        Returns the stored message, or None when nothing was sent or the send
        failed. A failure is posted as a notice that clears itself.
        """
        session_id = self._session_id
        if session_id is None or not text.strip():
            return None
        generation = self._generation
        self._notice.clear()
        try:
            return await self._sender.send(
                session_id, text, on_sent=functools.partial(self._on_sent, generation, session_id)
            )
        except SendError as e:
            if self._is_current(generation, session_id):
                self._notice.post(e.user_message)
            return None

    async def on_close(self) -> None:
        if self._session_id is not None:
            self._log.info(f"Closing chat room {self._session_id}")
        self._reset(None)

    async def aclose(self) -> None:
        await self.on_close()

    async def refresh_status(self) -> ChatView:
        """One-off reconciliation fetch outside the activation poller's cadence."""
        session_id = self._session_id
        if session_id is None:
            return self.current_state()
        generation = self._generation
        try:
            sessions = await self._fetch_sessions(True)
        except Exception as e:
            self._log.warning(f"Status refresh for chat room {session_id} failed: {e}")
            return self.current_state()
        entry = _find(sessions, session_id)
        if entry is None or not self._is_current(generation, session_id):
            return self.current_state()

        self._session = entry
        self._apply(self._reconciler.compute(entry, len(self._messages)))
        if not self._reconciler.needs_polling(entry, len(self._messages)):
            self._activation.stop()
        return self.current_state()

    async def refresh_messages(self) -> ChatView:
        session_id = self._session_id
        if session_id is None:
            return self.current_state()
        generation = self._generation
        try:
            messages = await self._fetch_messages(session_id)
        except Exception as e:
            self._log.warning(f"Message refresh for chat room {session_id} failed: {e}")
        else:
            self._on_messages(generation, session_id, messages)
        return self.current_state()

    def _reset(self, session_id: Optional[str]) -> None:
        self._activation.stop()
        self._message_poller.stop()
        self._generation += 1
        self._session_id = session_id
        self._session = None
        self._messages = ()
        self._state = LocalChatState()
        self._notice.clear()

    def _is_current(self, generation: int, session_id: str) -> bool:
        return generation == self._generation and session_id == self._session_id

    async def _lookup(self, generation: int, session_id: str) -> Optional[SessionSnapshot]:
        entry = _find(await self._fetch_sessions(False), session_id)
        if entry is None and self._is_current(generation, session_id):
            self._log.debug(f"Chat room {session_id} not in cached list, fetching fresh data")
            entry = _find(await self._fetch_sessions(True), session_id)
        if entry is None and self._is_current(generation, session_id):
            raise SessionError("Chat not found", details={"session_id": session_id})
        return entry

    def _apply(self, observed: LocalChatState) -> None:
        merged = self._state.merge(observed)
        if merged == self._state:
            return
        before = self._reconciler.phase(self._state)
        after = self._reconciler.phase(merged)
        self._state = merged
        if before != after:
            self._log.info(f"Chat room {self._session_id}: {before.value} -> {after.value}")

    def _on_messages(self, generation: int, session_id: str, messages: Sequence[Message]) -> None:
        if not self._is_current(generation, session_id):
            self._log.debug(f"Dropping stale message fetch for chat room {session_id}")
            return
        self._messages = tuple(messages)
        if self._session is not None:
            self._apply(self._reconciler.compute(self._session, len(self._messages)))

    def _on_settled(self, generation: int, entry: SessionSnapshot) -> None:
        if not self._is_current(generation, entry.id):
            self._log.debug(f"Dropping stale status for chat room {entry.id}")
            return
        self._session = entry
        self._apply(LocalChatState.ready())

    def _on_sent(self, generation: int, session_id: str) -> None:
        if not self._is_current(generation, session_id):
            self._log.debug(f"Not promoting chat room {session_id}: selection changed during send")
            return
        self._sent_generation = generation
        self._apply(LocalChatState.ready())
        self._activation.stop()


def _find(sessions: Sequence[SessionSnapshot], session_id: str) -> Optional[SessionSnapshot]:
    return next((s for s in sessions if s.id == session_id), None)
