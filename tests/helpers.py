"""Model factories and an in-memory chat backend for the unit tests."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pairchat.config import ChatConfig
from pairchat.errors import SendError
from pairchat.models.message import Message
from pairchat.models.session import SessionSnapshot

FAST = ChatConfig(activation_interval=0.01, message_interval=0.01, notice_ttl=0.05, sessions_cache_ttl=0)


def snapshot(session_id: str = "room-a", active: bool = False, joined: bool = False, **extra: Any) -> SessionSnapshot:
    return SessionSnapshot.model_validate({
        "id": session_id,
        "isActive": active,
        "hasJoined": joined,
        "otherParticipants": [{"id": "user-2", "username": "bob"}],
        **extra,
    })


def message(message_id: str = "m1", text: str = "hi", user_id: str = "user-2") -> Message:
    return Message.model_validate({
        "id": message_id,
        "message": text,
        "user_id": user_id,
        "created_at": datetime(2025, 4, 6, 9, 14, tzinfo=timezone.utc).isoformat(),
        "profiles": {"username": "bob"},
    })


async def wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


class FakeBackend:
    """Stands in for the three chat capabilities the controller consumes.

    ``session_gate`` holds every session-list fetch open, ``gate_messages``
    holds message fetches for one room, until the test sets the event. Used
    to stage out-of-order responses.
    """

    def __init__(self) -> None:
        self.sessions: dict[str, SessionSnapshot] = {}
        self.messages: dict[str, list[Message]] = {}
        self.session_calls: list[bool] = []
        self.message_calls: list[str] = []
        self.sent: list[tuple[str, str]] = []
        self.fail_sessions: Optional[Exception] = None
        self.fail_messages: Optional[Exception] = None
        self.send_error: Optional[SendError] = None
        self.session_gate: Optional[asyncio.Event] = None
        self.gate_messages: dict[str, asyncio.Event] = {}

    def add(self, snap: SessionSnapshot, messages: Optional[list[Message]] = None) -> None:
        self.sessions[snap.id] = snap
        self.messages[snap.id] = list(messages or [])

    async def fetch_sessions(self, force_refresh: bool) -> list[SessionSnapshot]:
        self.session_calls.append(force_refresh)
        gate = self.session_gate
        if gate is not None:
            await gate.wait()
        if self.fail_sessions is not None:
            raise self.fail_sessions
        return list(self.sessions.values())

    async def fetch_messages(self, session_id: str) -> list[Message]:
        self.message_calls.append(session_id)
        gate = self.gate_messages.get(session_id)
        if gate is not None:
            await gate.wait()
        if self.fail_messages is not None:
            raise self.fail_messages
        return list(self.messages.get(session_id, []))

    async def send_message(self, session_id: str, text: str) -> Message:
        if self.send_error is not None:
            raise self.send_error
        self.sent.append((session_id, text))
        msg = message(f"sent-{len(self.sent)}", text, user_id="user-1")
        self.messages.setdefault(session_id, []).append(msg)
        return msg
