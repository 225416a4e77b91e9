"""
Derived, client-owned chat state. Never persisted.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel

from pairchat.models.message import Message
from pairchat.models.session import SessionSnapshot


class ChatPhase(str, Enum):
    PENDING = "pending"
    VERIFYING = "verifying"
    READY = "ready"


class LocalChatState(BaseModel):
    is_active: bool = False
    has_joined: bool = False
    is_ready: bool = False

    model_config = {"frozen": True}

    @classmethod
    def ready(cls) -> "LocalChatState":
        return cls(is_active=True, has_joined=True, is_ready=True)

    def merge(self, other: "LocalChatState") -> "LocalChatState":
        """Combine two observations without ever dropping a true flag.

        ``is_ready`` is recomputed so it stays equal to
        ``is_active and has_joined`` whenever both are known.
        """
        is_active = self.is_active or other.is_active
        has_joined = self.has_joined or other.has_joined
        return LocalChatState(
            is_active=is_active,
            has_joined=has_joined,
            is_ready=self.is_ready or other.is_ready or (is_active and has_joined),
        )


class ChatView(BaseModel):
    """Read-only snapshot handed to the rendering layer."""

    session: Optional[SessionSnapshot] = None
    messages: tuple[Message, ...] = ()
    local_state: LocalChatState = LocalChatState()
    phase: ChatPhase = ChatPhase.PENDING
    polling: bool = False
    notice: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def counterpart_name(self) -> str:
        if self.session and self.session.counterpart:
            return self.session.counterpart.username or "Chat"
        return "Chat"

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")
