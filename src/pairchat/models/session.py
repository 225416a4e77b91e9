"""
Chat session models: one entry of GET /chat/active.

The backend flips ``isActive`` asynchronously once both participants have
joined, so a snapshot may report a session as inactive even after messages
exist for it.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class Participant(BaseModel):
    id: str
    username: str = ""
    status: Optional[str] = None

    model_config = {"frozen": True}


class LatestMessage(BaseModel):
    id: str
    message: str = ""
    created_at: Optional[datetime] = None
    user_id: Optional[str] = None

    model_config = {"frozen": True}


class SessionSnapshot(BaseModel):
    """A chat session as last fetched. Replaced wholesale, never mutated."""

    id: str
    is_active: bool = Field(default=False, alias="isActive")
    has_joined: bool = Field(default=False, alias="hasJoined")
    other_participants: tuple[Participant, ...] = Field(default=(), alias="otherParticipants")
    latest_message: Optional[LatestMessage] = Field(default=None, alias="latestMessage")
    unread_count: int = Field(default=0, alias="unreadCount")
    created_at: Optional[datetime] = None

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def counterpart(self) -> Optional[Participant]:
        return self.other_participants[0] if self.other_participants else None

    @property
    def settled(self) -> bool:
        return self.is_active and self.has_joined
