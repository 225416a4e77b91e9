"""
Chat notification models: GET /chat/notifications.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

CHAT_REQUEST = "chat_request"
CHAT_ACCEPTED = "chat_accepted"
NEW_MESSAGE = "new_message"


class NotificationSender(BaseModel):
    id: str
    username: str = ""


class Notification(BaseModel):
    id: str
    type: str
    message: str = ""
    is_read: bool = False
    created_at: Optional[datetime] = None
    sender: Optional[NotificationSender] = None
    chat_room_id: Optional[str] = None

    @property
    def is_request(self) -> bool:
        return self.type == CHAT_REQUEST

    @property
    def is_acceptance(self) -> bool:
        return self.type == CHAT_ACCEPTED
