"""
Chat-room REST API: /api/chat.

``active``, ``messages`` and ``send`` are the three capabilities the
ChatSessionController consumes; the rest drive the request/accept flow and
notifications.
"""

import time
from typing import Any, Callable, Optional

import httpx

from pairchat.config import DEFAULT_SESSIONS_CACHE_TTL_S
from pairchat.errors import HttpError, SendError
from pairchat.models.message import Message
from pairchat.models.notification import Notification
from pairchat.models.session import SessionSnapshot
from pairchat.transport.http import HttpClient


class ChatsAPI:
    def __init__(
        self,
        http: HttpClient,
        cache_ttl: float = DEFAULT_SESSIONS_CACHE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._http = http
        self._cache_ttl = cache_ttl
        self._clock = clock
        self._cached: Optional[tuple[float, list[SessionSnapshot]]] = None

    async def active(self, force_refresh: bool = False) -> list[SessionSnapshot]:
        """Chats visible to the current user. ``force_refresh`` bypasses the short-lived cache."""
        now = self._clock()
        if not force_refresh and self._cached is not None and now - self._cached[0] < self._cache_ttl:
            return list(self._cached[1])
        data = await self._http.get("/chat/active")
        chats = [SessionSnapshot.model_validate(_drop_missing_profiles(c)) for c in (data or {}).get("chats", [])]
        self._cached = (now, chats)
        return list(chats)

    async def messages(self, chat_room_id: str) -> list[Message]:
        """Full message list for a chat, oldest first."""
        data = await self._http.get(f"/chat/messages/{chat_room_id}")
        return [Message.model_validate(m) for m in (data or {}).get("messages", [])]

    async def send(self, chat_room_id: str, text: str) -> Message:
        try:
            data = await self._http.post("/chat/send", {"chatRoomId": chat_room_id, "message": text})
            return Message.model_validate(data["chatMessage"])
        except HttpError as e:
            raise SendError(str(e), status_code=e.status_code, server_message=e.server_message) from e
        except httpx.HTTPError as e:
            raise SendError(str(e) or type(e).__name__) from e
        except (KeyError, TypeError, ValueError) as e:
            # 2xx whose body does not carry a usable chatMessage
            raise SendError("Malformed send response") from e

    async def request(self, recipient_id: str) -> str:
        """Ask another user to chat. Returns the new chat room id."""
        data = await self._http.post("/chat/request", {"recipientId": recipient_id})
        self.invalidate()
        return data["chatRoomId"]

    async def accept(self, chat_room_id: str) -> dict[str, Any]:
        data = await self._http.post("/chat/accept", {"chatRoomId": chat_room_id})
        self.invalidate()
        return data

    async def decline(self, chat_room_id: str) -> dict[str, Any]:
        data = await self._http.post("/chat/decline", {"chatRoomId": chat_room_id})
        self.invalidate()
        return data

    async def notifications(self) -> list[Notification]:
        """Unread notifications, newest first."""
        data = await self._http.get("/chat/notifications")
        return [Notification.model_validate(n) for n in (data or {}).get("notifications", [])]

    async def mark_notification_read(self, notification_id: str) -> dict[str, Any]:
        return await self._http.post("/chat/markNotificationRead", {"notificationId": notification_id})

    def invalidate(self) -> None:
        self._cached = None


def _drop_missing_profiles(raw: dict[str, Any]) -> dict[str, Any]:
    # A participant whose profile row is gone comes back as null
    participants = raw.get("otherParticipants")
    if isinstance(participants, list) and None in participants:
        raw = {**raw, "otherParticipants": [p for p in participants if p is not None]}
    return raw
