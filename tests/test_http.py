import json

import httpx
import pytest

from pairchat.auth import Auth
from pairchat.chats import ChatsAPI
from pairchat.client import AsyncPairChat
from pairchat.config import ChatConfig
from pairchat.errors import AuthError, ConnectionError, HttpError, SendError
from pairchat.models.state import ChatPhase
from pairchat.transport.http import HttpClient

ACTIVE = {
    "chats": [
        {
            "id": "room-1",
            "hasJoined": True,
            "isActive": False,
            "otherParticipants": [{"id": "u2", "username": "bob", "status": "online"}, None],
            "latestMessage": None,
            "unreadCount": 0,
            "created_at": "2025-04-06T09:00:00Z",
        }
    ]
}
MESSAGES = {
    "messages": [
        {"id": "m1", "message": "hi", "created_at": "2025-04-06T09:14:36Z", "user_id": "u2", "profiles": {"username": "bob"}},
    ]
}


class Recorder:
    def __init__(self, routes):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"message": "Not found"})
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        status, body = route
        return httpx.Response(status, json=body)


def make_http(routes, token="tok") -> tuple[HttpClient, Recorder]:
    recorder = Recorder(routes)
    return HttpClient("http://chat.test", token=token, transport=httpx.MockTransport(recorder)), recorder


class TestHttpClient:
    @pytest.mark.asyncio
    async def test_sends_bearer_token_under_api_prefix(self):
        http, rec = make_http({("GET", "/api/chat/active"): (200, ACTIVE)})
        data = await http.get("/chat/active")
        assert data == ACTIVE
        assert rec.requests[0].headers["Authorization"] == "Bearer tok"
        await http.close()

    @pytest.mark.asyncio
    async def test_error_payload_is_parsed(self):
        http, _ = make_http({("POST", "/api/chat/send"): (403, {"message": "You cannot send messages in this chat"})})
        with pytest.raises(HttpError) as exc:
            await http.post("/chat/send", {})
        assert exc.value.status_code == 403
        assert exc.value.server_message == "You cannot send messages in this chat"
        await http.close()


class TestChatsAPI:
    @pytest.mark.asyncio
    async def test_active_parses_snapshots_and_caches(self):
        http, rec = make_http({("GET", "/api/chat/active"): (200, ACTIVE)})
        now = [0.0]
        chats = ChatsAPI(http, cache_ttl=2.0, clock=lambda: now[0])

        rooms = await chats.active()
        assert rooms[0].id == "room-1"
        assert not rooms[0].is_active and rooms[0].has_joined
        assert [p.username for p in rooms[0].other_participants] == ["bob"]

        await chats.active()
        assert len(rec.requests) == 1
        await chats.active(force_refresh=True)
        assert len(rec.requests) == 2
        now[0] = 5.0
        await chats.active()
        assert len(rec.requests) == 3
        await http.close()

    @pytest.mark.asyncio
    async def test_messages(self):
        http, rec = make_http({("GET", "/api/chat/messages/room-1"): (200, MESSAGES)})
        msgs = await ChatsAPI(http).messages("room-1")
        assert [(m.id, m.text, m.author_username) for m in msgs] == [("m1", "hi", "bob")]
        await http.close()

    @pytest.mark.asyncio
    async def test_send_posts_room_and_text(self):
        stored = {"id": "m2", "message": "yo", "created_at": "2025-04-06T09:15:00Z", "user_id": "u1", "chat_room_id": "room-1"}
        http, rec = make_http({("POST", "/api/chat/send"): (200, {"message": "Message sent successfully", "chatMessage": stored})})
        msg = await ChatsAPI(http).send("room-1", "yo")
        assert msg.id == "m2" and msg.text == "yo"
        assert json.loads(rec.requests[0].content) == {"chatRoomId": "room-1", "message": "yo"}
        await http.close()

    @pytest.mark.asyncio
    async def test_send_server_rejection_becomes_send_error(self):
        http, _ = make_http({("POST", "/api/chat/send"): (403, {"message": "You cannot send messages in this chat"})})
        with pytest.raises(SendError) as exc:
            await ChatsAPI(http).send("room-1", "yo")
        assert exc.value.is_server_error
        assert exc.value.server_message == "You cannot send messages in this chat"
        await http.close()

    @pytest.mark.asyncio
    async def test_send_network_failure_becomes_send_error(self):
        http, _ = make_http({("POST", "/api/chat/send"): httpx.ConnectError("Connection refused")})
        with pytest.raises(SendError) as exc:
            await ChatsAPI(http).send("room-1", "yo")
        assert not exc.value.is_server_error
        assert exc.value.user_message == "Failed to send message: Connection refused"
        await http.close()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(200, json={"message": "Message sent successfully"}),
        httpx.Response(200, text="<html>proxy</html>"),
        httpx.Response(200, json={"chatMessage": {"message": "no id"}}),
    ], ids=["missing-chat-message", "html-body", "invalid-chat-message"])
    async def test_unusable_success_body_becomes_send_error(self, response):
        http, _ = make_http({("POST", "/api/chat/send"): response})
        with pytest.raises(SendError) as exc:
            await ChatsAPI(http).send("room-1", "yo")
        assert exc.value.user_message == "Failed to send message: Malformed send response"
        await http.close()

    @pytest.mark.asyncio
    async def test_request_accept_decline_invalidate_the_cache(self):
        http, rec = make_http({
            ("GET", "/api/chat/active"): (200, ACTIVE),
            ("POST", "/api/chat/request"): (200, {"message": "Chat request sent", "chatRoomId": "room-9"}),
            ("POST", "/api/chat/accept"): (200, {"message": "Chat request accepted", "chatRoomId": "room-9"}),
            ("POST", "/api/chat/decline"): (200, {"message": "Chat request declined"}),
        })
        chats = ChatsAPI(http, cache_ttl=60)
        await chats.active()
        assert await chats.request("u2") == "room-9"
        await chats.active()
        await chats.accept("room-9")
        await chats.decline("room-9")
        await chats.active()
        paths = [r.url.path for r in rec.requests]
        assert paths.count("/api/chat/active") == 3
        assert json.loads(rec.requests[1].content) == {"recipientId": "u2"}
        await http.close()

    @pytest.mark.asyncio
    async def test_notifications(self):
        http, rec = make_http({
            ("GET", "/api/chat/notifications"): (200, {"notifications": [
                {"id": "n1", "type": "chat_request", "message": "bob wants to chat", "is_read": False,
                 "created_at": "2025-04-06T09:00:00Z", "sender": {"id": "u2", "username": "bob"}, "chat_room_id": "room-1"},
            ]}),
            ("POST", "/api/chat/markNotificationRead"): (200, {"message": "Notification marked as read"}),
        })
        chats = ChatsAPI(http)
        items = await chats.notifications()
        assert items[0].is_request
        await chats.mark_notification_read("n1")
        assert json.loads(rec.requests[1].content) == {"notificationId": "n1"}
        await http.close()


class TestAuth:
    @pytest.mark.asyncio
    async def test_login_stores_token(self):
        http, rec = make_http({("POST", "/api/auth/login"): (200, {"id": "u1", "username": "alice", "email": "a@x", "token": "jwt"})}, token=None)
        result = await Auth(http).login("alice", "pw")
        assert result["username"] == "alice"
        assert http.token == "jwt"
        assert "Authorization" not in rec.requests[0].headers
        await http.close()

    @pytest.mark.asyncio
    async def test_bad_credentials(self):
        http, _ = make_http({("POST", "/api/auth/login"): (400, {"message": "Invalid credentials"})}, token=None)
        with pytest.raises(AuthError) as exc:
            await Auth(http).login("alice", "wrong")
        assert "Invalid credentials" in str(exc.value)
        assert http.token is None
        await http.close()

    @pytest.mark.asyncio
    async def test_logout_clears_token(self):
        http, _ = make_http({("POST", "/api/auth/logout"): (200, {"message": "Logged out"})})
        await Auth(http).logout()
        assert http.token is None
        await http.close()


class TestAsyncPairChat:
    @pytest.mark.asyncio
    async def test_open_chat_requires_login(self):
        client = AsyncPairChat(base_url="http://chat.test")
        with pytest.raises(ConnectionError):
            await client.open_chat("room-1")
        await client.close()

    @pytest.mark.asyncio
    async def test_open_chat_wires_the_rest_capabilities(self):
        rec = Recorder({
            ("GET", "/api/chat/active"): (200, ACTIVE),
            ("GET", "/api/chat/messages/room-1"): (200, MESSAGES),
        })
        client = AsyncPairChat(
            access_token="tok", base_url="http://chat.test",
            config=ChatConfig(activation_interval=60, message_interval=60),
            transport=httpx.MockTransport(rec),
        )
        ctrl = await client.open_chat("room-1")
        view = ctrl.current_state()
        assert view.phase == ChatPhase.READY
        assert view.counterpart_name == "bob"
        assert view.polling
        await ctrl.aclose()
        await client.close()

    @pytest.mark.asyncio
    async def test_malformed_send_response_posts_a_notice(self):
        rec = Recorder({
            ("GET", "/api/chat/active"): (200, ACTIVE),
            ("GET", "/api/chat/messages/room-1"): (200, MESSAGES),
            ("POST", "/api/chat/send"): httpx.Response(200, text="<html>proxy</html>"),
        })
        client = AsyncPairChat(
            access_token="tok", base_url="http://chat.test",
            config=ChatConfig(activation_interval=60, message_interval=60),
            transport=httpx.MockTransport(rec),
        )
        ctrl = await client.open_chat("room-1")
        assert await ctrl.on_send("hi") is None
        assert ctrl.current_state().notice == "Failed to send message: Malformed send response"
        await ctrl.aclose()
        await client.close()
