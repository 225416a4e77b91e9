"""Basic unit tests for the pairchat package."""

from pairchat import (
    AsyncPairChat,
    PairChat,
    PairChatError,
    HttpError,
    AuthError,
    SessionError,
    ConnectionError,
    TransientFetchError,
    SendError,
    ChatConfig,
    __version__,
)


def test_version():
    assert __version__ == "0.1.0"


def test_public_exports():
    assert PairChat is not None
    assert AsyncPairChat is not None


def test_error_hierarchy():
    for cls in (HttpError, AuthError, SessionError, ConnectionError, TransientFetchError, SendError):
        assert issubclass(cls, PairChatError)


def test_error_attributes():
    err = PairChatError(code="test_code", message="something broke")
    assert err.code == "test_code"
    assert str(err) == "something broke"
    assert err.details is None

    err_with_details = SessionError("Chat not found", details={"session_id": "123"})
    assert err_with_details.code == "session_error"
    assert err_with_details.details == {"session_id": "123"}


def test_send_error_distinguishes_server_and_network_failures():
    server = SendError("HTTP 403", status_code=403, server_message="You cannot send messages in this chat")
    assert server.is_server_error
    assert server.user_message == "Failed to send message: You cannot send messages in this chat"

    network = SendError("Connection refused")
    assert not network.is_server_error
    assert network.user_message == "Failed to send message: Connection refused"


def test_default_config():
    cfg = ChatConfig()
    assert cfg.activation_interval == 3.0
    assert cfg.message_interval == 5.0
    assert cfg.notice_ttl == 5.0
