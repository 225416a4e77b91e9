"""
pairchat error types.

Poll failures are TransientFetchError and never leave the pollers.
Send failures are SendError and are shown to the user as a notice.
"""

from typing import Any, Optional


class PairChatError(Exception):
    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class HttpError(PairChatError):
    def __init__(self, status_code: int, message: str, server_message: Optional[str] = None):
        super().__init__("http_error", message, {"status_code": status_code})
        self.status_code = status_code
        self.server_message = server_message


class AuthError(PairChatError):
    def __init__(self, message: str, code: str = "auth_error"):
        super().__init__(code, message)


class SessionError(PairChatError):
    def __init__(self, message: str, code: str = "session_error", details: Optional[dict[str, Any]] = None):
        super().__init__(code, message, details)


class ConnectionError(PairChatError):
    def __init__(self, message: str):
        super().__init__("connection_error", message)


class TransientFetchError(PairChatError):
    """A status or message poll failed. Recovered locally on the next tick."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__("transient_fetch", message, details)


class SendError(PairChatError):
    """A message send failed.

    ``server_message`` is set when the backend answered with a structured
    error payload; it is None for network-level failures.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
    ):
        super().__init__("send_error", message, {"status_code": status_code})
        self.status_code = status_code
        self.server_message = server_message

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None

    @property
    def user_message(self) -> str:
        return f"Failed to send message: {self.server_message or str(self)}"
