"""
pairchat: two-party chat client for Python.

Polls a REST chat backend whose chat-room activation is only eventually
consistent, and reconciles the noisy status it reports into a local
"is this chat ready" view.
"""

from pairchat.client import PairChat, AsyncPairChat
from pairchat.auth import Auth
from pairchat.chats import ChatsAPI
from pairchat.config import ChatConfig
from pairchat.controller import ChatSessionController
from pairchat.reconciler import StatusReconciler
from pairchat.polling import ActivationPoller, MessagePoller
from pairchat.sender import MessageSender
from pairchat.errors import (
    PairChatError,
    HttpError,
    AuthError,
    SessionError,
    ConnectionError,
    TransientFetchError,
    SendError,
)
from pairchat.models import ChatPhase, ChatView, LocalChatState, Message, SessionSnapshot

__version__ = "0.1.0"
__all__ = [
    "PairChat",
    "AsyncPairChat",
    "Auth",
    "ChatsAPI",
    "ChatConfig",
    "ChatSessionController",
    "StatusReconciler",
    "ActivationPoller",
    "MessagePoller",
    "MessageSender",
    "PairChatError",
    "HttpError",
    "AuthError",
    "SessionError",
    "ConnectionError",
    "TransientFetchError",
    "SendError",
    "ChatPhase",
    "ChatView",
    "LocalChatState",
    "Message",
    "SessionSnapshot",
]
