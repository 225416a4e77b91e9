from pairchat.models.message import Message
from pairchat.models.notification import Notification, NotificationSender
from pairchat.models.session import LatestMessage, Participant, SessionSnapshot
from pairchat.models.state import ChatPhase, ChatView, LocalChatState

__all__ = [
    "Message",
    "Notification",
    "NotificationSender",
    "LatestMessage",
    "Participant",
    "SessionSnapshot",
    "ChatPhase",
    "ChatView",
    "LocalChatState",
]
