"""
Status reconciliation. Derives a trustworthy local chat state from a
possibly stale session snapshot plus the locally observed message count.

Messages existing for a session prove it was usable at least once, so a
non-empty message list forces the session active and joined regardless of
the flags the backend reports.
"""

from pairchat.models.session import SessionSnapshot
from pairchat.models.state import ChatPhase, LocalChatState


class StatusReconciler:
    def compute(self, snapshot: SessionSnapshot, message_count: int) -> LocalChatState:
        forced = message_count > 0
        return LocalChatState(
            is_active=forced or snapshot.is_active,
            has_joined=forced or snapshot.has_joined,
            is_ready=forced or (snapshot.is_active and snapshot.has_joined),
        )

    def needs_polling(self, snapshot: SessionSnapshot, message_count: int) -> bool:
        """Poll until the snapshot itself is settled.

        The message count is deliberately ignored: the forced override makes
        the chat usable, but the snapshot should still catch up.
        """
        return not (snapshot.is_active and snapshot.has_joined)

    @staticmethod
    def phase(state: LocalChatState) -> ChatPhase:
        if state.is_ready:
            return ChatPhase.READY
        if state.is_active:
            return ChatPhase.VERIFYING
        return ChatPhase.PENDING
