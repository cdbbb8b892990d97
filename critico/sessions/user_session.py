# critico/sessions/user_session.py
from __future__ import annotations

import logging

from critico.infrastructure.realtime.change_feed import ChangeFeed, change_feed
from critico.sessions.backend import ChatBackend
from critico.sessions.badge import BadgeCounter
from critico.sessions.channels import ChannelRegistry
from critico.sessions.chat_session import ChatSessionController
from critico.sessions.conversation_list import ConversationListController
from critico.sessions.debounce import TimerFactory
from critico.sessions.pending_requests import PendingRequestsWatcher
from critico.sessions.session_store import SessionStore

logger = logging.getLogger(__name__)


class UserSession:
    """Everything one connected user owns: identity, channels, controllers, badge."""

    def __init__(
        self,
        *,
        user_id: int,
        claims: dict | None = None,
        feed: ChangeFeed | None = None,
        backend: ChatBackend | None = None,
        debounce_seconds: float | None = None,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        feed = feed or change_feed

        self.store = SessionStore()
        self.store.login(user_id, claims)

        self.backend = backend or ChatBackend(feed=feed)
        self.channels = ChannelRegistry(feed)
        self.badge = BadgeCounter()

        self.chat = ChatSessionController(session=self.store, backend=self.backend, channels=self.channels)
        self.conversations = ConversationListController(
            session=self.store,
            backend=self.backend,
            channels=self.channels,
            badge=self.badge,
            debounce_seconds=debounce_seconds,
            timer_factory=timer_factory,
        )
        self.requests = PendingRequestsWatcher(session=self.store, backend=self.backend, channels=self.channels)

    @property
    def user_id(self) -> int | None:
        return self.store.user_id

    def close(self) -> None:
        user_id = self.store.user_id
        self.chat.close()
        self.conversations.close()
        self.requests.close()
        self.channels.close()
        self.badge.reset()
        self.store.logout()
        logger.info("Session of user %s closed", user_id)
