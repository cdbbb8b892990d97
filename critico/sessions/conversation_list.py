# critico/sessions/conversation_list.py
from __future__ import annotations

import logging
import threading
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from critico.config.settings import settings
from critico.core.exceptions import AppError
from critico.core.message_types import MessageType, chat_visible_values
from critico.entities.chat_preview import ChatPreview
from critico.infrastructure.realtime.change_feed import ChangeEvent, ChangeKind
from critico.infrastructure.realtime.feed_message_notifier import MESSAGES_TABLE
from critico.sessions.alerts import Alert, alert_for
from critico.sessions.backend import ChatBackend
from critico.sessions.badge import BadgeCounter
from critico.sessions.channels import ChannelRegistry
from critico.sessions.debounce import Debouncer, TimerFactory
from critico.sessions.session_store import SessionStore

logger = logging.getLogger(__name__)

CONVERSATIONS_SLOT = "conversations"


class ConversationListController:
    """All direct chats of the user with previews, search and the unread badge."""

    def __init__(
        self,
        *,
        session: SessionStore,
        backend: ChatBackend,
        channels: ChannelRegistry,
        badge: BadgeCounter,
        debounce_seconds: float | None = None,
        timer_factory: TimerFactory | None = None,
    ) -> None:
        self._session = session
        self._backend = backend
        self._channels = channels
        self._badge = badge

        self._lock = threading.Lock()
        self._all: list[ChatPreview] = []
        self._query: str = ""

        delay = settings.conversation_reload_debounce_seconds if debounce_seconds is None else debounce_seconds
        self._debouncer = Debouncer(delay, self.reload, timer_factory=timer_factory)

        self._change_listeners: list[Callable[[list[ChatPreview]], None]] = []
        self._alert_listeners: list[Callable[[Alert], None]] = []

    @property
    def query(self) -> str:
        return self._query

    @property
    def previews(self) -> list[ChatPreview]:
        with self._lock:
            return [p for p in self._all if p.matches(self._query)]

    @property
    def badge(self) -> BadgeCounter:
        return self._badge

    def on_change(self, listener: Callable[[list[ChatPreview]], None]) -> None:
        self._change_listeners.append(listener)

    def on_alert(self, listener: Callable[[Alert], None]) -> None:
        self._alert_listeners.append(listener)

    def _notify(self) -> None:
        current = self.previews
        for listener in list(self._change_listeners):
            listener(current)

    def _alert(self, exc: Exception) -> None:
        alert = alert_for(exc)
        logger.warning("Conversation list alert for user %s: %s", self._session.user_id, alert.message)
        for listener in list(self._alert_listeners):
            listener(alert)

    def watch(self, q: str | None = None) -> list[ChatPreview] | None:
        try:
            user_id = self._session.require_user_id()
        except AppError as e:
            self._alert(e)
            return None

        self._query = (q or "").strip()
        created = self._channels.open(
            CONVERSATIONS_SLOT,
            user_id,
            table=MESSAGES_TABLE,
            callback=self._on_change_event,
            # a request turning qr-ready drops out of the previews
            filters={"message_type": set(chat_visible_values()) | {MessageType.REQUEST_QR_READY.value}},
            predicate=lambda row: user_id in (row.get("sender_id"), row.get("receiver_id")),
        )
        if created:
            logger.info("User %s watching conversations", user_id)
        return self.reload()

    def search(self, q: str | None) -> list[ChatPreview]:
        self._query = (q or "").strip()
        self._notify()
        return self.previews

    def reload(self) -> list[ChatPreview] | None:
        try:
            user_id = self._session.require_user_id()
            result = self._backend.list_conversations(user_id=user_id)
        except (AppError, SQLAlchemyError) as e:
            self._alert(e)
            return None

        with self._lock:
            self._all = list(result.previews)
        self._badge.set(result.badge)
        self._notify()
        return self.previews

    def _on_change_event(self, event: ChangeEvent) -> None:
        if event.kind is ChangeKind.INSERT:
            self._debouncer.cancel()
            self.reload()
        else:
            # read-flag flips come in bursts
            self._debouncer.trigger()

    def close(self) -> None:
        self._debouncer.cancel()
        self._channels.release(CONVERSATIONS_SLOT)
        with self._lock:
            self._all = []
