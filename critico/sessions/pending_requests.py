# critico/sessions/pending_requests.py
from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from critico.core.exceptions import AppError
from critico.infrastructure.realtime.change_feed import ChangeEvent
from critico.infrastructure.realtime.feed_message_notifier import MESSAGES_TABLE
from critico.sessions.alerts import Alert, alert_for
from critico.sessions.backend import ChatBackend
from critico.sessions.channels import ChannelRegistry
from critico.sessions.session_store import SessionStore

logger = logging.getLogger(__name__)

REQUESTS_SLOT = "requests"


class PendingRequestsWatcher:
    """Open test requests waiting for the user's answer, as a live count."""

    def __init__(self, *, session: SessionStore, backend: ChatBackend, channels: ChannelRegistry) -> None:
        self._session = session
        self._backend = backend
        self._channels = channels
        self._count = 0
        self._listeners: list[Callable[[int], None]] = []
        self._alert_listeners: list[Callable[[Alert], None]] = []

    @property
    def count(self) -> int:
        return self._count

    def on_change(self, listener: Callable[[int], None]) -> None:
        self._listeners.append(listener)

    def on_alert(self, listener: Callable[[Alert], None]) -> None:
        self._alert_listeners.append(listener)

    def _alert(self, exc: Exception) -> None:
        alert = alert_for(exc)
        logger.warning("Pending requests alert for user %s: %s", self._session.user_id, alert.message)
        for listener in list(self._alert_listeners):
            listener(alert)

    def watch(self) -> int | None:
        try:
            user_id = self._session.require_user_id()
        except AppError as e:
            self._alert(e)
            return None

        self._channels.open(
            REQUESTS_SLOT,
            user_id,
            table=MESSAGES_TABLE,
            callback=self._on_change_event,
            filters={"owner_id": user_id},
        )
        self.refresh()
        return self._count

    def refresh(self) -> None:
        user_id = self._session.user_id
        if user_id is None:
            return
        try:
            count = self._backend.pending_request_count(owner_id=user_id)
        except (AppError, SQLAlchemyError) as e:
            self._alert(e)
            return

        if count != self._count:
            self._count = count
            for listener in list(self._listeners):
                listener(count)

    def _on_change_event(self, event: ChangeEvent) -> None:
        self.refresh()

    def close(self) -> None:
        self._channels.release(REQUESTS_SLOT)
