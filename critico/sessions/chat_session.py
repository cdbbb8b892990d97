# critico/sessions/chat_session.py
"""One open direct conversation of a user session.

Keeps the ordered message list of the chat, appends own messages
optimistically and merges what other participants write through the
``chat`` channel. Errors never escape: they become an ``Alert`` for the
listeners and the local list stays as it was.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from critico.core.exceptions import AppError, ConflictError
from critico.core.message_types import CHAT_VISIBLE_TYPES
from critico.entities.message import ChatMessage
from critico.infrastructure.realtime.change_feed import ChangeEvent, ChangeKind
from critico.infrastructure.realtime.feed_message_notifier import MESSAGES_TABLE
from critico.sessions.alerts import Alert, alert_for
from critico.sessions.backend import ChatBackend
from critico.sessions.channels import ChannelRegistry
from critico.sessions.session_store import SessionStore

logger = logging.getLogger(__name__)

CHAT_SLOT = "chat"

_VISIBLE = frozenset(t.value for t in CHAT_VISIBLE_TYPES)


class ChatSessionController:
    def __init__(self, *, session: SessionStore, backend: ChatBackend, channels: ChannelRegistry) -> None:
        self._session = session
        self._backend = backend
        self._channels = channels

        self._lock = threading.RLock()
        self._messages: list[ChatMessage] = []
        self._chat_id: int | None = None
        self._partner_id: int | None = None
        self._owners: dict[int, int] = {}

        self._change_listeners: list[Callable[[list[ChatMessage]], None]] = []
        self._alert_listeners: list[Callable[[Alert], None]] = []

    # -------------------------
    # State
    # -------------------------

    @property
    def chat_id(self) -> int | None:
        return self._chat_id

    @property
    def partner_id(self) -> int | None:
        return self._partner_id

    @property
    def messages(self) -> list[ChatMessage]:
        with self._lock:
            return list(self._messages)

    def product_owner(self, product_id: int | None) -> int | None:
        if product_id is None:
            return None
        return self._owners.get(product_id)

    def on_change(self, listener: Callable[[list[ChatMessage]], None]) -> None:
        self._change_listeners.append(listener)

    def on_alert(self, listener: Callable[[Alert], None]) -> None:
        self._alert_listeners.append(listener)

    def _notify(self) -> None:
        snapshot = self.messages
        for listener in list(self._change_listeners):
            listener(snapshot)

    def _alert(self, exc: Exception) -> None:
        alert = alert_for(exc)
        logger.warning("Chat alert for user %s: %s (%s)", self._session.user_id, alert.message, alert.kind)
        for listener in list(self._alert_listeners):
            listener(alert)

    def _merge(self, incoming: list[ChatMessage]) -> None:
        with self._lock:
            by_id = {m.id: m for m in self._messages}
            for msg in incoming:
                by_id[msg.id] = msg
            self._messages = sorted(by_id.values(), key=lambda m: m.sort_key)

    def _patch(self, message_id: int, *, message_type: str | None, read: bool | None) -> bool:
        """Apply a state change to a local message.

        A message whose new type is not shown in a chat window leaves the
        list, so the live view matches what a fresh ``open`` loads.
        """
        with self._lock:
            for i, msg in enumerate(self._messages):
                if msg.id == message_id:
                    if message_type is not None and message_type not in _VISIBLE:
                        del self._messages[i]
                    else:
                        self._messages[i] = msg.with_state(message_type=message_type, read=read)
                    return True
        return False

    def _has(self, message_id: int) -> bool:
        with self._lock:
            return any(m.id == message_id for m in self._messages)

    # -------------------------
    # Operations
    # -------------------------

    def open(self, partner_id: int) -> list[ChatMessage] | None:
        try:
            user_id = self._session.require_user_id()
            snapshot = self._backend.open_chat(user_id=user_id, partner_id=int(partner_id))
        except (AppError, SQLAlchemyError) as e:
            self._alert(e)
            return None

        with self._lock:
            self._chat_id = snapshot.chat_id
            self._partner_id = snapshot.partner_id
            self._owners.update(snapshot.product_owners)
            self._messages = sorted(snapshot.messages, key=lambda m: m.sort_key)

        created = self._channels.open(
            CHAT_SLOT,
            snapshot.chat_id,
            table=MESSAGES_TABLE,
            callback=self._on_change_event,
            filters={"chat_id": snapshot.chat_id},
        )
        logger.info(
            "User %s opened chat %s (%s channel)",
            user_id,
            snapshot.chat_id,
            "new" if created else "reused",
        )
        self._notify()
        return self.messages

    def send(self, text: str | None) -> ChatMessage | None:
        if not (text or "").strip():
            return None

        try:
            user_id = self._session.require_user_id()
            if self._chat_id is None:
                raise ConflictError("Kein Chat geöffnet.")
            msg = self._backend.send_direct(chat_id=self._chat_id, sender_id=user_id, content=text)
        except (AppError, SQLAlchemyError) as e:
            self._alert(e)
            return None

        # a read-flag update for it may already have landed during the send
        if not self._has(msg.id):
            self._merge([msg])
        self._notify()
        return msg

    def accept_request(self, message_id: int, *, await_redemption: bool = False) -> ChatMessage | None:
        try:
            user_id = self._session.require_user_id()
            result = self._backend.accept_request(
                message_id=int(message_id), actor_id=user_id, await_redemption=await_redemption
            )
        except (AppError, SQLAlchemyError) as e:
            self._alert(e)
            return None

        if result.request.product_id is not None:
            self._owners[result.request.product_id] = user_id
        self._patch(result.request.id, message_type=result.request.message_type, read=result.request.read)
        if result.token_message.chat_id == self._chat_id:
            self._merge([result.token_message])
        self._notify()
        return result.request

    def decline_request(self, message_id: int) -> ChatMessage | None:
        try:
            user_id = self._session.require_user_id()
            declined = self._backend.decline_request(message_id=int(message_id), actor_id=user_id)
        except (AppError, SQLAlchemyError) as e:
            self._alert(e)
            return None

        self._patch(declined.id, message_type=declined.message_type, read=declined.read)
        self._notify()
        return declined

    def close(self) -> None:
        self._channels.release(CHAT_SLOT)
        with self._lock:
            chat_id = self._chat_id
            self._chat_id = None
            self._partner_id = None
            self._messages = []
        if chat_id is not None:
            logger.info("User %s closed chat %s", self._session.user_id, chat_id)

    # -------------------------
    # Realtime
    # -------------------------

    def _on_change_event(self, event: ChangeEvent) -> None:
        row = event.row
        user_id = self._session.user_id
        if user_id is None or row.get("chat_id") != self._chat_id:
            return

        try:
            if event.kind is ChangeKind.INSERT:
                # own writes were appended when they were made
                if event.actor_id == user_id:
                    return
                if row.get("message_type") not in _VISIBLE or self._has(row["id"]):
                    return
                self._merge_remote(row["id"], user_id)
            else:
                patched = self._patch(row["id"], message_type=row.get("message_type"), read=row.get("read"))
                if not patched:
                    if row.get("message_type") not in _VISIBLE:
                        return
                    self._merge_remote(row["id"], user_id)
        except (AppError, SQLAlchemyError) as e:
            self._alert(e)
            return

        self._notify()

    def _merge_remote(self, message_id: int, user_id: int) -> None:
        msg = self._backend.get_message(message_id=message_id, viewer_id=user_id)
        if msg.product_id is not None and msg.product_id not in self._owners:
            self._owners[msg.product_id] = self._backend.product_owner_id(msg.product_id)
        self._merge([msg])

        # the chat is on screen, so whatever arrives for us is read
        if msg.receiver_id == user_id and not msg.read:
            self._backend.mark_read(chat_id=msg.chat_id, user_id=user_id, message_ids=[msg.id])
            self._patch(msg.id, message_type=None, read=True)
