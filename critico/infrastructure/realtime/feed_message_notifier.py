# critico/infrastructure/realtime/feed_message_notifier.py
from __future__ import annotations

from sqlalchemy.orm import Session

from critico.core.interfaces.message_notifier import MessageChangedEvent, MessageNotifier
from critico.infrastructure.database.base_model import as_utc
from critico.infrastructure.database.session import on_commit
from critico.infrastructure.realtime.change_feed import ChangeEvent, ChangeFeed, ChangeKind, change_feed

MESSAGES_TABLE = "tbMessages"


def message_row(msg) -> dict:
    created = as_utc(msg.created_at)
    return {
        "id": int(msg.id),
        "chat_id": int(msg.chat_id),
        "sender_id": int(msg.sender_id),
        "receiver_id": msg.receiver_id,
        "message_type": msg.message_type,
        "product_id": msg.product_id,
        "owner_id": msg.owner_id,
        "tester_id": msg.tester_id,
        "comment_token_id": msg.comment_token_id,
        "read": bool(msg.read),
        "created_at": created.isoformat() if created else None,
    }


class FeedMessageNotifier(MessageNotifier):
    """Queues message changes on the session; they hit the feed after commit."""

    def __init__(self, session: Session, *, feed: ChangeFeed | None = None) -> None:
        self._session = session
        self._feed = feed or change_feed

    def _queue(self, event: MessageChangedEvent) -> None:
        feed = self._feed
        change = ChangeEvent(
            table=MESSAGES_TABLE,
            kind=ChangeKind(event.kind),
            row=event.row,
            actor_id=event.actor_id,
        )
        on_commit(self._session, lambda: feed.publish(change))

    def notify_message_inserted(self, message, *, actor_id: int | None) -> None:
        self._queue(MessageChangedEvent(kind="INSERT", row=message_row(message), actor_id=actor_id))

    def notify_message_updated(self, message, *, actor_id: int | None) -> None:
        self._queue(MessageChangedEvent(kind="UPDATE", row=message_row(message), actor_id=actor_id))
