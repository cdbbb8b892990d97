# critico/entities/message.py
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from critico.core.message_types import MessageType, parse_type
from critico.entities.user import UserMini
from critico.infrastructure.database.base_model import as_utc

QR_NOTICE = "QR-Code erstellt"


@dataclass(frozen=True)
class ChatMessage:
    id: int
    chat_id: int
    content: str
    created_at: datetime
    sender_id: int
    receiver_id: Optional[int]
    message_type: str
    read: bool
    product_id: Optional[int] = None
    owner_id: Optional[int] = None
    tester_id: Optional[int] = None
    comment_token_id: Optional[int] = None
    stars: Optional[int] = None
    sender: Optional[UserMini] = None
    # redemption URL, only ever filled for the product owner
    token_url: Optional[str] = None

    @property
    def sort_key(self) -> tuple[datetime, int]:
        return (self.created_at, self.id)

    @property
    def type(self) -> MessageType:
        return parse_type(self.message_type)

    def with_state(self, *, message_type: str | None = None, read: bool | None = None) -> "ChatMessage":
        changes = {}
        if message_type is not None:
            changes["message_type"] = message_type
        if read is not None:
            changes["read"] = read
        return replace(self, **changes) if changes else self


def is_masked_for(msg, viewer_id: int) -> bool:
    """Token messages and qr-ready requests are hidden from everybody but the owner."""
    hidden = msg.comment_token_id is not None or msg.message_type == MessageType.REQUEST_QR_READY.value
    return hidden and msg.owner_id != viewer_id


def to_chat_message(msg, sender=None, *, viewer_id: int) -> ChatMessage:
    content = msg.content
    token_url = None

    if is_masked_for(msg, viewer_id):
        content = QR_NOTICE
    elif msg.comment_token_id is not None:
        token_url = msg.content

    return ChatMessage(
        id=int(msg.id),
        chat_id=int(msg.chat_id),
        content=content,
        created_at=as_utc(msg.created_at),
        sender_id=int(msg.sender_id),
        receiver_id=msg.receiver_id,
        message_type=msg.message_type,
        read=bool(msg.read),
        product_id=msg.product_id,
        owner_id=msg.owner_id,
        tester_id=msg.tester_id,
        comment_token_id=msg.comment_token_id,
        stars=msg.stars,
        sender=UserMini.from_model(sender) if sender is not None else None,
        token_url=token_url,
    )
