# critico/presenters/message_bubble.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import tzinfo

from critico.core.message_types import MessageType, is_request_family
from critico.entities.message import QR_NOTICE, ChatMessage
from critico.presenters.time_format import format_clock

STATUS_LABELS = {
    MessageType.REQUEST: "Möchte dieses Produkt testen",
    MessageType.REQUEST_QR_READY: QR_NOTICE,
    MessageType.REQUEST_ACCEPTED: "Aktiviert",
    MessageType.REQUEST_DECLINED: "Abgelehnt",
}


@dataclass(frozen=True)
class MessageBubble:
    id: int
    kind: str  # text | request | token
    content: str
    is_own: bool
    time_label: str
    status_label: str | None = None
    show_actions: bool = False
    show_token: bool = False
    token_url: str | None = None
    sender_name: str | None = None


def build_bubble(
    msg: ChatMessage,
    *,
    viewer_id: int,
    product_owner_id: int | None = None,
    tz: tzinfo | None = None,
) -> MessageBubble:
    owner_id = product_owner_id if product_owner_id is not None else msg.owner_id
    is_owner = owner_id is not None and owner_id == viewer_id
    common = dict(
        id=msg.id,
        is_own=msg.sender_id == viewer_id,
        time_label=format_clock(msg.created_at, tz=tz),
        sender_name=msg.sender.full_name if msg.sender else None,
    )

    if msg.comment_token_id is not None:
        return MessageBubble(
            kind="token",
            content=msg.content if is_owner else QR_NOTICE,
            status_label=QR_NOTICE,
            show_token=is_owner and bool(msg.token_url),
            token_url=msg.token_url if is_owner else None,
            **common,
        )

    if is_request_family(msg.message_type):
        return MessageBubble(
            kind="request",
            content=msg.content,
            status_label=STATUS_LABELS[msg.type],
            # only the owner answers, and only while it is open
            show_actions=is_owner and msg.type is MessageType.REQUEST,
            **common,
        )

    return MessageBubble(kind="text", content=msg.content, **common)


def build_bubbles(
    messages: list[ChatMessage],
    *,
    viewer_id: int,
    owners: dict[int, int] | None = None,
    tz: tzinfo | None = None,
) -> list[MessageBubble]:
    owners = owners or {}
    return [
        build_bubble(m, viewer_id=viewer_id, product_owner_id=owners.get(m.product_id), tz=tz)
        for m in messages
    ]
