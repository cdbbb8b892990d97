# critico/presenters/chat_list.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo

from critico.core.message_types import MessageType
from critico.entities.chat_preview import ChatPreview
from critico.presenters.time_format import format_list_time

PREVIEW_TEXTS = {
    MessageType.REQUEST.value: "Möchte Produkt testen",
    MessageType.REQUEST_ACCEPTED.value: "Anfrage akzeptiert",
    MessageType.REQUEST_DECLINED.value: "Anfrage abgelehnt",
}

MAX_BADGE = 99


@dataclass(frozen=True)
class ChatListItem:
    chat_id: int
    partner_id: int
    title: str
    initials: str
    picture: str | None
    preview: str
    time_label: str
    unread_label: str | None
    highlight: str | None  # request | accepted | declined | unread


def badge_label(count: int) -> str | None:
    if count <= 0:
        return None
    return f"{MAX_BADGE}+" if count > MAX_BADGE else str(count)


def build_item(preview: ChatPreview, *, now: datetime | None = None, tz: tzinfo | None = None) -> ChatListItem:
    type_ = preview.last_message_type
    if type_ == MessageType.REQUEST.value:
        highlight = "request"
    elif type_ == MessageType.REQUEST_ACCEPTED.value:
        highlight = "accepted"
    elif type_ == MessageType.REQUEST_DECLINED.value:
        highlight = "declined"
    else:
        highlight = "unread" if preview.unread_count > 0 else None

    return ChatListItem(
        chat_id=preview.chat_id,
        partner_id=preview.partner_id,
        title=preview.partner_full_name,
        initials=(preview.partner_name[:1] + preview.partner_surname[:1]).upper(),
        picture=preview.partner_picture,
        preview=PREVIEW_TEXTS.get(type_, preview.last_message),
        time_label=format_list_time(preview.last_message_time, now=now, tz=tz),
        unread_label=badge_label(preview.unread_count),
        highlight=highlight,
    )


def build_items(previews: list[ChatPreview], *, now: datetime | None = None, tz: tzinfo | None = None) -> list[ChatListItem]:
    return [build_item(p, now=now, tz=tz) for p in previews]
