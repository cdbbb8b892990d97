# critico/sessions/backend.py
"""What the session controllers need from the server, one transaction per call."""
from __future__ import annotations

from dataclasses import dataclass

from critico.entities.chat_preview import ConversationList
from critico.entities.message import ChatMessage
from critico.infrastructure.database.session import db_session
from critico.infrastructure.realtime.change_feed import ChangeFeed
from critico.services.request_service import AcceptResult
from critico.services.service_factory import build_services


@dataclass(frozen=True)
class ChatSnapshot:
    chat_id: int
    partner_id: int
    messages: list[ChatMessage]
    product_owners: dict[int, int]


class ChatBackend:
    def __init__(self, *, feed: ChangeFeed | None = None) -> None:
        self._feed = feed

    def open_chat(self, *, user_id: int, partner_id: int) -> ChatSnapshot:
        with db_session() as session:
            svc = build_services(session, feed=self._feed)
            chat = svc.chats.get_or_create_direct_chat(user_id=user_id, partner_id=partner_id)
            svc.messages.mark_read(chat_id=chat.id, user_id=user_id)
            messages = svc.messages.list_history(chat_id=chat.id, viewer_id=user_id)

            owners: dict[int, int] = {}
            for m in messages:
                if m.product_id is not None and m.product_id not in owners:
                    owners[m.product_id] = svc.products.get_owner_id(m.product_id)

        return ChatSnapshot(chat_id=int(chat.id), partner_id=int(partner_id), messages=messages, product_owners=owners)

    def get_message(self, *, message_id: int, viewer_id: int) -> ChatMessage:
        with db_session() as session:
            return build_services(session, feed=self._feed).messages.get_message(
                message_id=message_id, viewer_id=viewer_id
            )

    def product_owner_id(self, product_id: int) -> int:
        with db_session() as session:
            return build_services(session, feed=self._feed).products.get_owner_id(product_id)

    def mark_read(self, *, chat_id: int, user_id: int, message_ids: list[int] | None = None) -> list[int]:
        with db_session() as session:
            return build_services(session, feed=self._feed).messages.mark_read(
                chat_id=chat_id, user_id=user_id, message_ids=message_ids
            )

    def send_direct(self, *, chat_id: int, sender_id: int, content: str) -> ChatMessage:
        with db_session() as session:
            return build_services(session, feed=self._feed).messages.send_direct(
                chat_id=chat_id, sender_id=sender_id, content=content
            )

    def accept_request(self, *, message_id: int, actor_id: int, await_redemption: bool = False) -> AcceptResult:
        with db_session() as session:
            return build_services(session, feed=self._feed).requests.accept(
                message_id=message_id, actor_id=actor_id, await_redemption=await_redemption
            )

    def decline_request(self, *, message_id: int, actor_id: int) -> ChatMessage:
        with db_session() as session:
            return build_services(session, feed=self._feed).requests.decline(message_id=message_id, actor_id=actor_id)

    def list_conversations(self, *, user_id: int) -> ConversationList:
        with db_session() as session:
            return build_services(session, feed=self._feed).messages.list_conversations(user_id=user_id)

    def pending_request_count(self, *, owner_id: int) -> int:
        with db_session() as session:
            return build_services(session, feed=self._feed).requests.pending_count(owner_id=owner_id)
