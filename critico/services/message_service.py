# critico/services/message_service.py

import logging

from critico.core.exceptions import NotFoundError, ValidationError
from critico.core.interfaces.message_notifier import MessageNotifier
from critico.core.message_types import MessageType, chat_visible_values
from critico.entities.chat_preview import NO_MESSAGES_YET, ChatPreview, ConversationList
from critico.entities.message import ChatMessage, to_chat_message
from critico.infrastructure.database.base_model import as_utc
from critico.infrastructure.database.models.message_model import MessageModel
from critico.repositories.chat_participant_repository import ChatParticipantRepository
from critico.repositories.chat_repository import ChatRepository
from critico.repositories.message_repository import MessageRepository
from critico.services.chat_service import ChatService

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(
        self,
        *,
        chat_repo: ChatRepository,
        part_repo: ChatParticipantRepository,
        msg_repo: MessageRepository,
        chat_service: ChatService,
        notifier: MessageNotifier | None = None,
    ) -> None:
        self._chat_repo = chat_repo
        self._part_repo = part_repo
        self._msg_repo = msg_repo
        self._chat_service = chat_service
        self._notifier = notifier

    def _emit_inserted(self, msg: MessageModel, actor_id: int) -> None:
        if self._notifier:
            self._notifier.notify_message_inserted(msg, actor_id=actor_id)

    def _emit_updated(self, msg: MessageModel, actor_id: int) -> None:
        if self._notifier:
            self._notifier.notify_message_updated(msg, actor_id=actor_id)

    # -------------------------
    # Direct chat
    # -------------------------

    def send_direct(self, *, chat_id: int, sender_id: int, content: str | None) -> ChatMessage:
        text = (content or "").strip()
        if not text:
            raise ValidationError("Nachricht darf nicht leer sein.")

        self._chat_service.get_direct_chat_for_member(chat_id=chat_id, user_id=sender_id)
        receiver_id = self._chat_service.get_partner_id(chat_id=chat_id, user_id=sender_id)

        msg = self._msg_repo.add(
            MessageModel(
                chat_id=chat_id,
                sender_id=sender_id,
                receiver_id=receiver_id,
                message_type=MessageType.DIRECT.value,
                content=text,
                read=False,
            )
        )
        self._emit_inserted(msg, sender_id)
        return self.get_message(message_id=msg.id, viewer_id=sender_id)

    def list_history(self, *, chat_id: int, viewer_id: int) -> list[ChatMessage]:
        self._chat_service.get_direct_chat_for_member(chat_id=chat_id, user_id=viewer_id)
        rows = self._msg_repo.list_rows_by_chat(chat_id=chat_id, message_types=chat_visible_values())
        return [to_chat_message(msg, sender, viewer_id=viewer_id) for msg, sender in rows]

    def get_message(self, *, message_id: int, viewer_id: int) -> ChatMessage:
        row = self._msg_repo.get_row(message_id=message_id)
        if row is None:
            raise NotFoundError("Nachricht nicht gefunden.")
        msg, sender = row
        if not self._part_repo.is_participant(chat_id=msg.chat_id, user_id=viewer_id):
            raise NotFoundError("Nachricht nicht gefunden.")
        return to_chat_message(msg, sender, viewer_id=viewer_id)

    def mark_read(self, *, chat_id: int, user_id: int, message_ids: list[int] | None = None) -> list[int]:
        self._chat_service.get_direct_chat_for_member(chat_id=chat_id, user_id=user_id)
        changed = self._msg_repo.mark_read(chat_id=chat_id, user_id=user_id, message_ids=message_ids)
        for msg in changed:
            self._emit_updated(msg, user_id)
        return [int(m.id) for m in changed]

    # -------------------------
    # Conversation list
    # -------------------------

    def list_conversations(self, *, user_id: int, q: str | None = None) -> ConversationList:
        """Direct chats of ``user_id``, newest first; the badge ignores ``q``."""
        visible = chat_visible_values()
        chats = self._chat_repo.filter_direct(self._chat_repo.list_chat_ids_for_user(user_id))

        previews: list[ChatPreview] = []
        for chat in chats:
            partners = self._part_repo.list_partners(chat_id=chat.id, exclude_user_id=user_id)
            if not partners:
                logger.debug("Chat %s has no partner for user %s, skipped", chat.id, user_id)
                continue
            partner = partners[0]

            last = self._msg_repo.last_message(chat_id=chat.id, message_types=visible)
            unread = self._msg_repo.list_unread(chat_id=chat.id, user_id=user_id, message_types=visible)

            if last is not None:
                last_view = to_chat_message(last, viewer_id=user_id)
                last_text, last_time, last_type = last_view.content, last_view.created_at, last_view.message_type
            else:
                last_text, last_time, last_type = NO_MESSAGES_YET, as_utc(chat.created_at), None

            previews.append(
                ChatPreview(
                    chat_id=int(chat.id),
                    partner_id=int(partner.id),
                    partner_name=partner.name,
                    partner_surname=partner.surname,
                    partner_picture=partner.picture,
                    partner_trustlevel=int(partner.trustlevel or 0),
                    last_message=last_text,
                    last_message_time=last_time,
                    last_message_type=last_type,
                    unread_count=len(unread),
                    has_unread_request=any(m.message_type == MessageType.REQUEST.value for m in unread),
                )
            )

        previews.sort(key=lambda p: (p.last_message_time, p.chat_id), reverse=True)
        badge = sum(p.unread_count for p in previews)
        return ConversationList(previews=[p for p in previews if p.matches(q)], badge=badge)
