# critico/services/chat_service.py

import logging

from critico.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from critico.infrastructure.database.models.chat_model import ChatModel
from critico.repositories.chat_participant_repository import ChatParticipantRepository
from critico.repositories.chat_repository import ChatRepository, direct_key_for
from critico.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


class ChatService:
    def __init__(
        self,
        *,
        chat_repo: ChatRepository,
        part_repo: ChatParticipantRepository,
        user_repo: UserRepository,
    ) -> None:
        self._chat_repo = chat_repo
        self._part_repo = part_repo
        self._user_repo = user_repo

    def get_or_create_direct_chat(self, *, user_id: int, partner_id: int) -> ChatModel:
        """Idempotent: the same pair always lands in the same chat."""
        if int(user_id) == int(partner_id):
            raise ValidationError("Du kannst keinen Chat mit dir selbst starten.")
        if self._user_repo.get_by_id(partner_id) is None:
            raise NotFoundError("Benutzer nicht gefunden.")

        chat, created = self._chat_repo.get_or_create_direct(direct_key_for(user_id, partner_id))
        self._part_repo.ensure(chat_id=chat.id, user_id=user_id)
        self._part_repo.ensure(chat_id=chat.id, user_id=partner_id)

        if created:
            logger.info("Direct chat %s created for users %s/%s", chat.id, user_id, partner_id)
        return chat

    def get_or_create_product_chat(self, *, product_id: int) -> ChatModel:
        chat, created = self._chat_repo.get_or_create_for_product(product_id)
        if created:
            logger.info("Comment thread %s created for product %s", chat.id, product_id)
        return chat

    def get_direct_chat_for_member(self, *, chat_id: int, user_id: int) -> ChatModel:
        chat = self._chat_repo.get_by_id(chat_id)
        if chat is None or chat.product_id is not None:
            raise NotFoundError("Chat nicht gefunden.")
        if not self._part_repo.is_participant(chat_id=chat_id, user_id=user_id):
            raise ForbiddenError()
        return chat

    def get_partner_id(self, *, chat_id: int, user_id: int) -> int | None:
        partners = self._part_repo.list_partners(chat_id=chat_id, exclude_user_id=user_id)
        return int(partners[0].id) if partners else None
