# critico/repositories/chat_repository.py

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.chat_model import ChatModel
from critico.infrastructure.database.models.chat_participant_model import ChatParticipantModel


def direct_key_for(user_a: int, user_b: int) -> str:
    low, high = sorted((int(user_a), int(user_b)))
    return f"{low}:{high}"


class ChatRepository(BaseRepository[ChatModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, chat_id: int) -> ChatModel | None:
        return self._session.get(ChatModel, chat_id)

    def get_by_direct_key(self, direct_key: str) -> ChatModel | None:
        stmt = select(ChatModel).where(ChatModel.direct_key == direct_key)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_product_id(self, product_id: int) -> ChatModel | None:
        stmt = select(ChatModel).where(ChatModel.product_id == product_id)
        return self._session.execute(stmt).scalar_one_or_none()

    def get_or_create_direct(self, direct_key: str) -> tuple[ChatModel, bool]:
        existing = self.get_by_direct_key(direct_key)
        if existing is not None:
            return existing, False
        try:
            with self._session.begin_nested():
                chat = self.add(ChatModel(direct_key=direct_key))
            return chat, True
        except IntegrityError:
            # concurrent creator won; only the savepoint was rolled back
            return self.get_by_direct_key(direct_key), False

    def get_or_create_for_product(self, product_id: int) -> tuple[ChatModel, bool]:
        existing = self.get_by_product_id(product_id)
        if existing is not None:
            return existing, False
        try:
            with self._session.begin_nested():
                chat = self.add(ChatModel(product_id=product_id))
            return chat, True
        except IntegrityError:
            return self.get_by_product_id(product_id), False

    def list_chat_ids_for_user(self, user_id: int) -> list[int]:
        stmt = select(ChatParticipantModel.chat_id).where(ChatParticipantModel.user_id == user_id)
        return [int(x) for x in self._session.execute(stmt).scalars().all()]

    def filter_direct(self, chat_ids: list[int]) -> list[ChatModel]:
        if not chat_ids:
            return []
        stmt = (
            select(ChatModel)
            .where(ChatModel.id.in_(chat_ids), ChatModel.product_id.is_(None))
            .order_by(ChatModel.id.asc())
        )
        return list(self._session.execute(stmt).scalars().all())
