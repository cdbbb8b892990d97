# critico/repositories/chat_participant_repository.py

from sqlalchemy import select
from sqlalchemy.orm import Session

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.chat_participant_model import ChatParticipantModel
from critico.infrastructure.database.models.user_model import UserModel


class ChatParticipantRepository(BaseRepository[ChatParticipantModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get(self, *, chat_id: int, user_id: int) -> ChatParticipantModel | None:
        stmt = select(ChatParticipantModel).where(
            ChatParticipantModel.chat_id == chat_id,
            ChatParticipantModel.user_id == user_id,
        )
        return self._session.execute(stmt).scalars().first()

    def ensure(self, *, chat_id: int, user_id: int) -> ChatParticipantModel:
        existing = self.get(chat_id=chat_id, user_id=user_id)
        if existing:
            return existing
        return self.add(ChatParticipantModel(chat_id=chat_id, user_id=user_id))

    def is_participant(self, *, chat_id: int, user_id: int) -> bool:
        return self.get(chat_id=chat_id, user_id=user_id) is not None

    def list_partners(self, *, chat_id: int, exclude_user_id: int) -> list[UserModel]:
        stmt = (
            select(UserModel)
            .join(ChatParticipantModel, ChatParticipantModel.user_id == UserModel.id)
            .where(
                ChatParticipantModel.chat_id == chat_id,
                ChatParticipantModel.user_id != exclude_user_id,
                UserModel.is_deleted.is_(False),
            )
            .order_by(ChatParticipantModel.id.asc())
        )
        return list(self._session.execute(stmt).scalars().all())
