# critico/repositories/user_repository.py

from sqlalchemy import select
from sqlalchemy.orm import Session

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.user_model import UserModel


class UserRepository(BaseRepository[UserModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_email(self, email: str) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.email == email, UserModel.is_deleted.is_(False))
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_id(self, user_id: int) -> UserModel | None:
        stmt = select(UserModel).where(UserModel.id == user_id, UserModel.is_deleted.is_(False))
        return self._session.execute(stmt).scalar_one_or_none()

    def get_many(self, user_ids: list[int]) -> dict[int, UserModel]:
        if not user_ids:
            return {}
        stmt = select(UserModel).where(UserModel.id.in_(user_ids), UserModel.is_deleted.is_(False))
        return {u.id: u for u in self._session.execute(stmt).scalars().all()}
