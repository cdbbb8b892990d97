# critico/repositories/comment_token_repository.py

from sqlalchemy import select
from sqlalchemy.orm import Session

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.comment_token_model import CommentTokenModel


class CommentTokenRepository(BaseRepository[CommentTokenModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_token_for_update(self, token: str) -> CommentTokenModel | None:
        stmt = select(CommentTokenModel).where(CommentTokenModel.token == token).with_for_update()
        return self._session.execute(stmt).scalar_one_or_none()

    def get_by_id(self, token_id: int) -> CommentTokenModel | None:
        return self._session.get(CommentTokenModel, token_id)

    def get_latest_for(self, *, product_id: int, owner_user_id: int, tester_user_id: int) -> CommentTokenModel | None:
        stmt = (
            select(CommentTokenModel)
            .where(
                CommentTokenModel.product_id == product_id,
                CommentTokenModel.owner_user_id == owner_user_id,
                CommentTokenModel.tester_user_id == tester_user_id,
            )
            .order_by(CommentTokenModel.created_at.desc(), CommentTokenModel.id.desc())
            .limit(1)
        )
        return self._session.execute(stmt).scalars().first()
