# critico/repositories/comment_permission_repository.py

from sqlalchemy import select
from sqlalchemy.orm import Session

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.comment_permission_model import CommentPermissionModel


class CommentPermissionRepository(BaseRepository[CommentPermissionModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def exists(self, *, user_id: int, product_id: int) -> bool:
        return self._session.get(CommentPermissionModel, (user_id, product_id)) is not None

    def grant(self, *, user_id: int, product_id: int) -> bool:
        """Idempotent; True when a new row was written."""
        if self.exists(user_id=user_id, product_id=product_id):
            return False
        self.add(CommentPermissionModel(user_id=user_id, product_id=product_id))
        return True
