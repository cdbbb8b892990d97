# critico/repositories/message_repository.py

from sqlalchemy import func, select
from sqlalchemy.orm import Session, aliased

from critico.core.base_repository import BaseRepository
from critico.core.message_types import MessageType
from critico.infrastructure.database.base_model import utcnow
from critico.infrastructure.database.models.message_model import MessageModel
from critico.infrastructure.database.models.product_model import ProductModel
from critico.infrastructure.database.models.user_model import UserModel


class MessageRepository(BaseRepository[MessageModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, message_id: int) -> MessageModel | None:
        return self._session.get(MessageModel, message_id)

    def get_for_update(self, message_id: int) -> MessageModel | None:
        stmt = select(MessageModel).where(MessageModel.id == message_id).with_for_update()
        return self._session.execute(stmt).scalar_one_or_none()

    def get_row(self, *, message_id: int):
        sender = aliased(UserModel)
        stmt = (
            select(MessageModel, sender)
            .join(sender, sender.id == MessageModel.sender_id)
            .where(MessageModel.id == message_id)
        )
        return self._session.execute(stmt).first()  # (msg, sender) | None

    def list_rows_by_chat(self, *, chat_id: int, message_types: list[str]):
        sender = aliased(UserModel)
        stmt = (
            select(MessageModel, sender)
            .join(sender, sender.id == MessageModel.sender_id)
            .where(MessageModel.chat_id == chat_id, MessageModel.message_type.in_(message_types))
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        return list(self._session.execute(stmt).all())

    def last_message(self, *, chat_id: int, message_types: list[str]) -> MessageModel | None:
        stmt = (
            select(MessageModel)
            .where(MessageModel.chat_id == chat_id, MessageModel.message_type.in_(message_types))
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
            .limit(1)
        )
        return self._session.execute(stmt).scalars().first()

    def list_unread(self, *, chat_id: int, user_id: int, message_types: list[str]) -> list[MessageModel]:
        stmt = select(MessageModel).where(
            MessageModel.chat_id == chat_id,
            MessageModel.message_type.in_(message_types),
            MessageModel.receiver_id == user_id,
            MessageModel.read.is_(False),
        )
        return list(self._session.execute(stmt).scalars().all())

    def mark_read(
        self,
        *,
        chat_id: int,
        user_id: int,
        message_ids: list[int] | None = None,
    ) -> list[MessageModel]:
        """Flags messages addressed to ``user_id`` as read; returns the rows that changed."""
        stmt = select(MessageModel).where(
            MessageModel.chat_id == chat_id,
            MessageModel.receiver_id == user_id,
            MessageModel.read.is_(False),
        )
        if message_ids is not None:
            if not message_ids:
                return []
            stmt = stmt.where(MessageModel.id.in_(message_ids))

        changed = list(self._session.execute(stmt).scalars().all())
        if not changed:
            return []

        now = utcnow()
        for msg in changed:
            msg.read = True
            msg.updated_at = now
        self._session.flush()
        return changed

    def has_open_request(self, *, tester_id: int, product_id: int) -> bool:
        stmt = select(func.count(MessageModel.id)).where(
            MessageModel.tester_id == tester_id,
            MessageModel.product_id == product_id,
            MessageModel.message_type.in_([MessageType.REQUEST.value, MessageType.REQUEST_QR_READY.value]),
            MessageModel.comment_token_id.is_(None),
        )
        return int(self._session.execute(stmt).scalar_one()) > 0

    def list_request_rows_for_owner(self, *, owner_id: int):
        tester = aliased(UserModel)
        stmt = (
            select(MessageModel, tester, ProductModel)
            .join(tester, tester.id == MessageModel.tester_id)
            .join(ProductModel, ProductModel.id == MessageModel.product_id)
            .where(
                MessageModel.owner_id == owner_id,
                MessageModel.message_type.in_(
                    [
                        MessageType.REQUEST.value,
                        MessageType.REQUEST_QR_READY.value,
                        MessageType.REQUEST_ACCEPTED.value,
                        MessageType.REQUEST_DECLINED.value,
                    ]
                ),
                # the owner-only token message is not a request of its own
                MessageModel.comment_token_id.is_(None),
            )
            .order_by(MessageModel.created_at.desc(), MessageModel.id.desc())
        )
        return list(self._session.execute(stmt).all())

    def count_pending_for_owner(self, *, owner_id: int) -> int:
        stmt = select(func.count(MessageModel.id)).where(
            MessageModel.owner_id == owner_id,
            MessageModel.message_type == MessageType.REQUEST.value,
        )
        return int(self._session.execute(stmt).scalar_one())

    def list_comment_rows(self, *, product_id: int):
        sender = aliased(UserModel)
        stmt = (
            select(MessageModel, sender)
            .join(sender, sender.id == MessageModel.sender_id)
            .where(
                MessageModel.product_id == product_id,
                MessageModel.message_type == MessageType.PRODUCT.value,
            )
            .order_by(MessageModel.created_at.asc(), MessageModel.id.asc())
        )
        return list(self._session.execute(stmt).all())

    def list_rated_stars(self, *, product_id: int) -> list[int]:
        stmt = select(MessageModel.stars).where(
            MessageModel.product_id == product_id,
            MessageModel.message_type == MessageType.PRODUCT.value,
            MessageModel.stars.is_not(None),
            MessageModel.stars > 0,
        )
        return [int(s) for s in self._session.execute(stmt).scalars().all()]

    def count_reviews_by_sender(self, *, sender_id: int) -> int:
        stmt = select(func.count(MessageModel.id)).where(
            MessageModel.sender_id == sender_id,
            MessageModel.message_type == MessageType.PRODUCT.value,
            MessageModel.stars.is_not(None),
        )
        return int(self._session.execute(stmt).scalar_one())
