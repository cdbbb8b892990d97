# critico/services/comment_service.py

import logging
import math

from critico.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from critico.core.interfaces.message_notifier import MessageNotifier
from critico.core.message_types import MessageType
from critico.entities.message import ChatMessage, to_chat_message
from critico.infrastructure.database.models.message_model import MessageModel
from critico.repositories.comment_permission_repository import CommentPermissionRepository
from critico.repositories.message_repository import MessageRepository
from critico.repositories.product_repository import ProductRepository
from critico.services.chat_service import ChatService

logger = logging.getLogger(__name__)

MIN_STARS = 1
MAX_STARS = 5


def mean_stars(values: list[int]) -> float:
    """Average rounded to the nearest half star; 0 when nothing was rated."""
    if not values:
        return 0.0
    avg = sum(values) / len(values)
    return math.floor(avg * 2 + 0.5) / 2


class CommentService:
    def __init__(
        self,
        *,
        product_repo: ProductRepository,
        msg_repo: MessageRepository,
        permission_repo: CommentPermissionRepository,
        chat_service: ChatService,
        notifier: MessageNotifier | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._msg_repo = msg_repo
        self._permission_repo = permission_repo
        self._chat_service = chat_service
        self._notifier = notifier

    def _ensure_product(self, product_id: int):
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Produkt nicht gefunden.")
        return product

    def can_comment(self, *, product_id: int, user_id: int) -> bool:
        self._ensure_product(product_id)
        return self._permission_repo.exists(user_id=user_id, product_id=product_id)

    def list_comments(self, *, product_id: int, viewer_id: int | None = None) -> list[ChatMessage]:
        self._ensure_product(product_id)
        rows = self._msg_repo.list_comment_rows(product_id=product_id)
        return [to_chat_message(msg, sender, viewer_id=viewer_id or 0) for msg, sender in rows]

    def post_comment(
        self,
        *,
        product_id: int,
        user_id: int,
        content: str | None,
        stars: int | None = None,
    ) -> ChatMessage:
        product = self._ensure_product(product_id)

        if not self._permission_repo.exists(user_id=user_id, product_id=product_id):
            raise ForbiddenError("Du darfst dieses Produkt erst nach dem Test bewerten.")

        text = (content or "").strip()
        if not text:
            raise ValidationError("Kommentar darf nicht leer sein.")
        if stars is not None and not (MIN_STARS <= int(stars) <= MAX_STARS):
            raise ValidationError(f"Sterne müssen zwischen {MIN_STARS} und {MAX_STARS} liegen.")

        chat = self._chat_service.get_or_create_product_chat(product_id=product.id)

        msg = self._msg_repo.add(
            MessageModel(
                chat_id=chat.id,
                sender_id=user_id,
                receiver_id=None,
                message_type=MessageType.PRODUCT.value,
                content=text,
                product_id=product.id,
                stars=int(stars) if stars is not None else None,
                read=False,
            )
        )
        if self._notifier:
            self._notifier.notify_message_inserted(msg, actor_id=user_id)

        if stars is not None:
            new_stars = mean_stars(self._msg_repo.list_rated_stars(product_id=product.id))
            self._product_repo.set_stars(product_id=product.id, stars=new_stars)
            logger.info("Product %s rated %s by user %s, now %.1f", product.id, stars, user_id, new_stars)

        row = self._msg_repo.get_row(message_id=msg.id)
        return to_chat_message(row[0], row[1], viewer_id=user_id)
