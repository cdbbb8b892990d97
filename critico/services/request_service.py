# critico/services/request_service.py
"""Test requests: ask, accept (issuing a redemption token), decline, redeem.

Every public method here is one unit of work; the caller wraps it in a
single ``db_session()`` so a failure anywhere rolls the whole step back.
"""
import logging
import secrets
from dataclasses import dataclass

from critico.config.settings import settings
from critico.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from critico.core.interfaces.message_notifier import MessageNotifier
from critico.core.message_types import MessageType, RequestAction, next_state
from critico.entities.message import ChatMessage, to_chat_message
from critico.entities.user import UserMini
from critico.infrastructure.database.base_model import utcnow
from critico.infrastructure.database.models.comment_token_model import CommentTokenModel
from critico.infrastructure.database.models.message_model import MessageModel
from critico.repositories.comment_permission_repository import CommentPermissionRepository
from critico.repositories.comment_token_repository import CommentTokenRepository
from critico.repositories.message_repository import MessageRepository
from critico.repositories.product_repository import ProductRepository
from critico.services.chat_service import ChatService

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24


@dataclass(frozen=True)
class AcceptResult:
    request: ChatMessage
    token_message: ChatMessage
    token: str


@dataclass(frozen=True)
class RequestInboxItem:
    message: ChatMessage
    tester: UserMini
    product_id: int
    product_name: str


@dataclass(frozen=True)
class RequestInbox:
    pending: list[RequestInboxItem]
    answered: list[RequestInboxItem]


def redeem_url(token: str) -> str:
    return f"{settings.redeem_base_url}/{token}"


class RequestService:
    def __init__(
        self,
        *,
        product_repo: ProductRepository,
        msg_repo: MessageRepository,
        token_repo: CommentTokenRepository,
        permission_repo: CommentPermissionRepository,
        chat_service: ChatService,
        notifier: MessageNotifier | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._msg_repo = msg_repo
        self._token_repo = token_repo
        self._permission_repo = permission_repo
        self._chat_service = chat_service
        self._notifier = notifier

    def _emit_inserted(self, msg: MessageModel, actor_id: int) -> None:
        if self._notifier:
            self._notifier.notify_message_inserted(msg, actor_id=actor_id)

    def _emit_updated(self, msg: MessageModel, actor_id: int) -> None:
        if self._notifier:
            self._notifier.notify_message_updated(msg, actor_id=actor_id)

    def _get_request_or_404(self, message_id: int) -> MessageModel:
        msg = self._msg_repo.get_for_update(message_id)
        if msg is None or msg.product_id is None or msg.tester_id is None or msg.comment_token_id is not None:
            raise NotFoundError("Anfrage nicht gefunden.")
        return msg

    def _ensure_owner(self, msg: MessageModel, actor_id: int) -> int:
        # ownership comes from the product, never from sender/receiver
        owner_id = self._product_repo.get_owner_id(msg.product_id)
        if owner_id is None:
            raise NotFoundError("Produkt nicht gefunden.")
        if int(owner_id) != int(actor_id):
            raise ForbiddenError()
        return int(owner_id)

    # -------------------------
    # Tester side
    # -------------------------

    def request_test(self, *, product_id: int, tester_id: int, content: str | None = None) -> ChatMessage:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Produkt nicht gefunden.")
        owner_id = int(product.owner_id)

        if owner_id == int(tester_id):
            raise ForbiddenError("Du kannst dein eigenes Produkt nicht testen.")
        if self._msg_repo.has_open_request(tester_id=tester_id, product_id=product_id):
            raise ConflictError("Du hast bereits eine Anfrage für dieses Produkt gesendet!")

        chat = self._chat_service.get_or_create_direct_chat(user_id=tester_id, partner_id=owner_id)

        text = (content or "").strip() or f"Ich möchte „{product.name}“ testen."
        msg = self._msg_repo.add(
            MessageModel(
                chat_id=chat.id,
                sender_id=tester_id,
                receiver_id=owner_id,
                message_type=MessageType.REQUEST.value,
                content=text,
                product_id=product.id,
                owner_id=owner_id,
                tester_id=tester_id,
                read=False,
            )
        )
        self._emit_inserted(msg, tester_id)

        logger.info("Test request %s: user %s -> product %s", msg.id, tester_id, product_id)
        return to_chat_message(msg, viewer_id=tester_id)

    def redeem(self, *, token: str, user_id: int) -> int:
        """Consumes a redemption token and grants the comment permission; returns product_id."""
        row = self._token_repo.get_by_token_for_update((token or "").strip())
        if row is None:
            raise NotFoundError("Ungültiger oder unbekannter QR-Code.")
        if int(row.tester_user_id) != int(user_id):
            raise ForbiddenError("Dieser QR-Code gehört einem anderen Benutzer.")
        if row.redeemed_at is not None:
            raise ConflictError("Dieser QR-Code wurde bereits eingelöst.")

        row.redeemed_at = utcnow()
        self._permission_repo.grant(user_id=row.tester_user_id, product_id=row.product_id)

        request_msg = self._msg_repo.get_for_update(row.request_message_id)
        if request_msg is not None and request_msg.message_type == MessageType.REQUEST_QR_READY.value:
            request_msg.message_type = next_state(request_msg.message_type, RequestAction.REDEEM).value
            request_msg.updated_at = utcnow()
            self._emit_updated(request_msg, user_id)

        logger.info("Token %s redeemed by user %s for product %s", row.id, user_id, row.product_id)
        return int(row.product_id)

    # -------------------------
    # Owner side
    # -------------------------

    def accept(self, *, message_id: int, actor_id: int, await_redemption: bool = False) -> AcceptResult:
        msg = self._get_request_or_404(message_id)
        owner_id = self._ensure_owner(msg, actor_id)

        action = RequestAction.MARK_QR_READY if await_redemption else RequestAction.ACCEPT
        target = next_state(msg.message_type, action)

        now = utcnow()
        msg.message_type = target.value
        msg.read = True
        msg.updated_at = now

        token = secrets.token_urlsafe(TOKEN_BYTES)
        token_row = self._token_repo.add(
            CommentTokenModel(
                token=token,
                product_id=msg.product_id,
                owner_user_id=owner_id,
                tester_user_id=msg.tester_id,
                request_message_id=msg.id,
            )
        )

        # owner-addressed, so it never counts as unread for the owner
        token_msg = self._msg_repo.add(
            MessageModel(
                chat_id=msg.chat_id,
                sender_id=owner_id,
                receiver_id=owner_id,
                message_type=MessageType.REQUEST_ACCEPTED.value,
                content=redeem_url(token),
                product_id=msg.product_id,
                owner_id=owner_id,
                tester_id=msg.tester_id,
                comment_token_id=token_row.id,
                read=True,
            )
        )

        self._emit_updated(msg, actor_id)
        self._emit_inserted(token_msg, actor_id)

        logger.info("Request %s -> %s by owner %s (token %s)", msg.id, target.value, owner_id, token_row.id)
        return AcceptResult(
            request=to_chat_message(msg, viewer_id=actor_id),
            token_message=to_chat_message(token_msg, viewer_id=actor_id),
            token=token,
        )

    def decline(self, *, message_id: int, actor_id: int) -> ChatMessage:
        msg = self._get_request_or_404(message_id)
        self._ensure_owner(msg, actor_id)

        msg.message_type = next_state(msg.message_type, RequestAction.DECLINE).value
        msg.read = True
        msg.updated_at = utcnow()
        self._emit_updated(msg, actor_id)

        logger.info("Request %s declined by owner %s", msg.id, actor_id)
        return to_chat_message(msg, viewer_id=actor_id)

    def get_token_url(self, *, message_id: int, actor_id: int) -> str:
        """Redemption URL for an accepted request; owner only, one canonical lookup."""
        msg = self._get_request_or_404(message_id)
        owner_id = self._ensure_owner(msg, actor_id)

        row = self._token_repo.get_latest_for(
            product_id=msg.product_id, owner_user_id=owner_id, tester_user_id=msg.tester_id
        )
        if row is None:
            raise NotFoundError("Für diese Anfrage wurde noch kein QR-Code erstellt.")
        return redeem_url(row.token)

    def inbox(self, *, owner_id: int) -> RequestInbox:
        pending: list[RequestInboxItem] = []
        answered: list[RequestInboxItem] = []
        for msg, tester, product in self._msg_repo.list_request_rows_for_owner(owner_id=owner_id):
            item = RequestInboxItem(
                message=to_chat_message(msg, viewer_id=owner_id),
                tester=UserMini.from_model(tester),
                product_id=int(product.id),
                product_name=product.name,
            )
            (pending if msg.message_type == MessageType.REQUEST.value else answered).append(item)
        return RequestInbox(pending=pending, answered=answered)

    def pending_count(self, *, owner_id: int) -> int:
        return self._msg_repo.count_pending_for_owner(owner_id=owner_id)
