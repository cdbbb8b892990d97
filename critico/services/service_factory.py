# critico/services/service_factory.py
from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.orm import Session

from critico.infrastructure.realtime.change_feed import ChangeFeed
from critico.infrastructure.realtime.feed_message_notifier import FeedMessageNotifier
from critico.repositories.chat_participant_repository import ChatParticipantRepository
from critico.repositories.chat_repository import ChatRepository
from critico.repositories.comment_permission_repository import CommentPermissionRepository
from critico.repositories.comment_token_repository import CommentTokenRepository
from critico.repositories.message_repository import MessageRepository
from critico.repositories.product_image_repository import ProductImageRepository
from critico.repositories.product_repository import ProductRepository
from critico.repositories.tag_repository import TagRepository
from critico.repositories.user_repository import UserRepository
from critico.services.chat_service import ChatService
from critico.services.comment_service import CommentService
from critico.services.message_service import MessageService
from critico.services.product_service import ProductService
from critico.services.request_service import RequestService
from critico.services.user_service import UserService


@dataclass(frozen=True)
class Services:
    users: UserService
    products: ProductService
    chats: ChatService
    messages: MessageService
    requests: RequestService
    comments: CommentService


def build_services(session: Session, *, feed: ChangeFeed | None = None) -> Services:
    """Wires every service to the repositories of one db_session()."""
    user_repo = UserRepository(session)
    product_repo = ProductRepository(session)
    chat_repo = ChatRepository(session)
    part_repo = ChatParticipantRepository(session)
    msg_repo = MessageRepository(session)
    notifier = FeedMessageNotifier(session, feed=feed)

    chats = ChatService(chat_repo=chat_repo, part_repo=part_repo, user_repo=user_repo)

    return Services(
        users=UserService(user_repo, msg_repo),
        products=ProductService(
            product_repo=product_repo,
            tag_repo=TagRepository(session),
            image_repo=ProductImageRepository(session),
            user_repo=user_repo,
        ),
        chats=chats,
        messages=MessageService(
            chat_repo=chat_repo,
            part_repo=part_repo,
            msg_repo=msg_repo,
            chat_service=chats,
            notifier=notifier,
        ),
        requests=RequestService(
            product_repo=product_repo,
            msg_repo=msg_repo,
            token_repo=CommentTokenRepository(session),
            permission_repo=CommentPermissionRepository(session),
            chat_service=chats,
            notifier=notifier,
        ),
        comments=CommentService(
            product_repo=product_repo,
            msg_repo=msg_repo,
            permission_repo=CommentPermissionRepository(session),
            chat_service=chats,
            notifier=notifier,
        ),
    )
