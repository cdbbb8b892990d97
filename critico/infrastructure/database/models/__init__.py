# critico/infrastructure/database/models/__init__.py
from critico.infrastructure.database.models.user_model import UserModel
from critico.infrastructure.database.models.product_model import ProductModel
from critico.infrastructure.database.models.tag_model import ProductTagModel, TagModel
from critico.infrastructure.database.models.product_image_model import ProductImageModel
from critico.infrastructure.database.models.chat_model import ChatModel
from critico.infrastructure.database.models.chat_participant_model import ChatParticipantModel
from critico.infrastructure.database.models.comment_token_model import CommentTokenModel
from critico.infrastructure.database.models.message_model import MessageModel
from critico.infrastructure.database.models.comment_permission_model import CommentPermissionModel

__all__ = [
    "UserModel",
    "ProductModel",
    "TagModel",
    "ProductTagModel",
    "ProductImageModel",
    "ChatModel",
    "ChatParticipantModel",
    "CommentTokenModel",
    "MessageModel",
    "CommentPermissionModel",
]
