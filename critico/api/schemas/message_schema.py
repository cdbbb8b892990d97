# critico/api/schemas/message_schema.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from critico.api.schemas._datetime_serializer import serialize_dt
from critico.api.schemas.user_schema import UserMiniResponse


class MessageResponse(BaseModel):
    id: int
    chat_id: int
    content: str
    message_type: str
    created_at: datetime

    sender_id: int
    receiver_id: Optional[int] = None
    read: bool

    product_id: Optional[int] = None
    owner_id: Optional[int] = None
    tester_id: Optional[int] = None
    has_token: bool = False
    token_url: Optional[str] = None
    stars: Optional[int] = None

    sender: Optional[UserMiniResponse] = None

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime):
        return serialize_dt(value)

    @classmethod
    def from_entity(cls, msg) -> "MessageResponse":
        return cls(
            id=msg.id,
            chat_id=msg.chat_id,
            content=msg.content,
            message_type=msg.message_type,
            created_at=msg.created_at,
            sender_id=msg.sender_id,
            receiver_id=msg.receiver_id,
            read=msg.read,
            product_id=msg.product_id,
            owner_id=msg.owner_id,
            tester_id=msg.tester_id,
            has_token=msg.comment_token_id is not None,
            token_url=msg.token_url,
            stars=msg.stars,
            sender=UserMiniResponse.from_entity(msg.sender) if msg.sender else None,
        )


class SendMessageRequest(BaseModel):
    content: str = Field(max_length=5000)


class MarkReadRequest(BaseModel):
    message_ids: Optional[list[int]] = None


class ChatResponse(BaseModel):
    id: int
    partner_id: int
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime):
        return serialize_dt(value)


class ChatPreviewResponse(BaseModel):
    chat_id: int
    partner_id: int
    partner_name: str
    partner_surname: str
    partner_picture: Optional[str] = None
    partner_trustlevel: int = 0
    last_message: str
    last_message_time: Optional[datetime] = None
    last_message_type: Optional[str] = None
    unread_count: int
    has_unread_request: bool

    @field_serializer("last_message_time")
    def serialize_time(self, value: datetime | None):
        return serialize_dt(value)

    @classmethod
    def from_entity(cls, p) -> "ChatPreviewResponse":
        return cls(
            chat_id=p.chat_id,
            partner_id=p.partner_id,
            partner_name=p.partner_name,
            partner_surname=p.partner_surname,
            partner_picture=p.partner_picture,
            partner_trustlevel=p.partner_trustlevel,
            last_message=p.last_message,
            last_message_time=p.last_message_time,
            last_message_type=p.last_message_type,
            unread_count=p.unread_count,
            has_unread_request=p.has_unread_request,
        )


class ConversationListResponse(BaseModel):
    items: list[ChatPreviewResponse]
    badge: int
