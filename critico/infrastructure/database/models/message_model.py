# critico/infrastructure/database/models/message_model.py

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from critico.infrastructure.database.base_model import BaseModel, BigIntPK, utcnow


class MessageModel(BaseModel):
    __tablename__ = "tbMessages"
    __table_args__ = (
        Index("ix_messages_chat_created", "chat_id", "created_at"),
        Index("ix_messages_receiver_read", "receiver_id", "read"),
    )

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    chat_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbChats.id"), nullable=False)

    sender_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=False)
    receiver_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=True)

    # direct | request | request_qr_ready | request_accepted | request_declined | product
    message_type: Mapped[str] = mapped_column(String(30), nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    # set iff request family or product comment
    product_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbProducts.id"), nullable=True)

    # request family only: explicit roles, never derived from sender/receiver
    owner_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=True)
    tester_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=True)

    # owner-only message carrying the redemption link
    comment_token_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tbCommentTokens.id"), nullable=True
    )

    # product comments only, 1..5
    stars: Mapped[int] = mapped_column(Integer, nullable=True)

    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
