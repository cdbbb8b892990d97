# critico/infrastructure/database/models/chat_participant_model.py

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from critico.infrastructure.database.base_model import BaseModel, BigIntPK, utcnow


class ChatParticipantModel(BaseModel):
    __tablename__ = "tbChatParticipants"
    __table_args__ = (UniqueConstraint("chat_id", "user_id", name="uq_chat_participant"),)

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    chat_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbChats.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
