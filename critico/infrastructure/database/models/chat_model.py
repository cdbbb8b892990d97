# critico/infrastructure/database/models/chat_model.py

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from critico.infrastructure.database.base_model import BaseModel, BigIntPK, utcnow


class ChatModel(BaseModel):
    __tablename__ = "tbChats"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    # NULL = direct 1:1 chat, set = public comment thread of that product
    product_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("tbProducts.id"), nullable=True, unique=True
    )

    # "<lower user id>:<higher user id>" for direct chats
    direct_key: Mapped[str] = mapped_column(String(50), nullable=True, unique=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
