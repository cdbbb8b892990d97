# critico/infrastructure/database/models/comment_token_model.py

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from critico.infrastructure.database.base_model import BaseModel, BigIntPK, utcnow


class CommentTokenModel(BaseModel):
    __tablename__ = "tbCommentTokens"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    token: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    product_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbProducts.id"), nullable=False)
    owner_user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=False)
    tester_user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), nullable=False)

    # no FK: tbMessages already points here
    request_message_id: Mapped[int] = mapped_column(BigInteger, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    redeemed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=True)
