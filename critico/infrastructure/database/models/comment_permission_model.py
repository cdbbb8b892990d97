# critico/infrastructure/database/models/comment_permission_model.py

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from critico.infrastructure.database.base_model import BaseModel, utcnow


class CommentPermissionModel(BaseModel):
    """A row means: this user may review this product."""

    __tablename__ = "tbCommentPermissions"

    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbUsers.id"), primary_key=True)
    product_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbProducts.id"), primary_key=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
