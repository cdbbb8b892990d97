# critico/infrastructure/database/models/product_image_model.py

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from critico.infrastructure.database.base_model import BaseModel, BigIntPK, utcnow


class ProductImageModel(BaseModel):
    __tablename__ = "tbProductImages"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)

    product_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbProducts.id"), nullable=False)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)

    # 0 is the cover picture
    order_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
