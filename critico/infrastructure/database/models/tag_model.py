# critico/infrastructure/database/models/tag_model.py

from sqlalchemy import BigInteger, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from critico.infrastructure.database.base_model import BaseModel, BigIntPK


class TagModel(BaseModel):
    __tablename__ = "tbTags"

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True)
    name: Mapped[str] = mapped_column(String(60), nullable=False, unique=True)


class ProductTagModel(BaseModel):
    __tablename__ = "tbProductTags"

    product_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbProducts.id"), primary_key=True)
    tag_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("tbTags.id"), primary_key=True)
