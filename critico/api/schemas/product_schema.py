# critico/api/schemas/product_schema.py

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from critico.api.schemas._datetime_serializer import serialize_dt
from critico.api.schemas.user_schema import UserMiniResponse


class CreateProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    tag_ids: list[int] = []


class TagResponse(BaseModel):
    id: int
    name: str


class ProductImageResponse(BaseModel):
    id: int
    image_url: str
    order_index: int


class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    price: Optional[Decimal] = None
    stars: float = 0
    owner: UserMiniResponse
    tags: list[TagResponse] = []
    images: list[ProductImageResponse] = []
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer("created_at", "updated_at")
    def serialize_dates(self, value: datetime | None):
        return serialize_dt(value)

    @field_serializer("price")
    def serialize_price(self, value: Decimal | None):
        return float(value) if value is not None else None

    @classmethod
    def from_detail(cls, detail) -> "ProductResponse":
        p = detail.product
        return cls(
            id=p.id,
            name=p.name,
            description=p.description,
            price=p.price,
            stars=float(p.stars or 0),
            owner=UserMiniResponse.from_entity(detail.owner),
            tags=[TagResponse(id=t.id, name=t.name) for t in detail.tags],
            images=[
                ProductImageResponse(id=i.id, image_url=i.image_url, order_index=i.order_index)
                for i in detail.images
            ],
            created_at=p.created_at,
            updated_at=p.updated_at,
        )


class ProductListResponse(BaseModel):
    items: list[ProductResponse]
    limit: int
    offset: int
