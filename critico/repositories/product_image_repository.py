# critico/repositories/product_image_repository.py

from collections import defaultdict

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.product_image_model import ProductImageModel


class ProductImageRepository(BaseRepository[ProductImageModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def next_order_index(self, product_id: int) -> int:
        stmt = select(func.max(ProductImageModel.order_index)).where(ProductImageModel.product_id == product_id)
        current = self._session.execute(stmt).scalar_one_or_none()
        return 0 if current is None else int(current) + 1

    def list_by_product_ids(self, product_ids: list[int]) -> dict[int, list[ProductImageModel]]:
        if not product_ids:
            return {}
        stmt = (
            select(ProductImageModel)
            .where(ProductImageModel.product_id.in_(product_ids))
            .order_by(ProductImageModel.order_index.asc(), ProductImageModel.id.asc())
        )
        out: dict[int, list[ProductImageModel]] = defaultdict(list)
        for img in self._session.execute(stmt).scalars().all():
            out[img.product_id].append(img)
        return dict(out)
