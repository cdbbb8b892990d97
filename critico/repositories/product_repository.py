# critico/repositories/product_repository.py

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session, aliased

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.product_model import ProductModel
from critico.infrastructure.database.models.tag_model import ProductTagModel
from critico.infrastructure.database.models.user_model import UserModel


class ProductRepository(BaseRepository[ProductModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_id(self, product_id: int) -> ProductModel | None:
        stmt = select(ProductModel).where(ProductModel.id == product_id, ProductModel.is_deleted.is_(False))
        return self._session.execute(stmt).scalar_one_or_none()

    def get_row(self, product_id: int):
        owner = aliased(UserModel)
        stmt = (
            select(ProductModel, owner)
            .join(owner, owner.id == ProductModel.owner_id)
            .where(ProductModel.id == product_id, ProductModel.is_deleted.is_(False))
        )
        return self._session.execute(stmt).first()  # (product, owner) | None

    def get_owner_id(self, product_id: int) -> int | None:
        stmt = select(ProductModel.owner_id).where(
            ProductModel.id == product_id, ProductModel.is_deleted.is_(False)
        )
        return self._session.execute(stmt).scalar_one_or_none()

    def list_products(
        self,
        *,
        q: str | None = None,
        tag_id: int | None = None,
        owner_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ProductModel]:
        stmt = select(ProductModel).where(ProductModel.is_deleted.is_(False))

        if q:
            like = f"%{q.strip().lower()}%"
            stmt = stmt.where(
                func.lower(ProductModel.name).like(like) | func.lower(ProductModel.description).like(like)
            )
        if tag_id is not None:
            stmt = stmt.join(ProductTagModel, ProductTagModel.product_id == ProductModel.id).where(
                ProductTagModel.tag_id == tag_id
            )
        if owner_id is not None:
            stmt = stmt.where(ProductModel.owner_id == owner_id)

        stmt = stmt.order_by(ProductModel.created_at.desc(), ProductModel.id.desc()).limit(limit).offset(offset)
        return list(self._session.execute(stmt).scalars().all())

    def set_stars(self, *, product_id: int, stars: float) -> bool:
        stmt = (
            update(ProductModel)
            .where(ProductModel.id == product_id, ProductModel.is_deleted.is_(False))
            .values(stars=stars, updated_at=func.now())
        )
        res = self._session.execute(stmt)
        return (res.rowcount or 0) > 0
