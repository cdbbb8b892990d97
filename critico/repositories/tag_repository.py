# critico/repositories/tag_repository.py

from collections import defaultdict

from sqlalchemy import select
from sqlalchemy.orm import Session

from critico.core.base_repository import BaseRepository
from critico.infrastructure.database.models.tag_model import ProductTagModel, TagModel


class TagRepository(BaseRepository[TagModel]):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def list_all(self) -> list[TagModel]:
        stmt = select(TagModel).order_by(TagModel.name.asc())
        return list(self._session.execute(stmt).scalars().all())

    def get_by_ids(self, tag_ids: list[int]) -> list[TagModel]:
        if not tag_ids:
            return []
        stmt = select(TagModel).where(TagModel.id.in_(tag_ids))
        return list(self._session.execute(stmt).scalars().all())

    def attach(self, *, product_id: int, tag_ids: list[int]) -> None:
        self.add_many([ProductTagModel(product_id=product_id, tag_id=t) for t in sorted(set(tag_ids))])

    def list_by_product_ids(self, product_ids: list[int]) -> dict[int, list[TagModel]]:
        if not product_ids:
            return {}
        stmt = (
            select(ProductTagModel.product_id, TagModel)
            .join(TagModel, TagModel.id == ProductTagModel.tag_id)
            .where(ProductTagModel.product_id.in_(product_ids))
            .order_by(TagModel.name.asc())
        )
        out: dict[int, list[TagModel]] = defaultdict(list)
        for product_id, tag in self._session.execute(stmt).all():
            out[product_id].append(tag)
        return dict(out)
