# critico/services/product_service.py

from decimal import Decimal

from critico.core.exceptions import ForbiddenError, NotFoundError, ValidationError
from critico.entities.product import ProductDetail
from critico.entities.user import UserMini
from critico.infrastructure.database.models.product_image_model import ProductImageModel
from critico.infrastructure.database.models.product_model import ProductModel
from critico.repositories.product_image_repository import ProductImageRepository
from critico.repositories.product_repository import ProductRepository
from critico.repositories.tag_repository import TagRepository
from critico.repositories.user_repository import UserRepository


class ProductService:
    def __init__(
        self,
        *,
        product_repo: ProductRepository,
        tag_repo: TagRepository,
        image_repo: ProductImageRepository,
        user_repo: UserRepository,
    ) -> None:
        self._product_repo = product_repo
        self._tag_repo = tag_repo
        self._image_repo = image_repo
        self._user_repo = user_repo

    def _get_product_or_404(self, product_id: int) -> ProductModel:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise NotFoundError("Produkt nicht gefunden.")
        return product

    def get_owner_id(self, product_id: int) -> int:
        owner_id = self._product_repo.get_owner_id(product_id)
        if owner_id is None:
            raise NotFoundError("Produkt nicht gefunden.")
        return int(owner_id)

    def create_product(
        self,
        *,
        owner_id: int,
        name: str,
        description: str | None,
        price: Decimal | float | None,
        tag_ids: list[int] | None = None,
    ) -> ProductModel:
        clean_name = (name or "").strip()
        if not clean_name:
            raise ValidationError("Produktname fehlt.")
        if price is not None and Decimal(str(price)) < 0:
            raise ValidationError("Preis darf nicht negativ sein.")

        product = self._product_repo.add(
            ProductModel(
                name=clean_name,
                description=(description or "").strip() or None,
                price=price,
                owner_id=owner_id,
                stars=0,
                is_deleted=False,
            )
        )

        wanted = sorted(set(tag_ids or []))
        if wanted:
            found = {t.id for t in self._tag_repo.get_by_ids(wanted)}
            missing = [t for t in wanted if t not in found]
            if missing:
                raise NotFoundError(f"Tags nicht gefunden: {missing}")
            self._tag_repo.attach(product_id=product.id, tag_ids=wanted)

        return product

    def add_image(self, *, product_id: int, user_id: int, image_url: str) -> ProductImageModel:
        product = self._get_product_or_404(product_id)
        if product.owner_id != user_id:
            raise ForbiddenError()

        return self._image_repo.add(
            ProductImageModel(
                product_id=product.id,
                image_url=image_url,
                order_index=self._image_repo.next_order_index(product.id),
            )
        )

    def _details(self, products: list[ProductModel]) -> list[ProductDetail]:
        ids = [p.id for p in products]
        owners = self._user_repo.get_many(sorted({p.owner_id for p in products}))
        tags = self._tag_repo.list_by_product_ids(ids)
        images = self._image_repo.list_by_product_ids(ids)

        out: list[ProductDetail] = []
        for p in products:
            owner = owners.get(p.owner_id)
            if owner is None:
                # owner deleted: product is not listed anymore
                continue
            out.append(
                ProductDetail(
                    product=p,
                    owner=UserMini.from_model(owner),
                    tags=tags.get(p.id, []),
                    images=images.get(p.id, []),
                )
            )
        return out

    def get_detail(self, product_id: int) -> ProductDetail:
        details = self._details([self._get_product_or_404(product_id)])
        if not details:
            raise NotFoundError("Produkt nicht gefunden.")
        return details[0]

    def list_products(
        self,
        *,
        q: str | None = None,
        tag_id: int | None = None,
        owner_id: int | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[ProductDetail]:
        products = self._product_repo.list_products(q=q, tag_id=tag_id, owner_id=owner_id, limit=limit, offset=offset)
        return self._details(products)

    def list_tags(self):
        return self._tag_repo.list_all()
