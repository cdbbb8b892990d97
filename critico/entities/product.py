# critico/entities/product.py
from dataclasses import dataclass, field

from critico.entities.user import UserMini


@dataclass(frozen=True)
class ProductDetail:
    product: object
    owner: UserMini
    tags: list = field(default_factory=list)
    images: list = field(default_factory=list)
