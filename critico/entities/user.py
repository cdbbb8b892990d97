# critico/entities/user.py
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class UserMini:
    id: int
    name: str
    surname: str
    picture: Optional[str] = None
    trustlevel: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.name} {self.surname}".strip()

    @classmethod
    def from_model(cls, user) -> "UserMini":
        return cls(
            id=int(user.id),
            name=user.name,
            surname=user.surname,
            picture=user.picture,
            trustlevel=int(user.trustlevel or 0),
        )
