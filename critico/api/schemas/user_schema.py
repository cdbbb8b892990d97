# critico/api/schemas/user_schema.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_serializer

from critico.api.schemas._datetime_serializer import serialize_dt


class SignupRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    surname: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=8, max_length=200)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1, max_length=200)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    user_id: int


class UserMiniResponse(BaseModel):
    id: int
    name: str
    surname: str
    picture: Optional[str] = None
    trustlevel: int = 0

    @classmethod
    def from_entity(cls, user) -> "UserMiniResponse":
        return cls(
            id=user.id,
            name=user.name,
            surname=user.surname,
            picture=user.picture,
            trustlevel=user.trustlevel or 0,
        )


class PublicUserResponse(UserMiniResponse):
    exp: int = 0
    review_count: int = 0
    created_at: Optional[datetime] = None

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime | None):
        return serialize_dt(value)


class UserProfileResponse(PublicUserResponse):
    email: EmailStr
    last_login: Optional[datetime] = None

    @field_serializer("last_login")
    def serialize_last_login(self, value: datetime | None):
        return serialize_dt(value)
