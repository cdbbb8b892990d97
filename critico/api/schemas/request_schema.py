# critico/api/schemas/request_schema.py

from typing import Optional

from pydantic import BaseModel, Field

from critico.api.schemas.message_schema import MessageResponse
from critico.api.schemas.user_schema import UserMiniResponse


class RequestTestRequest(BaseModel):
    content: Optional[str] = Field(default=None, max_length=2000)


class AcceptRequestInput(BaseModel):
    await_redemption: bool = False


class AcceptResponse(BaseModel):
    request: MessageResponse
    token_message: MessageResponse
    redeem_url: str


class RequestInboxItemResponse(BaseModel):
    message: MessageResponse
    tester: UserMiniResponse
    product_id: int
    product_name: str

    @classmethod
    def from_entity(cls, item) -> "RequestInboxItemResponse":
        return cls(
            message=MessageResponse.from_entity(item.message),
            tester=UserMiniResponse.from_entity(item.tester),
            product_id=item.product_id,
            product_name=item.product_name,
        )


class RequestInboxResponse(BaseModel):
    pending: list[RequestInboxItemResponse]
    answered: list[RequestInboxItemResponse]


class RequestCountResponse(BaseModel):
    count: int


class TokenUrlResponse(BaseModel):
    redeem_url: str


class RedeemResponse(BaseModel):
    product_id: int
