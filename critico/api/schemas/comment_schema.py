# critico/api/schemas/comment_schema.py

from typing import Optional

from pydantic import BaseModel, Field


class CreateCommentRequest(BaseModel):
    content: str = Field(max_length=5000)
    stars: Optional[int] = Field(default=None, ge=1, le=5)


class CommentPermissionResponse(BaseModel):
    product_id: int
    can_comment: bool
