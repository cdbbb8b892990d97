# critico/api/schemas/file_schema.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class UploadFileResponse(BaseModel):
    key: str
    url: str
    original_name: str = Field(min_length=1, max_length=255)
    content_type: Optional[str] = Field(default=None, max_length=100)
    size_bytes: int
    sha256: str = Field(min_length=64, max_length=64)

    @classmethod
    def from_stored(cls, stored) -> "UploadFileResponse":
        return cls(
            key=stored.key,
            url=stored.public_url,
            original_name=stored.original_name,
            content_type=stored.content_type,
            size_bytes=stored.size_bytes,
            sha256=stored.sha256,
        )
