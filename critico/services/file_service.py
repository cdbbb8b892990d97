# critico/services/file_service.py
from __future__ import annotations

from enum import Enum
from typing import BinaryIO

from critico.config.settings import settings
from critico.core.exceptions import ValidationError
from critico.infrastructure.storage.file_storage import FileStorage, StoredFile


class Bucket(str, Enum):
    PRODUCT_PICTURES = "product_pictures"
    PROFILE_PICTURES = "profile_pictures"


def allowed_mime_types() -> set[str]:
    raw = (settings.allowed_mime_types_raw or "").strip()
    return {p.strip() for p in raw.split(",") if p.strip()}


class FileService:
    def __init__(self, *, storage: FileStorage) -> None:
        self._storage = storage

    def _validate_mime(self, mimetype: str | None) -> None:
        allowed = allowed_mime_types()
        if not allowed:
            return  # whitelist off
        if not mimetype:
            raise ValidationError("Dateityp (MIME) fehlt.")
        if mimetype not in allowed:
            raise ValidationError(f"Dateityp nicht erlaubt: '{mimetype}'.")

    def upload(
        self,
        *,
        bucket: Bucket,
        user_id: int,
        fileobj: BinaryIO,
        original_name: str | None,
        content_type: str | None,
    ) -> StoredFile:
        if not original_name:
            raise ValidationError("Keine Datei übermittelt.")
        self._validate_mime(content_type)

        return self._storage.save(
            bucket=Bucket(bucket).value,
            owner_id=user_id,
            fileobj=fileobj,
            original_name=original_name,
            content_type=content_type,
        )

    def resolve(self, key: str):
        return self._storage.open_path(key)
