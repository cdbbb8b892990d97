# critico/infrastructure/storage/file_storage.py
from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Protocol


@dataclass(frozen=True)
class StoredFile:
    key: str  # "<bucket>/<user_id>/<uuid>_<name>"
    original_name: str
    content_type: str | None
    size_bytes: int
    sha256: str
    public_url: str


class FileStorage(Protocol):
    def save(
        self,
        *,
        bucket: str,
        owner_id: int,
        fileobj: BinaryIO,
        original_name: str,
        content_type: str | None,
    ) -> StoredFile:
        """Persists a file under its bucket and returns where it can be fetched."""
        raise NotImplementedError

    def open_path(self, key: str):
        """Absolute path of a stored object, for serving it back."""
        raise NotImplementedError

    def delete(self, *, key: str) -> bool:
        raise NotImplementedError
