# critico/infrastructure/storage/local_file_storage.py
from __future__ import annotations

import hashlib
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO
from uuid import uuid4

from werkzeug.utils import secure_filename

from critico.core.exceptions import ConflictError, NotFoundError
from critico.infrastructure.storage.file_storage import FileStorage, StoredFile

logger = logging.getLogger(__name__)

_CHUNK = 1024 * 1024
_BUCKET_RE = re.compile(r"^[a-z0-9_]+$")


@dataclass(frozen=True)
class LocalFileStorageConfig:
    base_path: str
    public_base_url: str


class LocalFileStorage(FileStorage):
    def __init__(self, *, config: LocalFileStorageConfig) -> None:
        raw = (config.base_path or "").strip()
        if not raw:
            raise ConflictError("Dateispeicher nicht konfiguriert (FILES_BASE_PATH leer).")

        self._base = Path(raw).expanduser().resolve()
        self._public = (config.public_base_url or "").rstrip("/")

        try:
            self._base.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConflictError(f"Upload-Ordner '{self._base}' kann nicht angelegt werden: {e}") from e

        if not os.access(self._base, os.W_OK):
            raise ConflictError(f"Upload-Ordner '{self._base}' ist nicht beschreibbar.")

    def _abs_path(self, key: str) -> Path:
        abs_path = (self._base / Path(key)).resolve()

        # anti path traversal
        base_str = str(self._base)
        if not str(abs_path).startswith(base_str + os.sep):
            raise NotFoundError("Datei nicht gefunden.")
        return abs_path

    def save(
        self,
        *,
        bucket: str,
        owner_id: int,
        fileobj: BinaryIO,
        original_name: str,
        content_type: str | None,
    ) -> StoredFile:
        if not _BUCKET_RE.match(bucket or ""):
            raise ConflictError(f"Ungültiger Bucket: '{bucket}'.")

        safe_name = secure_filename(original_name or "") or "upload"
        key = f"{bucket}/{int(owner_id)}/{uuid4().hex}_{safe_name}"
        abs_path = self._abs_path(key)

        try:
            abs_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConflictError(f"Upload-Ordner kann nicht vorbereitet werden: {e}") from e

        sha = hashlib.sha256()
        size = 0
        try:
            with open(abs_path, "wb") as out:
                while True:
                    chunk = fileobj.read(_CHUNK)
                    if not chunk:
                        break
                    out.write(chunk)
                    sha.update(chunk)
                    size += len(chunk)
        except OSError as e:
            abs_path.unlink(missing_ok=True)
            raise ConflictError(f"Datei konnte nicht gespeichert werden: {e}") from e

        logger.info("Stored %s (%s bytes)", key, size)
        return StoredFile(
            key=key,
            original_name=original_name,
            content_type=content_type,
            size_bytes=size,
            sha256=sha.hexdigest(),
            public_url=f"{self._public}/{key}",
        )

    def open_path(self, key: str) -> Path:
        abs_path = self._abs_path(key)
        if not abs_path.is_file():
            raise NotFoundError("Datei nicht gefunden.")
        return abs_path

    def delete(self, *, key: str) -> bool:
        try:
            abs_path = self._abs_path(key)
        except NotFoundError:
            return False
        if not abs_path.is_file():
            return False
        abs_path.unlink()
        return True
