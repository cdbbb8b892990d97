# critico/api/routes/file_routes.py

from __future__ import annotations

from flask import Blueprint, send_file
from werkzeug.datastructures import FileStorage as WzFileStorage

from critico.config.settings import settings
from critico.core.exceptions import ValidationError
from critico.infrastructure.storage.local_file_storage import LocalFileStorage, LocalFileStorageConfig
from critico.services.file_service import FileService

bp_files = Blueprint("files", __name__)


def build_file_service() -> FileService:
    storage = LocalFileStorage(
        config=LocalFileStorageConfig(
            base_path=settings.files_base_path,
            public_base_url=settings.files_public_base_url,
        )
    )
    return FileService(storage=storage)


def single_upload(req) -> WzFileStorage:
    upload = req.files.get("file")
    if upload is None:
        files = req.files.getlist("files")
        upload = files[0] if files else None
    if upload is None or not upload.filename:
        raise ValidationError("Keine Datei übermittelt (Feld 'file').")
    return upload


@bp_files.get("/<bucket>/<int:user_id>/<name>")
def download(bucket: str, user_id: int, name: str):
    path = build_file_service().resolve(f"{bucket}/{user_id}/{name}")
    return send_file(path, conditional=True)
