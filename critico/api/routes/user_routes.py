# critico/api/routes/user_routes.py

from __future__ import annotations

from flask import Blueprint, jsonify, request

from critico.api.middlewares.auth_middleware import auth_user_id, require_auth
from critico.api.routes.file_routes import build_file_service, single_upload
from critico.api.schemas.file_schema import UploadFileResponse
from critico.api.schemas.user_schema import PublicUserResponse, UserProfileResponse
from critico.infrastructure.database.session import db_session
from critico.repositories.message_repository import MessageRepository
from critico.repositories.user_repository import UserRepository
from critico.services.file_service import Bucket
from critico.services.user_service import UserService

bp_users = Blueprint("users", __name__)


def _build_service(session) -> UserService:
    return UserService(UserRepository(session), MessageRepository(session))


@bp_users.get("/me")
@require_auth
def get_me():
    with db_session() as session:
        user, review_count = _build_service(session).get_profile(auth_user_id())
        body = UserProfileResponse(
            id=user.id,
            name=user.name,
            surname=user.surname,
            email=user.email,
            picture=user.picture,
            trustlevel=user.trustlevel,
            exp=user.exp,
            review_count=review_count,
            created_at=user.created_at,
            last_login=user.last_login,
        ).model_dump()
    return jsonify(body), 200


@bp_users.get("/<int:user_id>")
def get_public_profile(user_id: int):
    with db_session() as session:
        user, review_count = _build_service(session).get_profile(user_id)
        body = PublicUserResponse(
            id=user.id,
            name=user.name,
            surname=user.surname,
            picture=user.picture,
            trustlevel=user.trustlevel,
            exp=user.exp,
            review_count=review_count,
            created_at=user.created_at,
        ).model_dump()
    return jsonify(body), 200


@bp_users.put("/me/picture")
@require_auth
def upload_picture():
    user_id = auth_user_id()
    upload = single_upload(request)

    stored = build_file_service().upload(
        bucket=Bucket.PROFILE_PICTURES,
        user_id=user_id,
        fileobj=upload.stream,
        original_name=upload.filename,
        content_type=upload.mimetype,
    )

    with db_session() as session:
        _build_service(session).set_picture(user_id=user_id, picture_url=stored.public_url)

    return jsonify(UploadFileResponse.from_stored(stored).model_dump()), 200
