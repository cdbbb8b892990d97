# critico/api/routes/auth_routes.py
import logging

from flask import Blueprint, jsonify, request

from critico.api.middlewares.auth_middleware import auth_user_id, require_auth
from critico.api.schemas.user_schema import LoginRequest, SignupRequest, TokenResponse, UserProfileResponse
from critico.core.exceptions import UnauthorizedError
from critico.infrastructure.database.session import db_session
from critico.infrastructure.security.jwt_provider import JwtProvider
from critico.repositories.message_repository import MessageRepository
from critico.repositories.user_repository import UserRepository
from critico.services.user_service import UserService

logger = logging.getLogger(__name__)

bp_auth = Blueprint("auth", __name__)


def _build_service(session) -> UserService:
    return UserService(UserRepository(session), MessageRepository(session))


def _issue(user) -> dict:
    access = JwtProvider().issue_access_token(
        subject=str(user.id),
        payload={"email": user.email, "name": user.name, "surname": user.surname},
    )
    return TokenResponse(access_token=access, user_id=user.id).model_dump()


@bp_auth.post("/signup")
def signup():
    payload = SignupRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        user = _build_service(session).signup(**payload.model_dump())
        body = _issue(user)

    logger.info("User %s signed up", body["user_id"])
    return jsonify(body), 201


@bp_auth.post("/login")
def login():
    payload = LoginRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        try:
            user = _build_service(session).authenticate(email=payload.email, password=payload.password)
        except UnauthorizedError:
            logger.info("Login failed for %s", payload.email)
            raise
        body = _issue(user)

    return jsonify(body), 200


@bp_auth.get("/me")
@require_auth
def me():
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
