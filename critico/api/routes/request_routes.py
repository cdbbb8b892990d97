# critico/api/routes/request_routes.py

from flask import Blueprint, jsonify, request

from critico.api.middlewares.auth_middleware import auth_user_id, require_auth
from critico.api.schemas.message_schema import MessageResponse
from critico.api.schemas.request_schema import (
    AcceptRequestInput,
    AcceptResponse,
    RedeemResponse,
    RequestCountResponse,
    RequestInboxItemResponse,
    RequestInboxResponse,
    TokenUrlResponse,
)
from critico.infrastructure.database.session import db_session
from critico.services.request_service import redeem_url
from critico.services.service_factory import build_services

bp_req = Blueprint("requests", __name__)
bp_tokens = Blueprint("tokens", __name__)


@bp_req.get("")
@require_auth
def inbox():
    with db_session() as session:
        result = build_services(session).requests.inbox(owner_id=auth_user_id())
        body = RequestInboxResponse(
            pending=[RequestInboxItemResponse.from_entity(i) for i in result.pending],
            answered=[RequestInboxItemResponse.from_entity(i) for i in result.answered],
        ).model_dump()
    return jsonify(body), 200


@bp_req.get("/count")
@require_auth
def pending_count():
    with db_session() as session:
        count = build_services(session).requests.pending_count(owner_id=auth_user_id())
    return jsonify(RequestCountResponse(count=count).model_dump()), 200


@bp_req.post("/<int:message_id>/accept")
@require_auth
def accept(message_id: int):
    payload = AcceptRequestInput.model_validate(request.get_json(silent=True) or {})

    with db_session() as session:
        result = build_services(session).requests.accept(
            message_id=message_id, actor_id=auth_user_id(), await_redemption=payload.await_redemption
        )
        body = AcceptResponse(
            request=MessageResponse.from_entity(result.request),
            token_message=MessageResponse.from_entity(result.token_message),
            redeem_url=redeem_url(result.token),
        ).model_dump()
    return jsonify(body), 200


@bp_req.post("/<int:message_id>/decline")
@require_auth
def decline(message_id: int):
    with db_session() as session:
        msg = build_services(session).requests.decline(message_id=message_id, actor_id=auth_user_id())
        body = MessageResponse.from_entity(msg).model_dump()
    return jsonify(body), 200


@bp_req.get("/<int:message_id>/token")
@require_auth
def token_url(message_id: int):
    with db_session() as session:
        url = build_services(session).requests.get_token_url(message_id=message_id, actor_id=auth_user_id())
    return jsonify(TokenUrlResponse(redeem_url=url).model_dump()), 200


@bp_tokens.post("/<token>/redeem")
@require_auth
def redeem(token: str):
    with db_session() as session:
        product_id = build_services(session).requests.redeem(token=token, user_id=auth_user_id())
    return jsonify(RedeemResponse(product_id=product_id).model_dump()), 200
