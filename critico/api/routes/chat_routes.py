# critico/api/routes/chat_routes.py

from flask import Blueprint, jsonify, request

from critico.api.middlewares.auth_middleware import auth_user_id, require_auth
from critico.api.schemas.message_schema import (
    ChatPreviewResponse,
    ChatResponse,
    ConversationListResponse,
    MarkReadRequest,
    MessageResponse,
    SendMessageRequest,
)
from critico.infrastructure.database.session import db_session
from critico.services.service_factory import build_services

bp_chats = Blueprint("chats", __name__)


@bp_chats.get("")
@require_auth
def list_conversations():
    q = (request.args.get("q") or "").strip() or None

    with db_session() as session:
        result = build_services(session).messages.list_conversations(user_id=auth_user_id(), q=q)
        body = ConversationListResponse(
            items=[ChatPreviewResponse.from_entity(p) for p in result.previews],
            badge=result.badge,
        ).model_dump()
    return jsonify(body), 200


@bp_chats.post("/direct/<int:partner_id>")
@require_auth
def open_direct_chat(partner_id: int):
    with db_session() as session:
        chat = build_services(session).chats.get_or_create_direct_chat(user_id=auth_user_id(), partner_id=partner_id)
        body = ChatResponse(id=chat.id, partner_id=partner_id, created_at=chat.created_at).model_dump()
    return jsonify(body), 200


@bp_chats.get("/<int:chat_id>/messages")
@require_auth
def list_messages(chat_id: int):
    with db_session() as session:
        items = build_services(session).messages.list_history(chat_id=chat_id, viewer_id=auth_user_id())
        body = [MessageResponse.from_entity(m).model_dump() for m in items]
    return jsonify(body), 200


@bp_chats.post("/<int:chat_id>/messages")
@require_auth
def send_message(chat_id: int):
    payload = SendMessageRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        msg = build_services(session).messages.send_direct(
            chat_id=chat_id, sender_id=auth_user_id(), content=payload.content
        )
        body = MessageResponse.from_entity(msg).model_dump()
    return jsonify(body), 201


@bp_chats.post("/<int:chat_id>/read")
@require_auth
def mark_read(chat_id: int):
    payload = MarkReadRequest.model_validate(request.get_json(silent=True) or {})

    with db_session() as session:
        ids = build_services(session).messages.mark_read(
            chat_id=chat_id, user_id=auth_user_id(), message_ids=payload.message_ids
        )
    return jsonify({"message_ids": ids}), 200
