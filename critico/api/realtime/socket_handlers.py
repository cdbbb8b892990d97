# critico/api/realtime/socket_handlers.py
"""Socket.IO surface: one UserSession per connection.

Client -> server: chat:open, chat:send, chat:accept, chat:decline,
chat:close, conversations:watch, conversations:search.
Server -> client: chat:messages, conversations:list, badge:count,
requests:count, alert.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import asdict

from flask import request
from flask_socketio import disconnect, join_room

from critico.api.schemas.message_schema import ChatPreviewResponse, MessageResponse
from critico.core.exceptions import UnauthorizedError
from critico.infrastructure.realtime.socketio_server import socketio
from critico.infrastructure.security.jwt_provider import JwtProvider
from critico.presenters.chat_list import build_items
from critico.presenters.message_bubble import build_bubbles
from critico.sessions.alerts import Alert
from critico.sessions.user_session import UserSession

logger = logging.getLogger(__name__)

_sessions: dict[str, UserSession] = {}
_lock = threading.Lock()


def _get_bearer_token() -> str | None:
    auth = request.headers.get("Authorization", "")
    if auth.lower().startswith("bearer "):
        return auth.split(" ", 1)[1].strip()

    token = request.args.get("token")
    if token:
        return str(token).strip()

    return None


def _current() -> UserSession | None:
    with _lock:
        return _sessions.get(request.sid)


def _int_field(data: dict | None, key: str) -> int | None:
    try:
        return int((data or {}).get(key))
    except (TypeError, ValueError):
        socketio.emit("alert", {"kind": "error", "message": f"Feld '{key}' fehlt."}, to=request.sid)
        return None


def active_sessions() -> int:
    with _lock:
        return len(_sessions)


def _wire(sid: str, us: UserSession) -> None:
    """Forward controller output to this socket only."""
    chat = us.chat

    def emit_messages(messages):
        viewer = us.user_id
        if viewer is None:
            return
        owners = {m.product_id: chat.product_owner(m.product_id) for m in messages if m.product_id is not None}
        socketio.emit(
            "chat:messages",
            {
                "chat_id": chat.chat_id,
                "partner_id": chat.partner_id,
                "messages": [MessageResponse.from_entity(m).model_dump() for m in messages],
                "bubbles": [asdict(b) for b in build_bubbles(messages, viewer_id=viewer, owners=owners)],
            },
            to=sid,
        )

    def emit_conversations(previews):
        socketio.emit(
            "conversations:list",
            {
                "query": us.conversations.query,
                "items": [ChatPreviewResponse.from_entity(p).model_dump() for p in previews],
                "rows": [asdict(i) for i in build_items(previews)],
                "badge": us.badge.value,
            },
            to=sid,
        )

    def emit_alert(alert: Alert):
        socketio.emit("alert", asdict(alert), to=sid)

    chat.on_change(emit_messages)
    chat.on_alert(emit_alert)
    us.conversations.on_change(emit_conversations)
    us.conversations.on_alert(emit_alert)
    us.requests.on_alert(emit_alert)
    us.badge.subscribe(lambda count: socketio.emit("badge:count", {"count": count}, to=sid))
    us.requests.on_change(lambda count: socketio.emit("requests:count", {"count": count}, to=sid))


def register_socket_handlers() -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        token = _get_bearer_token()
        if not token and isinstance(auth, dict):
            token = auth.get("token")
        if not token:
            return disconnect()

        try:
            claims = JwtProvider().decode(token)
        except UnauthorizedError:
            return disconnect()

        user_id = int(claims["sub"])
        us = UserSession(user_id=user_id, claims=claims)
        _wire(request.sid, us)
        with _lock:
            _sessions[request.sid] = us

        join_room(f"user:{user_id}")
        logger.info("Socket %s connected as user %s", request.sid, user_id)

    @socketio.on("disconnect")
    def on_disconnect(*args):
        with _lock:
            us = _sessions.pop(request.sid, None)
        if us is not None:
            us.close()

    @socketio.on("chat:open")
    def on_chat_open(data: dict):
        us = _current()
        if us is None:
            return
        partner_id = _int_field(data, "partner_id")
        if partner_id is not None:
            us.chat.open(partner_id)

    @socketio.on("chat:send")
    def on_chat_send(data: dict):
        us = _current()
        if us is None:
            return
        msg = us.chat.send((data or {}).get("content"))
        return {"ok": msg is not None, "message_id": msg.id if msg else None}

    @socketio.on("chat:accept")
    def on_chat_accept(data: dict):
        us = _current()
        if us is None:
            return
        message_id = _int_field(data, "message_id")
        if message_id is not None:
            us.chat.accept_request(message_id, await_redemption=bool((data or {}).get("await_redemption")))

    @socketio.on("chat:decline")
    def on_chat_decline(data: dict):
        us = _current()
        if us is None:
            return
        message_id = _int_field(data, "message_id")
        if message_id is not None:
            us.chat.decline_request(message_id)

    @socketio.on("chat:close")
    def on_chat_close(*args):
        us = _current()
        if us is not None:
            us.chat.close()

    @socketio.on("conversations:watch")
    def on_conversations_watch(data: dict | None = None):
        us = _current()
        if us is None:
            return
        us.conversations.watch((data or {}).get("q"))
        us.requests.watch()
        socketio.emit("badge:count", {"count": us.badge.value}, to=request.sid)
        socketio.emit("requests:count", {"count": us.requests.count}, to=request.sid)

    @socketio.on("conversations:search")
    def on_conversations_search(data: dict | None = None):
        us = _current()
        if us is None:
            return
        us.conversations.search((data or {}).get("q"))
