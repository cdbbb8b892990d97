# critico/app_factory.py
from __future__ import annotations

import logging

from flask import Flask
from flask_cors import CORS

from critico.api.middlewares.error_handler import register_error_handlers
from critico.api.realtime.socket_handlers import register_socket_handlers
from critico.api.routes import register_routes
from critico.config.flask_config import configure_app
from critico.config.logging_config import configure_logging
from critico.config.settings import settings
from critico.infrastructure.database.session import init_db
from critico.infrastructure.realtime.socketio_server import socketio

import critico.infrastructure.database.models  # noqa: F401

logger = logging.getLogger(__name__)

_handlers_registered = False


def create_app() -> Flask:
    global _handlers_registered

    configure_logging()

    app_prefix = settings.app_prefix.rstrip("/")
    api_prefix = f"{app_prefix}{settings.api_prefix}".rstrip("/")
    socket_path = f"{app_prefix}/socket.io"

    app = Flask(__name__)

    # CORS before the routes so OPTIONS preflights are answered
    CORS(
        app,
        resources={rf"{api_prefix}/*": {"origins": settings.cors_origins}},
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )

    configure_app(app)
    register_routes(app, api_prefix=api_prefix, app_prefix=app_prefix)
    register_error_handlers(app)

    if settings.auto_create_schema:
        init_db()

    socketio.init_app(
        app,
        path=socket_path,
        async_mode=settings.socketio_async_mode,
        cors_allowed_origins=settings.cors_origins,
    )
    # handlers live on the process-wide server object
    if not _handlers_registered:
        register_socket_handlers()
        _handlers_registered = True

    logger.info("Critico API ready (api=%s, socket=%s, mode=%s)", api_prefix, socket_path, settings.socketio_async_mode)
    return app
