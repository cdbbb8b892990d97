# critico/api/routes/__init__.py

from flask import Flask

from critico.api.routes.auth_routes import bp_auth
from critico.api.routes.chat_routes import bp_chats
from critico.api.routes.file_routes import bp_files
from critico.api.routes.health_routes import bp_health
from critico.api.routes.product_routes import bp_prod, bp_tags
from critico.api.routes.request_routes import bp_req, bp_tokens
from critico.api.routes.user_routes import bp_users


def register_routes(app: Flask, *, api_prefix: str, app_prefix: str) -> None:
    # health and public files live outside /api
    app.register_blueprint(bp_health, url_prefix=f"{app_prefix}/health")
    app.register_blueprint(bp_files, url_prefix=f"{app_prefix}/files")

    app.register_blueprint(bp_auth, url_prefix=f"{api_prefix}/auth")
    app.register_blueprint(bp_users, url_prefix=f"{api_prefix}/users")
    app.register_blueprint(bp_tags, url_prefix=f"{api_prefix}/tags")
    app.register_blueprint(bp_prod, url_prefix=f"{api_prefix}/products")
    app.register_blueprint(bp_chats, url_prefix=f"{api_prefix}/chats")
    app.register_blueprint(bp_req, url_prefix=f"{api_prefix}/requests")
    app.register_blueprint(bp_tokens, url_prefix=f"{api_prefix}/tokens")
