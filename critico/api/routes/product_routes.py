# critico/api/routes/product_routes.py

from __future__ import annotations

from flask import Blueprint, g, jsonify, request

from critico.api.middlewares.auth_middleware import auth_user_id, optional_auth, require_auth
from critico.api.routes.file_routes import build_file_service, single_upload
from critico.api.schemas.comment_schema import CommentPermissionResponse, CreateCommentRequest
from critico.api.schemas.file_schema import UploadFileResponse
from critico.api.schemas.message_schema import MessageResponse
from critico.api.schemas.product_schema import CreateProductRequest, ProductListResponse, ProductResponse, TagResponse
from critico.api.schemas.request_schema import RequestTestRequest
from critico.core.exceptions import ForbiddenError, ValidationError
from critico.infrastructure.database.session import db_session
from critico.services.file_service import Bucket
from critico.services.service_factory import build_services

bp_prod = Blueprint("products", __name__)
bp_tags = Blueprint("tags", __name__)


def _paging() -> tuple[int, int]:
    try:
        limit = int(request.args.get("limit", 30))
        offset = int(request.args.get("offset", 0))
    except ValueError:
        raise ValidationError("Ungültige Parameter limit/offset.")
    return max(1, min(limit, 100)), max(0, offset)


@bp_tags.get("")
def list_tags():
    with db_session() as session:
        tags = build_services(session).products.list_tags()
        body = [TagResponse(id=t.id, name=t.name).model_dump() for t in tags]
    return jsonify(body), 200


# -------------------------
# Products
# -------------------------

@bp_prod.get("")
def list_products():
    limit, offset = _paging()
    q = (request.args.get("q") or "").strip() or None
    tag_id = request.args.get("tag_id", type=int)
    owner_id = request.args.get("owner_id", type=int)

    with db_session() as session:
        items = build_services(session).products.list_products(
            q=q, tag_id=tag_id, owner_id=owner_id, limit=limit, offset=offset
        )
        body = ProductListResponse(
            items=[ProductResponse.from_detail(d) for d in items],
            limit=limit,
            offset=offset,
        ).model_dump()
    return jsonify(body), 200


@bp_prod.post("")
@require_auth
def create_product():
    payload = CreateProductRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        svc = build_services(session).products
        product = svc.create_product(owner_id=auth_user_id(), **payload.model_dump())
        body = ProductResponse.from_detail(svc.get_detail(product.id)).model_dump()
    return jsonify(body), 201


@bp_prod.get("/<int:product_id>")
def get_product(product_id: int):
    with db_session() as session:
        detail = build_services(session).products.get_detail(product_id)
        body = ProductResponse.from_detail(detail).model_dump()
    return jsonify(body), 200


@bp_prod.post("/<int:product_id>/images")
@require_auth
def upload_image(product_id: int):
    user_id = auth_user_id()
    with db_session() as session:
        # fail before touching storage
        if build_services(session).products.get_owner_id(product_id) != user_id:
            raise ForbiddenError()

    upload = single_upload(request)
    stored = build_file_service().upload(
        bucket=Bucket.PRODUCT_PICTURES,
        user_id=user_id,
        fileobj=upload.stream,
        original_name=upload.filename,
        content_type=upload.mimetype,
    )

    with db_session() as session:
        build_services(session).products.add_image(product_id=product_id, user_id=user_id, image_url=stored.public_url)

    return jsonify(UploadFileResponse.from_stored(stored).model_dump()), 201


# -------------------------
# Test requests
# -------------------------

@bp_prod.post("/<int:product_id>/request")
@require_auth
def request_test(product_id: int):
    payload = RequestTestRequest.model_validate(request.get_json(silent=True) or {})

    with db_session() as session:
        msg = build_services(session).requests.request_test(
            product_id=product_id, tester_id=auth_user_id(), content=payload.content
        )
        body = MessageResponse.from_entity(msg).model_dump()
    return jsonify(body), 201


# -------------------------
# Comments / reviews
# -------------------------

@bp_prod.get("/<int:product_id>/comments")
@optional_auth
def list_comments(product_id: int):
    viewer_id = int(g.auth["sub"]) if g.auth else None
    with db_session() as session:
        comments = build_services(session).comments.list_comments(product_id=product_id, viewer_id=viewer_id)
        body = [MessageResponse.from_entity(c).model_dump() for c in comments]
    return jsonify(body), 200


@bp_prod.post("/<int:product_id>/comments")
@require_auth
def post_comment(product_id: int):
    payload = CreateCommentRequest.model_validate(request.get_json(force=True))

    with db_session() as session:
        comment = build_services(session).comments.post_comment(
            product_id=product_id, user_id=auth_user_id(), content=payload.content, stars=payload.stars
        )
        body = MessageResponse.from_entity(comment).model_dump()
    return jsonify(body), 201


@bp_prod.get("/<int:product_id>/comments/permission")
@require_auth
def comment_permission(product_id: int):
    with db_session() as session:
        allowed = build_services(session).comments.can_comment(product_id=product_id, user_id=auth_user_id())
    return jsonify(CommentPermissionResponse(product_id=product_id, can_comment=allowed).model_dump()), 200
