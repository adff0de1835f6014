"""Admin-only user endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from tokenauth.api.deps import json_response, parse_pagination, timing
from tokenauth.core.components import get_components
from tokenauth.schemas import UserCreateSchema, UserSchema, UserUpdateSchema, build_meta
from tokenauth.services._shared.errors import NotFoundError
from tokenauth.services.authorization import ADMIN_ONLY

bp = Blueprint("users", __name__)

POLICIES = {
    "list_users": ADMIN_ONLY,
    "get_user": ADMIN_ONLY,
    "create_user": ADMIN_ONLY,
    "update_user": ADMIN_ONLY,
    "delete_user": ADMIN_ONLY,
}

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_create_schema = UserCreateSchema()
user_update_schema = UserUpdateSchema()


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@bp.get("")
@timing
def list_users():
    """Return paginated users."""

    pagination = parse_pagination()
    page = get_components().principals.list_page(pagination)
    data = user_list_schema.dump(page.items)
    meta = build_meta(total=page.total, page=page.page, limit=page.limit)
    return json_response({"data": data, "meta": meta})


@bp.post("")
@timing
def create_user():
    """Create a user without the sign-up confirmation flow."""

    data = user_create_schema.load(_payload())
    principal = get_components().principals.create(**data)
    return json_response({"data": user_schema.dump(principal)}, status=201)


@bp.get("/<string:user_id>")
@timing
def get_user(user_id: str):
    """Return one user by id."""

    principal = get_components().principals.get(user_id)
    if principal is None:
        raise NotFoundError("User", user_id)
    return json_response({"data": user_schema.dump(principal)})


@bp.post("/<string:user_id>")
@timing
def update_user(user_id: str):
    data = user_update_schema.load(_payload())
    principal = get_components().principals.update(user_id, **data)
    return json_response({"data": user_schema.dump(principal)})


@bp.delete("/<string:user_id>")
@timing
def delete_user(user_id: str):
    """Delete a user and return its final representation."""

    principal = get_components().principals.delete(user_id)
    return json_response({"data": user_schema.dump(principal)})
