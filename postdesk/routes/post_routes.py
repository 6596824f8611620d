from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity, jwt_required

from postdesk.core.errors import (
    MediaStorageError,
    NotFoundError,
    PostdeskError,
    Unauthenticated,
    ValidationError,
)
from postdesk.schemas.post_schema import post_schema
from postdesk.services import post_service

post_bp = Blueprint("posts", __name__)

FEATURED_FIELD = "postFeatured"

_ERROR_STATUS = (
    (Unauthenticated, 400),
    (ValidationError, 400),
    (NotFoundError, 404),
    (MediaStorageError, 503),
)


def _error_response(error: PostdeskError):
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return jsonify({"error": str(error)}), status
    return jsonify({"error": "Internal server error"}), 500


def _post_response(post, **extra):
    payload = dict(extra)
    payload["post"] = post_schema.dump(post)
    return jsonify(payload), 200


@post_bp.route("/post", methods=["POST"])
@jwt_required(optional=True)
def create_post():
    principal = get_jwt_identity()
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}

    try:
        post = post_service.create_post(
            principal,
            data.get("title"),
            data.get("body"),
            data.get("metadata"),
        )
        return _post_response(post)
    except PostdeskError as e:
        return _error_response(e)


@post_bp.route("/post/<post_id>", methods=["GET"])
def get_post(post_id):
    try:
        return _post_response(post_service.get_post(post_id))
    except PostdeskError as e:
        return _error_response(e)


@post_bp.route("/post", methods=["PATCH"], defaults={"post_id": None})
@post_bp.route("/post/<post_id>", methods=["PATCH"])
@jwt_required(optional=True)
def edit_post(post_id):
    principal = get_jwt_identity()
    data = request.get_json(silent=True)

    try:
        post = post_service.edit_post(principal, post_id, data)
        return _post_response(post)
    except PostdeskError as e:
        return _error_response(e)


@post_bp.route("/post", methods=["DELETE"], defaults={"post_id": None})
@post_bp.route("/post/<post_id>", methods=["DELETE"])
@jwt_required(optional=True)
def delete_post(post_id):
    principal = get_jwt_identity()

    try:
        post_service.delete_post(principal, post_id)
        return jsonify({"success": True}), 200
    except PostdeskError as e:
        return _error_response(e)


@post_bp.route("/post/<post_id>/featured", methods=["POST"])
@jwt_required(optional=True)
def attach_featured(post_id):
    principal = get_jwt_identity()
    upload = request.files.get(FEATURED_FIELD)

    try:
        post = post_service.attach_featured(principal, post_id, upload)
        return _post_response(post)
    except PostdeskError as e:
        return _error_response(e)


@post_bp.route("/post/<post_id>/featured", methods=["DELETE"])
@jwt_required(optional=True)
def detach_featured(post_id):
    principal = get_jwt_identity()

    try:
        post = post_service.detach_featured(principal, post_id)
        return _post_response(post, success=True)
    except PostdeskError as e:
        return _error_response(e)
