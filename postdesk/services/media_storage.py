"""Object storage for uploaded media.

Uploads go to MinIO. When MinIO cannot be reached and the local fallback is
enabled, files are written below the Flask static folder instead; such
objects are recognizable by their ``static/`` prefix.
"""

import logging
import os
import uuid
from dataclasses import dataclass

from flask import current_app, has_request_context, request

from postdesk.core.errors import MediaStorageError, ValidationError
from postdesk.core.logging import (
    EVENT_MEDIA_CLEANUP_FAILED,
    EVENT_MEDIA_STORAGE_FALLBACK,
    log_event,
)
from postdesk.extensions.minio_client import get_minio_client

logger = logging.getLogger(__name__)


ALLOWED_IMAGE_MIME_TYPES = {
    "image/jpeg",
    "image/png",
    "image/webp",
    "image/gif",
}

LOCAL_PREFIX = "static/"


@dataclass(frozen=True)
class StoredObject:
    object_name: str
    mime_type: str
    original_filename: str
    size: int


def build_media_url(object_name: str) -> str:
    base_url = current_app.config.get("APP_PUBLIC_BASE_URL", "").rstrip("/")
    if not base_url and has_request_context():
        base_url = request.url_root.rstrip("/")

    if object_name.startswith(LOCAL_PREFIX):
        if base_url:
            return f"{base_url}/{object_name}"
        return f"/{object_name}"

    if base_url:
        return f"{base_url}/media/{object_name}"
    return f"/media/{object_name}"


def _extension_for_mimetype(mimetype: str) -> str:
    mapping = {
        "image/jpeg": "jpeg",
        "image/png": "png",
        "image/webp": "webp",
        "image/gif": "gif",
    }
    return mapping.get(mimetype, mimetype.split("/")[-1])


def _get_stream_and_length(file_storage):
    stream = getattr(file_storage, "stream", file_storage)
    stream.seek(0, os.SEEK_END)
    length = stream.tell()
    stream.seek(0)
    return stream, length


def validate_upload(upload):
    """Check that an upload is present and of an accepted image type."""
    if upload is None or not getattr(upload, "filename", ""):
        raise ValidationError("Media file is required")

    mimetype = (getattr(upload, "mimetype", None) or "").lower()
    if mimetype not in ALLOWED_IMAGE_MIME_TYPES:
        raise ValidationError(f"Unsupported media type: {mimetype or 'unknown'}")
    return mimetype


def _store_locally(upload, post_id: str, extension: str) -> str:
    filename = f"{uuid.uuid4().hex}.{extension}"
    relative_parts = ["uploads", "posts", post_id, filename]
    absolute_path = os.path.join(current_app.static_folder, *relative_parts)
    os.makedirs(os.path.dirname(absolute_path), exist_ok=True)

    upload.stream.seek(0)
    upload.save(absolute_path)
    return LOCAL_PREFIX + "/".join(relative_parts)


def store_upload(upload, post_id: str) -> StoredObject:
    mimetype = validate_upload(upload)
    extension = _extension_for_mimetype(mimetype)
    stream, length = _get_stream_and_length(upload)
    if length == 0:
        raise ValidationError("Media file is empty")

    bucket = current_app.config["MINIO_BUCKET"]
    object_name = f"posts/{post_id}/{uuid.uuid4().hex}.{extension}"

    try:
        minio = get_minio_client()
        if not minio.bucket_exists(bucket):
            minio.make_bucket(bucket)
        minio.put_object(
            bucket_name=bucket,
            object_name=object_name,
            data=stream,
            length=length,
            content_type=mimetype,
        )
    except Exception as e:
        if not current_app.config.get("MEDIA_LOCAL_FALLBACK_ENABLED", True):
            raise MediaStorageError("Media storage is unavailable") from e

        log_event(
            logger,
            "warning",
            EVENT_MEDIA_STORAGE_FALLBACK,
            post_id=post_id,
            error_type=type(e).__name__,
        )
        try:
            object_name = _store_locally(upload, post_id, extension)
        except OSError as local_error:
            raise MediaStorageError("Media storage is unavailable") from local_error

    return StoredObject(
        object_name=object_name,
        mime_type=mimetype,
        original_filename=upload.filename,
        size=length,
    )


def delete_object(object_name: str) -> bool:
    """Remove a stored object. Returns False when removal failed.

    Failures are logged rather than raised: by the time an object is removed
    nothing references it any more, so a leftover is only wasted space.
    """
    try:
        if object_name.startswith(LOCAL_PREFIX):
            relative = object_name[len(LOCAL_PREFIX):]
            path = os.path.join(current_app.static_folder, *relative.split("/"))
            if os.path.exists(path):
                os.remove(path)
        else:
            get_minio_client().remove_object(
                bucket_name=current_app.config["MINIO_BUCKET"],
                object_name=object_name,
            )
    except Exception as e:
        log_event(
            logger,
            "warning",
            EVENT_MEDIA_CLEANUP_FAILED,
            object_name=object_name,
            error_type=type(e).__name__,
        )
        return False
    return True
