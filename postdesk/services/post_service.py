import logging
from contextlib import contextmanager
from threading import Lock
from zlib import crc32

from postdesk.core.errors import (
    NotFoundError,
    PostNotFoundError,
    Unauthenticated,
    ValidationError,
)
from postdesk.core.logging import (
    EVENT_POST_CREATED,
    EVENT_POST_DELETED,
    EVENT_POST_UPDATED,
    log_event,
)
from postdesk.db import db
from postdesk.repositories import post_repository
from postdesk.services import media_linker, metadata_codec
from postdesk.services.sanitizer import sanitize

logger = logging.getLogger(__name__)


EDITABLE_FIELDS = ("title", "body", "metadata")

# attach/detach/delete are read-modify-write sequences on one post; they are
# serialized per post id within the process.
_POST_LOCK_STRIPES = 64
_post_locks = [Lock() for _ in range(_POST_LOCK_STRIPES)]


@contextmanager
def _post_lock(post_id):
    lock = _post_locks[crc32(post_id.encode("utf-8")) % _POST_LOCK_STRIPES]
    with lock:
        yield


def _require_principal(principal):
    if not isinstance(principal, str) or not principal.strip():
        raise Unauthenticated()
    return principal


def _require_post_id(post_id):
    if not isinstance(post_id, str) or not post_id.strip():
        raise NotFoundError("Post id is required")
    return post_id.strip()


def _clean_text(field, value):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field.capitalize()} is required")

    cleaned = sanitize(value).strip()
    if not cleaned:
        raise ValidationError(f"{field.capitalize()} has no content after sanitization")
    return cleaned


def _encode_metadata(metadata):
    if metadata is not None and not isinstance(metadata, dict):
        raise ValidationError("Metadata must be an object")
    return metadata_codec.encode(metadata)


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def get_post(post_id):
    return post_repository.find_by_id(_require_post_id(post_id))


def create_post(principal, title, body, metadata=None):
    principal = _require_principal(principal)

    post = post_repository.create_post(
        author=principal,
        title=_clean_text("title", title),
        body=_clean_text("body", body),
        metadata_text=_encode_metadata(metadata),
    )
    _commit()

    log_event(
        logger,
        "info",
        EVENT_POST_CREATED,
        post_id=post.id,
        body_length=len(post.body),
        has_metadata=post.metadata_text is not None,
    )
    return post


def edit_post(principal, post_id, patch):
    _require_principal(principal)
    post_id = _require_post_id(post_id)

    if patch is None:
        patch = {}
    if not isinstance(patch, dict):
        raise ValidationError("Invalid JSON body")

    changes = {}
    for field in EDITABLE_FIELDS:
        if field not in patch:
            continue
        if field == "metadata":
            changes["metadata_text"] = _encode_metadata(patch[field])
        else:
            changes[field] = _clean_text(field, patch[field])

    post = post_repository.update_post(post_id, changes)
    _commit()

    log_event(
        logger,
        "info",
        EVENT_POST_UPDATED,
        post_id=post.id,
        fields=",".join(sorted(changes)) or "-",
    )
    return post


def attach_featured(principal, post_id, upload):
    _require_principal(principal)
    if not isinstance(post_id, str) or not post_id.strip():
        raise ValidationError("Post id is required")
    if upload is None:
        raise ValidationError("Media file is required")

    post_id = post_id.strip()
    with _post_lock(post_id):
        try:
            post = post_repository.find_by_id(post_id)
        except PostNotFoundError as e:
            raise ValidationError("Invalid post id") from e

        return media_linker.attach(post, upload)


def detach_featured(principal, post_id):
    _require_principal(principal)
    post_id = _require_post_id(post_id)

    with _post_lock(post_id):
        post = post_repository.find_by_id(post_id)
        return media_linker.detach(post)


def delete_post(principal, post_id):
    _require_principal(principal)
    post_id = _require_post_id(post_id)

    with _post_lock(post_id):
        post = post_repository.find_by_id(post_id)
        object_names = media_linker.cascade_delete(post)
        post_repository.delete_post(post_id)
        _commit()

    media_linker.remove_objects(object_names)
    log_event(
        logger,
        "info",
        EVENT_POST_DELETED,
        post_id=post_id,
        media_removed=len(object_names),
    )
