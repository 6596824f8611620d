"""Featured media association for posts.

A post references at most one Media row through ``Post.media_id``. Every
change to that reference goes through this module, which orders the steps
so that a post never points at a Media row that no longer exists:

* attach:  store new object -> add Media row -> commit reference -> drop old
* detach:  clear reference -> commit -> drop old
* cascade: clear reference, drop every Media row owned by the post (the
  caller deletes the post in the same transaction)

Stored objects are only removed after the database no longer references
them. Removal failures leave an unreferenced object behind, which is logged.
"""

import logging

from postdesk.core.errors import PostNotFoundError, ValidationError
from postdesk.core.logging import (
    EVENT_MEDIA_ATTACHED,
    EVENT_MEDIA_DELETED,
    EVENT_MEDIA_DETACHED,
    EVENT_MEDIA_REPLACED,
    log_event,
)
from postdesk.db import db
from postdesk.models.media_model import Media
from postdesk.repositories import media_repository
from postdesk.services import media_storage

logger = logging.getLogger(__name__)


def _purge(media_rows):
    """Delete Media rows and collect their object names for later removal."""
    object_names = []
    for media in media_rows:
        object_names.append(media.object_name)
        media_repository.delete_media(media)
    return object_names


def remove_objects(object_names):
    for object_name in object_names:
        if media_storage.delete_object(object_name):
            log_event(logger, "info", EVENT_MEDIA_DELETED, object_name=object_name)


def attach(post, upload):
    if post is None:
        raise PostNotFoundError()
    if upload is None:
        raise ValidationError("Media file is required")

    stored = media_storage.store_upload(upload, post.id)

    previous_id = post.media_id
    try:
        media = media_repository.add_media(
            owner_id=post.id,
            object_name=stored.object_name,
            mime_type=stored.mime_type,
            original_filename=stored.original_filename,
            size=stored.size,
        )
        post.media_id = media.id
        post.touch()
        db.session.commit()
    except Exception:
        db.session.rollback()
        media_storage.delete_object(stored.object_name)
        raise

    log_event(logger, "info", EVENT_MEDIA_ATTACHED, post_id=post.id, media_id=media.id)

    if previous_id:
        _drop_media(previous_id)
        log_event(
            logger,
            "info",
            EVENT_MEDIA_REPLACED,
            post_id=post.id,
            previous_media_id=previous_id,
        )

    return post


def detach(post):
    previous_id = post.media_id
    if not previous_id:
        return post

    post.media_id = None
    post.touch()
    db.session.commit()

    _drop_media(previous_id)
    log_event(
        logger,
        "info",
        EVENT_MEDIA_DETACHED,
        post_id=post.id,
        media_id=previous_id,
    )

    return post


def cascade_delete(post):
    """Stage removal of every Media row tied to ``post``.

    Does not commit. Returns the object names to remove from storage once
    the caller's transaction has been committed.
    """
    rows = media_repository.list_media_by_owner(post.id)
    if post.media_id:
        featured = db.session.get(Media, post.media_id)
        if featured is not None and featured not in rows:
            rows.append(featured)
        post.media_id = None
        db.session.flush()

    return _purge(rows)


def _drop_media(media_id):
    media = db.session.get(Media, media_id)
    if media is None:
        return

    object_names = _purge([media])
    db.session.commit()
    remove_objects(object_names)
