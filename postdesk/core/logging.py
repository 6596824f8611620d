"""Structured logging baseline and event taxonomy.

Event taxonomy::

    app_start              - application factory finished
    post_created           - a post was persisted
    post_updated           - a partial update was committed
    post_deleted           - a post and its media were removed
    media_attached         - a featured media was linked to a post
    media_replaced         - a previous featured media was superseded
    media_detached         - the featured media reference was cleared
    media_deleted          - a media row and its stored object were removed
    media_cleanup_failed   - a stored object could not be removed
    media_storage_fallback - object storage unavailable, local disk used
    auth_rejected          - a request carried no usable credential
    db_write_failed        - a commit raised and was rolled back

Rules:
    - Never log tokens or secrets.
    - Log ids and content *lengths*, not post titles or bodies.

Usage::

    from postdesk.core.logging import log_event
    log_event(logger, "info", EVENT_POST_CREATED, post_id=post.id)
"""

import logging
import sys

EVENT_APP_START = "app_start"
EVENT_POST_CREATED = "post_created"
EVENT_POST_UPDATED = "post_updated"
EVENT_POST_DELETED = "post_deleted"
EVENT_MEDIA_ATTACHED = "media_attached"
EVENT_MEDIA_REPLACED = "media_replaced"
EVENT_MEDIA_DETACHED = "media_detached"
EVENT_MEDIA_DELETED = "media_deleted"
EVENT_MEDIA_CLEANUP_FAILED = "media_cleanup_failed"
EVENT_MEDIA_STORAGE_FALLBACK = "media_storage_fallback"
EVENT_AUTH_REJECTED = "auth_rejected"
EVENT_DB_WRITE_FAILED = "db_write_failed"


_HANDLER_ATTR = "_postdesk"


def setup_logging(level=logging.INFO) -> None:
    """Configure the root logger with a simple structured format.

    Safe to call multiple times; the handler is only added once.
    """
    root = logging.getLogger()
    root.setLevel(level)

    for h in root.handlers:
        if getattr(h, _HANDLER_ATTR, False):
            return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)


def log_event(
    logger: logging.Logger,
    level: str,
    event_name: str,
    **kwargs: object,
) -> None:
    """Emit ``event_name: key=value ...`` at the given level name."""
    parts = " ".join(f"{k}={v}" for k, v in kwargs.items())
    message = f"{event_name}: {parts}" if parts else event_name
    log_fn = getattr(logger, level, logger.info)
    log_fn(message)
