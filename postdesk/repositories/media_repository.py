from postdesk.core.errors import MediaNotFoundError
from postdesk.db import db
from postdesk.models.media_model import Media


def add_media(owner_id, object_name, mime_type, original_filename=None, size=None):
    media = Media(
        owner_id=owner_id,
        object_name=object_name,
        mime_type=mime_type,
        original_filename=original_filename,
        size=size,
    )
    db.session.add(media)
    db.session.flush()
    return media


def get_media(media_id):
    media = db.session.get(Media, media_id) if media_id else None
    if media is None:
        raise MediaNotFoundError(media_id)
    return media


def list_media_by_owner(owner_id):
    return Media.query.filter_by(owner_id=owner_id).all()


def delete_media(media):
    db.session.delete(media)
    db.session.flush()
