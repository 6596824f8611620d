import uuid
from datetime import datetime, timezone

from postdesk.db import db


def _new_id():
    return uuid.uuid4().hex


def _utcnow():
    return datetime.now(timezone.utc)


class Post(db.Model):
    __tablename__ = "posts"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    author = db.Column(db.String(80), nullable=False, index=True)
    title = db.Column(db.Text, nullable=False)
    body = db.Column(db.Text, nullable=False)
    # "metadata" is reserved on declarative models, hence the attribute name.
    metadata_text = db.Column("metadata", db.Text, nullable=True)
    media_id = db.Column(
        db.String(32),
        db.ForeignKey("media.id"),
        nullable=True,
    )
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    # Read side only; the media linker owns every write to media_id.
    media = db.relationship("Media", foreign_keys=[media_id], lazy="select", viewonly=True)

    def touch(self):
        self.updated_at = _utcnow()
