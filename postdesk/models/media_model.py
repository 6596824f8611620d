from postdesk.db import db
from postdesk.models.post_model import _new_id, _utcnow


class Media(db.Model):
    __tablename__ = "media"

    id = db.Column(db.String(32), primary_key=True, default=_new_id)
    owner_id = db.Column(db.String(32), nullable=False, index=True)
    object_name = db.Column(db.String(255), nullable=False)
    mime_type = db.Column(db.String(50), nullable=False)
    original_filename = db.Column(db.String(255), nullable=True)
    size = db.Column(db.Integer, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow, nullable=False)
