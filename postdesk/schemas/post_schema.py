from postdesk.extensions.extensions import ma
from postdesk.services.media_storage import build_media_url


class MediaResponseSchema(ma.Schema):
    id = ma.Str()
    url = ma.Method("get_url")
    mime_type = ma.Str()

    def get_url(self, media):
        return build_media_url(media.object_name)


class PostResponseSchema(ma.Schema):
    id = ma.Str()
    title = ma.Str()
    body = ma.Str()
    # The encoded scalar is returned as-is; clients decode it themselves.
    metadata = ma.Str(attribute="metadata_text", allow_none=True)
    author = ma.Str()
    created_at = ma.DateTime()
    updated_at = ma.DateTime()
    media = ma.Nested(MediaResponseSchema, allow_none=True)


post_schema = PostResponseSchema()
