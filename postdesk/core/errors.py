"""Domain error taxonomy.

These exceptions say *what* went wrong. Mapping them onto HTTP status codes
is the job of the route layer (see ``postdesk.routes.post_routes``).
"""


class PostdeskError(Exception):
    """Base class for every error raised deliberately by postdesk."""


class Unauthenticated(PostdeskError):
    def __init__(self, message="Missing or invalid access token"):
        super().__init__(message)


class ValidationError(PostdeskError):
    pass


class NotFoundError(PostdeskError):
    pass


class PostNotFoundError(NotFoundError):
    def __init__(self, post_id=None):
        self.post_id = post_id
        super().__init__("Post not found")


class MediaNotFoundError(NotFoundError):
    def __init__(self, media_id=None):
        self.media_id = media_id
        super().__init__("Media not found")


class MediaStorageError(PostdeskError):
    pass


class MetadataEncodingError(ValidationError):
    pass


class MetadataDecodingError(PostdeskError):
    pass
