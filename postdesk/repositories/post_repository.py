from postdesk.core.errors import PostNotFoundError
from postdesk.db import db
from postdesk.models.post_model import Post


UPDATABLE_FIELDS = ("title", "body", "metadata_text", "media_id")


def create_post(author, title, body, metadata_text=None):
    post = Post(
        author=author,
        title=title,
        body=body,
        metadata_text=metadata_text,
    )
    db.session.add(post)
    db.session.flush()

    return post


def find_by_id(post_id):
    post = db.session.get(Post, post_id) if post_id else None
    if post is None:
        raise PostNotFoundError(post_id)
    return post


def update_post(post_id, patch):
    post = find_by_id(post_id)

    for field, value in patch.items():
        if field not in UPDATABLE_FIELDS:
            raise ValueError(f"Field is not updatable: {field}")
        setattr(post, field, value)

    post.touch()
    db.session.flush()
    return post


def delete_post(post_id):
    post = find_by_id(post_id)
    db.session.delete(post)
    db.session.flush()
