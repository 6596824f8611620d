"""Rich-text sanitization for user supplied post fields.

Backed by nh3 (ammonia): the input is parsed as an HTML fragment and
re-serialized keeping only allow-listed tags, attributes and URL schemes.
Because the output is always the serialization of an allow-listed tree,
sanitizing an already sanitized string returns it unchanged.
"""

import nh3


ALLOWED_TAGS = set(nh3.ALLOWED_TAGS)

# Removed together with everything inside them, not just unwrapped.
STRIPPED_CONTENT_TAGS = {"script", "style"}

ALLOWED_URL_SCHEMES = {"http", "https", "mailto"}


def sanitize(raw_html) -> str:
    if raw_html is None:
        return ""
    if not isinstance(raw_html, str):
        raw_html = str(raw_html)
    if not raw_html:
        return ""

    return nh3.clean(
        raw_html,
        tags=ALLOWED_TAGS,
        clean_content_tags=STRIPPED_CONTENT_TAGS,
        url_schemes=ALLOWED_URL_SCHEMES,
    )
