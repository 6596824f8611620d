"""Metadata codec.

Post metadata is an arbitrary JSON-like tree that may also carry temporal
values. It is stored as a single text column, so ``encode`` turns the tree
into canonical JSON and ``decode`` rebuilds it.

Value kinds and their stored form:

=====================  ===========================================
null / bool / number   JSON literal (NaN and infinities rejected)
text                   JSON string
datetime               ``{"$datetime": "<ISO-8601 in UTC>"}``
date                   ``{"$date": "YYYY-MM-DD"}``
sequence               JSON array (tuples come back as lists)
mapping (str keys)     JSON object, keys sorted
=====================  ===========================================

A mapping whose single key is one of the tag names above is wrapped as
``{"$escape": {...}}`` so that it is not mistaken for a tagged value.
Naive datetimes are taken to be UTC and decode as aware UTC datetimes.
"""

import json
import math
from datetime import date, datetime, timezone
from functools import singledispatch

from postdesk.core.errors import MetadataDecodingError, MetadataEncodingError


DATETIME_TAG = "$datetime"
DATE_TAG = "$date"
ESCAPE_TAG = "$escape"
_TAGS = {DATETIME_TAG, DATE_TAG, ESCAPE_TAG}


def encode(value):
    """Serialize a metadata tree to its stored text form.

    ``None`` stays ``None`` so absent metadata leaves the column empty.
    """
    if value is None:
        return None
    return json.dumps(
        _to_json(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def decode(scalar):
    if scalar is None or scalar == "":
        return None
    if isinstance(scalar, bytes):
        scalar = scalar.decode("utf-8")
    try:
        raw = json.loads(scalar)
    except (TypeError, ValueError) as e:
        raise MetadataDecodingError("Stored metadata is not valid JSON") from e
    return _from_json(raw)


@singledispatch
def _to_json(value):
    raise MetadataEncodingError(
        f"Unsupported metadata value of type {type(value).__name__}"
    )


@_to_json.register(type(None))
@_to_json.register(str)
@_to_json.register(bool)
@_to_json.register(int)
def _(value):
    return value


@_to_json.register(float)
def _(value):
    if not math.isfinite(value):
        raise MetadataEncodingError("Metadata numbers must be finite")
    return value


# datetime is a date subclass, so it needs its own registration.
@_to_json.register(datetime)
def _(value):
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return {DATETIME_TAG: value.astimezone(timezone.utc).isoformat(timespec="microseconds")}


@_to_json.register(date)
def _(value):
    return {DATE_TAG: value.isoformat()}


@_to_json.register(list)
@_to_json.register(tuple)
def _(value):
    return [_to_json(item) for item in value]


@_to_json.register(dict)
def _(value):
    encoded = {}
    for key, item in value.items():
        if not isinstance(key, str):
            raise MetadataEncodingError("Metadata keys must be strings")
        encoded[key] = _to_json(item)

    if len(encoded) == 1 and next(iter(encoded)) in _TAGS:
        return {ESCAPE_TAG: encoded}
    return encoded


def _from_json(raw):
    if isinstance(raw, list):
        return [_from_json(item) for item in raw]
    if not isinstance(raw, dict):
        return raw

    if len(raw) == 1:
        (key, inner), = raw.items()
        if key == DATETIME_TAG:
            return _parse_temporal(datetime.fromisoformat, inner)
        if key == DATE_TAG:
            return _parse_temporal(date.fromisoformat, inner)
        if key == ESCAPE_TAG and isinstance(inner, dict):
            return {k: _from_json(v) for k, v in inner.items()}

    return {k: _from_json(v) for k, v in raw.items()}


def _parse_temporal(parser, text):
    if not isinstance(text, str):
        raise MetadataDecodingError("Temporal metadata must be stored as text")
    try:
        return parser(text)
    except ValueError as e:
        raise MetadataDecodingError(f"Invalid temporal metadata: {text}") from e
