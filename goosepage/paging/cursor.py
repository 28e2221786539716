"""Opaque cursor tokens.

A cursor is the list of sort-key values of one document, serialized as BSON
so every value keeps its type (dates stay dates, ObjectIds stay ObjectIds)
and then wrapped in unpadded URL-safe base64.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from collections.abc import Sequence
from typing import Any

import bson
from bson.binary import UuidRepresentation
from bson.codec_options import CodecOptions
from bson.errors import BSONError

from goosepage.utils.exceptions import MalformedCursor

logger = logging.getLogger(__name__)

_VALUES_KEY = "v"
_TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_CODEC_OPTIONS = CodecOptions(uuid_representation=UuidRepresentation.STANDARD)


def encode_cursor(values: Sequence[Any]) -> str:
    """Encode an ordered sequence of BSON-compatible values into a token.

    Raises:
        bson.errors.InvalidDocument: If a value has no BSON representation
    """
    raw = bson.encode({_VALUES_KEY: list(values)}, codec_options=_CODEC_OPTIONS)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode_cursor(token: str) -> list[Any]:
    """Decode a token produced by encode_cursor().

    Args:
        token: Opaque cursor string

    Returns:
        The cursor values, in sort-key order and with their original types

    Raises:
        MalformedCursor: If the token is not a valid cursor
    """
    if not isinstance(token, str) or not _TOKEN_RE.match(token):
        raise MalformedCursor("Cursor must be a non-empty URL-safe base64 string")

    padded = token + "=" * (-len(token) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        raise MalformedCursor(f"Cursor is not valid base64: {e}") from e

    try:
        data = bson.decode(raw, codec_options=_CODEC_OPTIONS)
    except (BSONError, ValueError, IndexError) as e:
        logger.debug("Rejected cursor %r: %s", token, e)
        raise MalformedCursor(f"Cursor payload is corrupt: {e}") from e

    values = data.get(_VALUES_KEY)
    if len(data) != 1 or not isinstance(values, list):
        raise MalformedCursor("Cursor payload does not hold a value list")
    return values
