"""Helpers for the base64 image strings handed to the vision chain.

Clients upload photos as base64 text, sometimes wrapped in a data URI
(``data:image/png;base64,iVBORw0...``).  Providers want the bare base64
content, and the OpenAI vision endpoint additionally wants a correct MIME
type in the data URI it receives.
"""

from __future__ import annotations

import base64
import binascii
import re

# Payloads shorter than this (after prefix stripping) cannot be a real
# photo; the vision chain short-circuits without any network call.
MIN_IMAGE_PAYLOAD_LENGTH = 100

_DATA_URI_PREFIX = re.compile(r"^data:(?P<media_type>[^;,]*)(?:;[^,]*)?,", re.IGNORECASE)


def strip_data_uri(payload: str | None) -> str:
    """Return the base64 content of *payload* without any data-URI prefix."""
    if not payload:
        return ""
    payload = payload.strip()
    match = _DATA_URI_PREFIX.match(payload)
    if match:
        return payload[match.end():].strip()
    return payload


def is_viable_payload(content: str) -> bool:
    """``True`` when stripped *content* is long enough to be sent anywhere."""
    return len(content) >= MIN_IMAGE_PAYLOAD_LENGTH


def detect_media_type(payload: str) -> str:
    """Work out the MIME type of a base64 image string.

    A data-URI prefix wins when it names an image type.  Otherwise the
    first bytes are decoded and checked against the PNG, WEBP and JPEG
    magic numbers.  JPEG is the fallback because phone cameras produce it.
    """
    match = _DATA_URI_PREFIX.match(payload.strip()) if payload else None
    if match and match.group("media_type").lower().startswith("image/"):
        return match.group("media_type").lower()

    content = strip_data_uri(payload)
    # 16 base64 chars decode to 12 bytes, enough for every signature below.
    try:
        head = base64.b64decode(content[:16], validate=False)
    except (binascii.Error, ValueError):
        return "image/jpeg"

    if head[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if head[:4] == b"RIFF" and head[8:12] == b"WEBP":
        return "image/webp"
    if head[:2] == b"\xff\xd8":
        return "image/jpeg"
    return "image/jpeg"
