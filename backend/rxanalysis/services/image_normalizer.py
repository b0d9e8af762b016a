"""
Image payload normalization.
Strips an optional data-URI declaration and sanity-checks the base64 body
before anything is sent to a provider.
"""

import re
from typing import Optional

from rxanalysis.errors import ValidationError

_DATA_URI_PREFIX = re.compile(r"^data:image/(png|jpeg|jpg);base64,", re.IGNORECASE)
_BASE64_BODY = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")


def normalize_image(raw: Optional[str], max_length: Optional[int] = None) -> str:
    """Return the bare base64 payload of ``raw``."""
    if raw is None or not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Image data is required for prescription analysis")

    payload = _DATA_URI_PREFIX.sub("", raw.strip(), count=1)
    # Clients sometimes wrap long base64 strings
    payload = re.sub(r"\s+", "", payload)

    if not payload:
        raise ValidationError("Image data is empty after removing the data URI prefix")
    if max_length is not None and len(payload) > max_length:
        raise ValidationError(f"Image data too large (max {max_length} base64 characters)")
    if not _BASE64_BODY.match(payload):
        raise ValidationError("Image data is not valid base64")
    return payload
