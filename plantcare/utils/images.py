"""
Image Ingest Utilities
======================

Validates and normalizes raw image payloads before they reach the inference
service. Everything is turned into a ``data:image/<fmt>;base64,...`` URI.

Features:
- Format sniffing from magic bytes (png, jpeg, gif; jpeg by default)
- Size limit enforcement
- Pass-through / wrapping of string payloads, with ``None`` as the
  "unusable image" signal
"""

import base64
import binascii
import logging
import re

from plantcare.constants import ImageLimits
from plantcare.domain.exceptions import ImageFormatError, SizeLimitExceeded

logger = logging.getLogger(__name__)

_PNG_MAGIC = b"\x89PNG"
_JPEG_MAGIC = b"\xff\xd8"
_GIF_MAGIC = b"GIF"

_DATA_URI_PREFIX = "data:image/"
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")


def sniff_format(data: bytes) -> str:
    """Return ``"png"``, ``"jpeg"`` or ``"gif"`` from the leading bytes. Never fails."""
    if data.startswith(_PNG_MAGIC):
        return "png"
    if data.startswith(_JPEG_MAGIC):
        return "jpeg"
    if data.startswith(_GIF_MAGIC):
        return "gif"
    return "jpeg"


def build_data_uri(data: bytes) -> str:
    """Encode raw image bytes as a data URI."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:image/{sniff_format(data)};base64,{payload}"


def size_in_mb(num_bytes: int) -> float:
    return num_bytes / ImageLimits.BYTES_PER_MB


def enforce_size_limit(data: bytes, max_mb: float = ImageLimits.MAX_MB) -> None:
    """Raise :class:`SizeLimitExceeded` when ``data`` is larger than ``max_mb``."""
    size_mb = size_in_mb(len(data))
    if size_mb > max_mb:
        raise SizeLimitExceeded(size_mb, max_mb)


def validate_or_none(candidate: str | None) -> str | None:
    """
    Normalize a string image payload.

    - an existing data URI passes through unchanged
    - a bare base64 string is wrapped as a jpeg data URI
    - anything else returns ``None`` so callers can fall back to a text-only
      request instead of sending an unusable image reference
    """
    if not candidate:
        return None
    candidate = candidate.strip()
    if candidate.startswith(_DATA_URI_PREFIX):
        return candidate
    compact = "".join(candidate.split())
    if compact and _BASE64_RE.match(compact):
        return f"data:image/jpeg;base64,{compact}"
    return None


def _decoded_size(data_uri: str) -> int:
    _, _, payload = data_uri.partition(",")
    try:
        return len(base64.b64decode(payload, validate=False))
    except (binascii.Error, ValueError):
        # Estimate from the encoded length if the payload is not decodable
        return len(payload) * 3 // 4


class ImageIngestPipeline:
    """
    Turns image payloads into data URIs the inference service accepts.

    Parameters
    ----------
    max_mb:
        Largest accepted decoded image size in megabytes.
    """

    def __init__(self, max_mb: float = ImageLimits.MAX_MB):
        self.max_mb = max_mb

    def prepare(self, image: bytes | str) -> str:
        """
        Validate and normalize one image.

        Raises
        ------
        SizeLimitExceeded
            The decoded image is larger than ``max_mb``.
        ImageFormatError
            The payload cannot be used as an image reference.
        """
        if isinstance(image, (bytes, bytearray)):
            data = bytes(image)
            if not data:
                raise ImageFormatError("Image payload is empty")
            enforce_size_limit(data, self.max_mb)
            return build_data_uri(data)

        if isinstance(image, str):
            data_uri = validate_or_none(image)
            if data_uri is None:
                logger.warning("Rejected image payload that is neither a data URI nor base64")
                raise ImageFormatError("Image payload is neither a data URI nor base64 data")
            size_mb = size_in_mb(_decoded_size(data_uri))
            if size_mb > self.max_mb:
                raise SizeLimitExceeded(size_mb, self.max_mb)
            return data_uri

        raise ImageFormatError(f"Unsupported image payload type: {type(image).__name__}")

    def prepare_many(self, images: list[bytes | str]) -> list[str]:
        return [self.prepare(image) for image in images]
