"""
Utilities for loading user-supplied images and converting them to data URIs.
"""

import asyncio
import base64
import logging
import re
from io import BytesIO
from typing import Any, Iterable, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from landing_gen.errors import ValidationError
from landing_gen.models import MAX_IMAGES

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = ("image/png", "image/jpeg", "image/gif", "image/webp")
MAX_IMAGE_BYTES = 10 * 1024 * 1024
DEFAULT_MIME_TYPE = "image/png"

_DATA_URI_MIME = re.compile(r":(.*?);")


def encode_data_uri(payload: bytes, mime_type: str = DEFAULT_MIME_TYPE) -> str:
    """Encode raw bytes as a base64 data URI."""
    encoded = base64.b64encode(payload).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def parse_data_uri(data_uri: str) -> Tuple[str, str]:
    """
    Split a data URI into its MIME type and base64 payload.

    Args:
        data_uri: String of the form ``data:<mime>;base64,<payload>``.

    Returns:
        Tuple of (mime_type, base64_payload). The MIME type falls back to
        image/png when the header does not carry one.
    """
    header, separator, payload = data_uri.partition(",")
    if not separator or not header.startswith("data:"):
        raise ValidationError("Image is not a data URI")

    match = _DATA_URI_MIME.search(header)
    mime_type = match.group(1) if match and match.group(1) else DEFAULT_MIME_TYPE
    return mime_type, payload


def decode_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """Return (mime_type, raw bytes) for a base64 data URI."""
    mime_type, payload = parse_data_uri(data_uri)
    try:
        return mime_type, base64.b64decode(payload, validate=True)
    except ValueError as e:
        raise ValidationError("Image data URI is not valid base64") from e


class ImageLoader:
    """Loads uploaded images and normalizes them to data URIs."""

    def __init__(self, max_bytes: int = MAX_IMAGE_BYTES, max_images: int = MAX_IMAGES):
        """
        Initialize image loader.

        Args:
            max_bytes: Largest accepted file size in bytes.
            max_images: Number of uploads kept; extra files are ignored.
        """
        self.max_bytes = max_bytes
        self.max_images = max_images

    def load_image(self, payload: bytes) -> Image.Image:
        """
        Open image bytes with Pillow.

        Args:
            payload: Raw file contents.

        Returns:
            Loaded PIL Image.
        """
        try:
            image = Image.open(BytesIO(payload))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationError("File is not a readable image") from e
        return image

    def to_data_uri(self, payload: bytes, declared_type: Optional[str] = None) -> str:
        """
        Validate image bytes and encode them as a data URI.

        The MIME type is taken from the decoded image format; the declared
        upload type is only used when Pillow cannot name the format.
        """
        if not payload:
            raise ValidationError("Image file is empty")
        if len(payload) > self.max_bytes:
            limit_mb = self.max_bytes / (1024 * 1024)
            raise ValidationError(f"Image exceeds the {limit_mb:g} MB limit")

        image = self.load_image(payload)
        mime_type = Image.MIME.get(image.format or "") or declared_type
        if mime_type not in ALLOWED_MIME_TYPES:
            raise ValidationError(f"Unsupported image type: {mime_type or 'unknown'}")

        return encode_data_uri(payload, mime_type)

    async def read_upload(self, upload: Any) -> str:
        """
        Read one uploaded file into a data URI.

        Args:
            upload: File-like upload exposing ``getvalue()`` and ``type``
                (e.g. a Streamlit UploadedFile).

        Returns:
            Data URI string.
        """
        payload = await asyncio.to_thread(upload.getvalue)
        return await asyncio.to_thread(self.to_data_uri, payload, getattr(upload, "type", None))

    async def read_uploads(self, uploads: Optional[Iterable[Any]]) -> List[str]:
        """
        Read uploaded files concurrently.

        Results keep the upload order regardless of which read finishes first.
        Files beyond ``max_images`` are dropped.
        """
        selected = list(uploads or [])
        if len(selected) > self.max_images:
            logger.warning(
                "Received %d images, keeping the first %d", len(selected), self.max_images
            )
            selected = selected[: self.max_images]

        if not selected:
            return []

        results = await asyncio.gather(*(self.read_upload(upload) for upload in selected))
        return list(results)
