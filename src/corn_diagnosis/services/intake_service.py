"""Service layer – image intake: validation and preview generation."""

from __future__ import annotations

import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from src.corn_diagnosis.config import UNKNOWN_FILE_NAME
from src.corn_diagnosis.errors import NotAnImageError
from src.corn_diagnosis.schemas.upload import ImageCandidate

logger = logging.getLogger(__name__)


def is_image_media_type(media_type: Optional[str]) -> bool:
    """``True`` when *media_type* declares an ``image/*`` kind."""
    if not media_type:
        return False
    main_type = media_type.split(";", 1)[0].strip().lower()
    return main_type.startswith("image/")


def validate(data: bytes, media_type: Optional[str], file_name: Optional[str] = None) -> ImageCandidate:
    """
    Stage *data* as an image candidate.

    Only the declared media type is checked; the payload itself is not
    decoded here.

    Raises
    ------
    NotAnImageError
        When *media_type* does not indicate an image.
    """
    if not is_image_media_type(media_type):
        logger.info("Rejected file %r with media type %r.", file_name, media_type)
        raise NotAnImageError(media_type or "")

    return ImageCandidate(
        data=data,
        media_type=media_type.split(";", 1)[0].strip().lower(),
        file_name=file_name or UNKNOWN_FILE_NAME,
        size=len(data),
    )


def build_preview(candidate: ImageCandidate, max_pixels: int = 512) -> tuple[bytes, str]:
    """Return ``(bytes, media_type)`` of a downscaled PNG preview.

    Falls back to the original payload when Pillow cannot decode it.
    """
    try:
        img = Image.open(io.BytesIO(candidate.data))
        img = ImageOps.exif_transpose(img)
        img.thumbnail((max_pixels, max_pixels))
        if img.mode not in ("RGB", "RGBA", "L"):
            img = img.convert("RGBA")
        buf = io.BytesIO()
        img.save(buf, format="PNG")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
        logger.warning("Preview unavailable for %s: %s", candidate.file_name, exc)
        return candidate.data, candidate.media_type
    return buf.getvalue(), "image/png"
