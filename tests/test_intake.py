"""Tests for image intake: media-type validation and previews."""

import io

import pytest
from PIL import Image

from src.corn_diagnosis.config import UNKNOWN_FILE_NAME
from src.corn_diagnosis.errors import NotAnImageError
from src.corn_diagnosis.services.intake_service import build_preview, is_image_media_type, validate

from conftest import make_jpeg


# ──────────────────────────────────────────────
# validate
# ──────────────────────────────────────────────
@pytest.mark.parametrize("media_type", ["image/jpeg", "image/png", "IMAGE/WEBP", " image/jpeg; q=1"])
def test_validate_accepts_image_types(media_type: str) -> None:
    candidate = validate(b"abc", media_type, "leaf.jpg")
    assert candidate.file_name == "leaf.jpg"
    assert candidate.data == b"abc"
    assert candidate.size == 3
    assert candidate.media_type.startswith("image/")


@pytest.mark.parametrize("media_type", ["text/plain", "application/pdf", "video/mp4", "", None, "imagex/png"])
def test_validate_rejects_non_images(media_type) -> None:
    with pytest.raises(NotAnImageError):
        validate(b"abc", media_type, "notes.txt")


def test_validate_defaults_file_name() -> None:
    assert validate(b"abc", "image/png").file_name == UNKNOWN_FILE_NAME


def test_is_image_media_type_ignores_parameters() -> None:
    assert is_image_media_type("image/png; charset=binary")
    assert not is_image_media_type("text/html; charset=utf-8")


def test_candidate_dump_excludes_payload() -> None:
    candidate = validate(b"secret-bytes", "image/png", "a.png")
    assert "data" not in candidate.model_dump()


# ──────────────────────────────────────────────
# build_preview
# ──────────────────────────────────────────────
def test_build_preview_downscales() -> None:
    candidate = validate(make_jpeg((800, 400)), "image/jpeg", "big.jpg")
    content, media_type = build_preview(candidate, max_pixels=100)
    assert media_type == "image/png"
    img = Image.open(io.BytesIO(content))
    assert max(img.size) == 100


def test_build_preview_falls_back_on_undecodable_payload() -> None:
    candidate = validate(b"not really an image", "image/jpeg", "broken.jpg")
    content, media_type = build_preview(candidate)
    assert content == b"not really an image"
    assert media_type == "image/jpeg"
