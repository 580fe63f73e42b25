import logging
import uuid
from pathlib import Path
from typing import Optional

from fastapi import UploadFile

from app.core.config import settings
from app.core.errors import ValidationFailedError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def _extension(filename: str) -> str:
    return Path(filename).suffix.lower().lstrip(".")


def store_image(image: Optional[UploadFile], folder: str = "questions") -> str:
    """Save an uploaded raster image and return the URL it is served from."""
    if image is None or not image.filename:
        raise ValidationFailedError("No image file provided")

    extension = _extension(image.filename)
    if extension not in ALLOWED_EXTENSIONS or (
        image.content_type and image.content_type not in ALLOWED_CONTENT_TYPES
    ):
        raise ValidationFailedError("Only jpeg, jpg, png, gif and webp images are allowed")

    data = image.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        limit_mb = settings.MAX_UPLOAD_BYTES // (1024 * 1024)
        raise ValidationFailedError(f"Image exceeds the {limit_mb} MB size limit")

    target_dir = Path(settings.UPLOAD_DIR) / folder
    target_dir.mkdir(parents=True, exist_ok=True)
    filename = f"{uuid.uuid4().hex}.{extension}"
    (target_dir / filename).write_bytes(data)

    logger.info("Stored image %s/%s (%d bytes)", folder, filename, len(data))
    return f"{settings.UPLOAD_URL_PREFIX}/{folder}/{filename}"
