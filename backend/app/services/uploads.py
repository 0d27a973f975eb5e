import base64
import logging
import re
import shutil
from dataclasses import dataclass
from pathlib import Path

from fastapi import HTTPException, UploadFile, status

from ..core.config import get_settings

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_\-]")
_REPEATED_UNDERSCORES = re.compile(r"_{2,}")


@dataclass
class StoredImage:
    index: int
    filename: str
    path: str
    size: int


def exercise_slug(name: str) -> str:
    return _REPEATED_UNDERSCORES.sub("_", _UNSAFE_CHARS.sub("_", name.strip()))


def default_exercise_image(name: str) -> str:
    return f"/images/exercises/{exercise_slug(name)}/images/0.jpg"


def is_image(content_type: str | None) -> bool:
    return bool(content_type) and content_type.startswith("image/")


def validate_image(content_type: str | None, size: int) -> None:
    settings = get_settings()
    if not is_image(content_type):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only image files are allowed")
    if size > settings.upload_max_bytes:
        limit_mb = settings.upload_max_bytes // (1024 * 1024)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"File size must be less than {limit_mb}MB",
        )


def to_data_url(content_type: str, data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{content_type};base64,{encoded}"


async def read_image_as_data_url(upload: UploadFile) -> tuple[str, int]:
    """Validate type and declared size before reading, then recheck the bytes read."""
    validate_image(upload.content_type, upload.size or 0)
    data = await upload.read()
    validate_image(upload.content_type, len(data))
    return to_data_url(upload.content_type, data), len(data)


def exercise_media_dir(name: str) -> Path:
    return Path(get_settings().media_root) / "exercises" / exercise_slug(name)


async def store_exercise_images(name: str, uploads: list[UploadFile]) -> list[StoredImage]:
    """Write image uploads as ``<n>.<ext>`` under the exercise's media directory.

    Non-image files are skipped and do not consume an index.
    """
    slug = exercise_slug(name)
    images_dir = exercise_media_dir(name) / "images"
    images_dir.mkdir(parents=True, exist_ok=True)

    stored: list[StoredImage] = []
    for upload in uploads:
        if not is_image(upload.content_type):
            logger.info("Skipping non-image file %s", upload.filename)
            continue
        data = await upload.read()
        extension = "jpg"
        if upload.filename and "." in upload.filename:
            extension = upload.filename.rsplit(".", 1)[1].lower() or "jpg"
        filename = f"{len(stored)}.{extension}"
        (images_dir / filename).write_bytes(data)
        logger.info("Saved exercise image %s/%s (%d bytes)", slug, filename, len(data))
        stored.append(
            StoredImage(
                index=len(stored),
                filename=filename,
                path=f"/images/exercises/{slug}/images/{filename}",
                size=len(data),
            )
        )
    return stored


def remove_exercise_media(name: str) -> None:
    target = exercise_media_dir(name)
    try:
        shutil.rmtree(target)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.warning("Could not delete exercise directory %s: %s", target, exc)
