# crudsuite/services/storage.py
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet

import aiofiles
from fastapi import UploadFile

from crudsuite.core.config import settings
from crudsuite.core.errors import ValidationError

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({".jpeg", ".jpg", ".png", ".gif"})
IMAGE_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/gif"})


@dataclass(frozen=True)
class UploadKind:
    subdir: str
    prefix: str
    extensions: FrozenSet[str]
    content_types: FrozenSet[str]
    max_bytes_setting: str
    type_error: str


PROFILE_PHOTO = UploadKind("profiles", "profile", IMAGE_EXTENSIONS, IMAGE_TYPES, "MAX_IMAGE_BYTES",
                           "Only image files are allowed (jpeg, jpg, png, gif)")
COMPANY_LOGO = UploadKind("logos", "logo", IMAGE_EXTENSIONS, IMAGE_TYPES, "MAX_IMAGE_BYTES",
                          "Only image files are allowed (jpeg, jpg, png, gif)")
RESUME = UploadKind("resumes", "resume", frozenset({".pdf"}), frozenset({"application/pdf"}), "MAX_RESUME_BYTES",
                    "Only PDF files are allowed")


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def check_upload(file: UploadFile, kind: UploadKind) -> str:
    """Validate extension and MIME type; returns the normalised extension."""
    ext = Path(file.filename or "").suffix.lower()
    content_type = (file.content_type or "").lower()
    if ext not in kind.extensions or content_type not in kind.content_types:
        raise ValidationError(kind.type_error)
    return ext


async def store_upload(file: UploadFile, kind: UploadKind) -> str:
    """
    Save an uploaded file under UPLOAD_DIR/<subdir>/ and return the public
    reference path, e.g. ``/uploads/resumes/resume-<hex>.pdf``.
    """
    ext = check_upload(file, kind)
    limit = getattr(settings, kind.max_bytes_setting)
    contents = await file.read()
    if len(contents) > limit:
        raise ValidationError(f"File too large. Maximum size is {limit // (1024 * 1024)}MB")

    target_dir = upload_root() / kind.subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    name = f"{kind.prefix}-{uuid.uuid4().hex}{ext}"
    async with aiofiles.open(target_dir / name, "wb") as out:
        await out.write(contents)
    logger.info("Stored %s upload %s (%d bytes)", kind.prefix, name, len(contents))
    return f"/uploads/{kind.subdir}/{name}"


def resolve_reference(ref: str) -> Path:
    """Map a ``/uploads/...`` reference back to its path on disk."""
    relative = ref.split("/uploads/", 1)[-1]
    return upload_root() / relative


def delete_upload(ref: str) -> bool:
    p = resolve_reference(ref)
    try:
        if p.exists():
            p.unlink()
        return True
    except OSError as e:
        logger.warning("Local delete failed for %s: %r", p, e)
        return False
