import io
import logging
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError

from matatu.core.config_env import settings
from matatu.core.errors import ValidationError

logger = logging.getLogger(__name__)

ONLY_IMAGES = "Only image files are allowed!"


@dataclass
class ImageUpload:
    data: bytes
    filename: str
    mimetype: str


def ensure_dir(path: str) -> Path:
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_image_upload(upload: Optional[UploadFile], max_bytes: Optional[int] = None) -> Optional[ImageUpload]:
    """
    Reads an optional multipart image into memory and checks it.
    Returns None when no file was sent (missing field or empty file part).
    """
    if upload is None:
        return None
    limit = max_bytes or settings.MAX_UPLOAD_BYTES
    data = upload.file.read(limit + 1)
    if not upload.filename and not data:
        return None
    if len(data) > limit:
        raise ValidationError(f"File too large. Maximum size is {limit // (1024 * 1024)}MB.")
    mimetype = (upload.content_type or "").lower()
    if not mimetype.startswith("image/"):
        raise ValidationError(ONLY_IMAGES)
    try:
        Image.open(io.BytesIO(data)).verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError):
        raise ValidationError(ONLY_IMAGES)
    return ImageUpload(data=data, filename=Path(upload.filename or "image").name, mimetype=mimetype)


def save_image(image: ImageUpload, out_dir: Optional[str] = None, prefix: str = "lost-item") -> Path:
    """Writes the image under a unique name and returns the path on disk."""
    directory = ensure_dir(out_dir or settings.UPLOAD_DIR)
    suffix = Path(image.filename).suffix.lower()
    fname = f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}{suffix}"
    fpath = directory / fname
    with open(fpath, "wb") as f:
        f.write(image.data)
    return fpath


def public_url(path: Path) -> str:
    return f"/uploads/{path.name}"


def path_for_url(url: str, out_dir: Optional[str] = None) -> Optional[Path]:
    if not url or not url.startswith("/uploads/"):
        return None
    # only the basename is honoured, nothing outside the upload dir
    return Path(out_dir or settings.UPLOAD_DIR) / Path(url).name


def remove_file(path: Optional[Path]) -> None:
    if path is None:
        return
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError:
        logger.warning("could not delete upload %s", path, exc_info=True)
