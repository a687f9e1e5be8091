import base64
import logging
import mimetypes
import re
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from core.models import UploadedImage

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)


class InvalidImageError(ValueError):
    """Raised when the uploaded file is not an image."""


def is_image_mime(mime_type: Optional[str]) -> bool:
    return bool(mime_type) and mime_type.startswith("image/")


def detect_mime_type(path: Path, declared: Optional[str] = None) -> Optional[str]:
    """
    Resolve the MIME type of an upload.

    Order: the type declared by the browser, the filename extension, then
    Pillow's format sniffing for files without a useful extension.
    """
    if declared:
        return declared

    guessed, _ = mimetypes.guess_type(path.name)
    if guessed:
        return guessed

    try:
        with Image.open(path) as img:
            return img.get_format_mimetype()
    except (UnidentifiedImageError, OSError):
        return None


def to_data_url(data: bytes, mime_type: str) -> str:
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def parse_data_url(data_url: str) -> tuple[str, str]:
    """Split a base64 data URL into (base64_payload, mime_type)."""
    match = DATA_URL_PATTERN.match(data_url)
    if not match:
        raise ValueError("Not a base64 data URL")
    return match.group(2), match.group(1)


def ingest_file(path, mime_type: Optional[str] = None) -> UploadedImage:
    """
    Validate an uploaded file and encode it for the analysis request.

    Raises:
        InvalidImageError: the file's MIME type is not image/*, or it is empty
    """
    path = Path(path)
    resolved = detect_mime_type(path, mime_type)
    if not is_image_mime(resolved):
        raise InvalidImageError(f"{path.name} is not an image ({resolved or 'unknown type'})")

    data = path.read_bytes()
    if not data:
        raise InvalidImageError(f"{path.name} is empty")

    data_url = to_data_url(data, resolved)
    payload, parsed_mime = parse_data_url(data_url)

    logger.info(f"📥 Accepted {path.name} ({parsed_mime}, {len(payload)} base64 chars)")
    return UploadedImage(
        base64_data=payload,
        mime_type=parsed_mime,
        data_url=data_url,
        filename=path.name,
    )
