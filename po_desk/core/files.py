import re
from datetime import datetime

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
PDF_TYPE = "application/pdf"

# Names browsers give to clipboard and canvas blobs
_GENERIC_NAMES = ("", "blob", "image.png", "image.jpg")

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_.-]")


def sanitize_file_name(name: str) -> str:
    return _UNSAFE_CHARS.sub("_", name)


def is_supported_document(content_type: str | None) -> bool:
    return content_type in ALLOWED_IMAGE_TYPES or content_type == PDF_TYPE


def timestamped_name(prefix: str, extension: str, now: datetime | None = None) -> str:
    """e.g. 'colado-20250118-083000.png'"""
    now = now or datetime.now()
    return f"{prefix}-{now:%Y%m%d-%H%M%S}.{extension}"


def document_name(file_name: str | None, content_type: str, source: str = "upload",
                  now: datetime | None = None) -> str:
    """Keep real file names; name camera captures and clipboard pastes."""
    if file_name and file_name not in _GENERIC_NAMES:
        return file_name
    if source == "camera":
        return timestamped_name("captura", "jpg", now)
    extension = content_type.split("/")[1] if "/" in content_type else ""
    return timestamped_name("colado", extension or "png", now)
