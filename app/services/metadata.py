import io
import logging
from PIL import Image, UnidentifiedImageError
from app.db.base import utcnow

logger = logging.getLogger(__name__)

# Upload allow-list
ALLOWED_MIME_TYPES = frozenset([
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "text/plain",
    "text/csv",
    # Images
    "image/jpeg",
    "image/jpg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
    # Videos
    "video/mp4",
    "video/webm",
    "video/ogg",
    "video/quicktime",
    # Audio
    "audio/mpeg",
    "audio/wav",
    "audio/ogg",
    "audio/mp4",
    # Archives
    "application/zip",
    "application/x-rar-compressed",
    "application/x-7z-compressed",
    "application/gzip",
    # Code
    "text/javascript",
    "text/typescript",
    "text/css",
    "text/html",
    "application/json",
    "application/xml",
])


def file_category(mime_type: str) -> str:
    if mime_type.startswith("image/"):
        return "image"
    if mime_type.startswith("video/"):
        return "video"
    if mime_type.startswith("audio/"):
        return "audio"
    if "pdf" in mime_type:
        return "pdf"
    if "word" in mime_type or "document" in mime_type:
        return "document"
    if "excel" in mime_type or "spreadsheet" in mime_type:
        return "spreadsheet"
    if "powerpoint" in mime_type or "presentation" in mime_type:
        return "presentation"
    if any(marker in mime_type for marker in ("zip", "rar", "7z", "gzip")):
        return "archive"
    if any(marker in mime_type for marker in ("javascript", "typescript", "css", "html", "json", "xml")):
        return "code"
    if mime_type.startswith("text/"):
        return "text"
    return "unknown"


def image_dimensions(data: bytes) -> tuple[int, int] | None:
    try:
        with Image.open(io.BytesIO(data)) as image:
            return image.size
    except (UnidentifiedImageError, OSError) as e:
        logger.debug(f"Could not read image dimensions: {str(e)}")
        return None


def extract_metadata(data: bytes, mime_type: str, storage_key: str) -> dict:
    metadata = {
        "uploadedAt": utcnow().isoformat(),
        "storageKey": storage_key,
        "contentType": mime_type,
        "category": file_category(mime_type),
    }
    if mime_type.startswith("image/") and mime_type != "image/svg+xml":
        dimensions = image_dimensions(data)
        if dimensions:
            metadata["width"], metadata["height"] = dimensions
    return metadata
