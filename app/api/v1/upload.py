from fastapi import APIRouter, Depends, File as FastAPIFile, Form, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession
import logging
import uuid
from app.api.v1.auth import RequestContext, get_request_context
from app.api.v1.serializers import file_to_dict
from app.config import settings
from app.core.errors import ConflictError, InternalError, ValidationError
from app.core.rate_limit import DEFAULT_LIMIT, limiter
from app.db.session import get_db
from app.services import files as file_service
from app.services import folders as folder_service
from app.services.metadata import ALLOWED_MIME_TYPES, extract_metadata
from app.services.storage import BlobStorage, BlobStorageError, get_blob_storage
from app.services.validation import clean_name

logger = logging.getLogger(__name__)

router = APIRouter()

def _parse_folder_id(value: str | None) -> uuid.UUID | None:
    # Multipart clients send "" or "null" for the root
    if value is None or value.strip() in ("", "null"):
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        raise ValidationError("Invalid folder ID")

@router.post("", status_code=201)
@limiter.limit(DEFAULT_LIMIT)
async def upload_file(
    request: Request,
    file: UploadFile | None = FastAPIFile(None),
    folder_id: str | None = Form(None, alias="folderId"),
    replace: bool = Form(False),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """Upload file bytes to blob storage and register the file.

    A name already taken in the target folder is a conflict unless ``replace``
    is set, in which case the existing file gets a new version.
    """
    if file is None or not file.filename:
        raise ValidationError("No file provided")

    max_bytes = settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024
    too_large = f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB"
    # Reject on the declared size before buffering the body
    if file.size is not None and file.size > max_bytes:
        raise ValidationError(too_large)

    data = await file.read()
    if len(data) > max_bytes:
        raise ValidationError(too_large)

    mime_type = file.content_type or "application/octet-stream"
    if mime_type not in ALLOWED_MIME_TYPES:
        raise ValidationError("File type not allowed")

    name = clean_name(file.filename, "File")
    target_folder_id = _parse_folder_id(folder_id)
    if target_folder_id is not None:
        await folder_service.get_folder(db, target_folder_id, ctx.user_id)

    existing = await file_service.find_by_name(db, name, ctx.user_id, target_folder_id)
    if existing is not None and not replace:
        raise ConflictError("A file with this name already exists in this folder")

    storage_key = storage.generate_storage_key(str(ctx.user_id), name)
    try:
        blob_url = await storage.put(storage_key, data, mime_type)
    except BlobStorageError as e:
        raise InternalError(f"Upload failed: {str(e)}")

    metadata = extract_metadata(data, mime_type, storage_key)

    if existing is not None:
        previous_url = existing.blob_url
        db_file = await file_service.add_version(
            db, existing, blob_url=blob_url, size=len(data), mime_type=mime_type, metadata=metadata
        )
        logger.info(f"File {db_file.id} replaced, now version {db_file.version} (previous blob {previous_url})")
    else:
        db_file = await file_service.create_file(
            db,
            ctx.user_id,
            name=name,
            original_name=file.filename,
            mime_type=mime_type,
            size=len(data),
            blob_url=blob_url,
            folder_id=target_folder_id,
            metadata=metadata,
        )

    return {"success": True, "file": file_to_dict(db_file)}
