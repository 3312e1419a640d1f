from datetime import date
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Literal
import uuid
from app.api.v1.auth import RequestContext, get_request_context
from app.api.v1.serializers import file_to_dict, user_summary, version_to_dict
from app.api.v1.sharing import add_share_routes
from app.config import settings
from app.core.errors import ValidationError
from app.db.session import get_db
from app.services import files as file_service
from app.services import sharing as sharing_service
from app.services.storage import BlobStorage, get_blob_storage
from pydantic import BaseModel, Field

router = APIRouter()

class FileRename(BaseModel):
    name: str

class BulkFiles(BaseModel):
    file_ids: List[uuid.UUID] = Field(default_factory=list, alias="fileIds")

class BulkUpdate(BulkFiles):
    action: str
    value: uuid.UUID | None = None

def _require_ids(file_ids: List[uuid.UUID]) -> List[uuid.UUID]:
    if not file_ids:
        raise ValidationError("Valid file IDs array is required")
    return file_ids

@router.get("")
async def get_files(
    search: str | None = None,
    category: str | None = None,
    folder_id: uuid.UUID | None = Query(None, alias="folderId"),
    sort_by: Literal["name", "size", "createdAt", "updatedAt"] = Query("createdAt", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("desc", alias="sortOrder"),
    limit: int = 50,
    offset: int = 0,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Get files for current user with pagination, search and sorting"""
    page = await file_service.list_files(
        db,
        ctx.user_id,
        search=search,
        category=category,
        folder_id=folder_id,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=limit,
        offset=offset,
        max_limit=settings.MAX_PAGE_SIZE,
    )
    return {
        "success": True,
        "files": [file_to_dict(file) for file in page.files],
        "pagination": {
            "total": page.total,
            "limit": page.limit,
            "offset": page.offset,
            "hasMore": page.has_more,
        },
    }

@router.head("")
async def get_file_stats(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Aggregate stats for the caller's files, as headers"""
    total_files, total_size = await file_service.file_stats(db, ctx.user_id)
    return Response(
        status_code=200,
        headers={"X-Total-Files": str(total_files), "X-Total-Size": str(total_size)},
    )

@router.get("/bulk")
async def get_bulk_files(
    ids: str = "",
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Metadata for several owned files (?ids=a,b,c)"""
    try:
        file_ids = [uuid.UUID(part) for part in ids.split(",") if part.strip()]
    except ValueError:
        raise ValidationError("File IDs must be UUIDs")
    if not file_ids:
        raise ValidationError("At least one file ID is required")

    files = await file_service.owned_files(db, file_ids, ctx.user_id)
    return {"success": True, "files": [file_to_dict(file) for file in files]}

@router.delete("/bulk")
async def bulk_delete_files(
    body: BulkFiles,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """Delete several files; ids the caller does not own are ignored"""
    deleted = await file_service.bulk_delete(db, storage, _require_ids(body.file_ids), ctx.user_id)
    return {
        "success": True,
        "message": f"Successfully deleted {deleted} files",
        "deletedCount": deleted,
    }

@router.patch("/bulk")
async def bulk_update_files(
    body: BulkUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Bulk actions on several files. Only "move" is supported."""
    file_ids = _require_ids(body.file_ids)
    if body.action != "move":
        raise ValidationError("Invalid action specified")
    if body.value is None:
        raise ValidationError("Folder ID is required for move action")

    updated = await file_service.bulk_move(db, file_ids, body.value, ctx.user_id)
    return {
        "success": True,
        "message": f"Successfully updated {updated} files",
        "updatedCount": updated,
        "action": body.action,
    }

@router.post("/bulk-download")
async def bulk_download_files(
    body: BulkFiles,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """Zip several files into one download"""
    archive = await file_service.bulk_download(db, storage, _require_ids(body.file_ids), ctx.user_id)
    filename = f"bulk-download-{date.today().isoformat()}.zip"
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )

@router.get("/shared-with-me")
async def get_shared_files(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Files other users have shared with the caller"""
    rows = await sharing_service.list_shared_with_me(db, ctx.user_id, "file")
    return {
        "success": True,
        "files": [
            {
                **file_to_dict(file),
                "owner": user_summary(owner),
                "permission": share.permission,
            }
            for file, owner, share in rows
        ],
    }

@router.get("/{file_id}")
async def get_file(
    file_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    file = await file_service.get_file(db, file_id, ctx.user_id)
    return {"success": True, "file": file_to_dict(file)}

@router.patch("/{file_id}")
async def rename_file(
    file_id: uuid.UUID,
    body: FileRename,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    file = await file_service.rename_file(db, file_id, body.name, ctx.user_id)
    return {"success": True, "file": file_to_dict(file)}

@router.delete("/{file_id}")
async def delete_file(
    file_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    """Delete file and, best effort, its blob"""
    await file_service.delete_file(db, storage, file_id, ctx.user_id)
    return {"success": True, "message": "File deleted successfully"}

@router.get("/{file_id}/versions")
async def get_file_versions(
    file_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    versions = await file_service.list_versions(db, file_id, ctx.user_id)
    return {"success": True, "versions": [version_to_dict(version) for version in versions]}

add_share_routes(router, "file")
