from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
import uuid
from app.api.v1.auth import RequestContext, get_request_context
from app.api.v1.serializers import folder_to_dict, user_summary
from app.api.v1.sharing import add_share_routes
from app.db.session import get_db
from app.services import folders as folder_service
from app.services import sharing as sharing_service
from pydantic import BaseModel, Field

router = APIRouter()

class FolderCreate(BaseModel):
    name: str
    description: str | None = None
    parent_id: uuid.UUID | None = Field(None, alias="parentId")

class FolderUpdate(BaseModel):
    name: str
    description: str | None = None

@router.get("")
async def get_folders(
    parent_id: uuid.UUID | None = Query(None, alias="parentId"),
    all_folders: bool = Query(False, alias="all"),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """List direct children of parentId (root when absent), or every folder with all=true"""
    folders = await folder_service.list_folders(db, ctx.user_id, parent_id=parent_id, all_folders=all_folders)
    return {
        "success": True,
        "folders": [folder_to_dict(folder) for folder in folders],
    }

@router.post("", status_code=201)
async def create_folder(
    folder_data: FolderCreate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Create new folder"""
    folder = await folder_service.create_folder(
        db,
        folder_data.name,
        ctx.user_id,
        parent_id=folder_data.parent_id,
        description=folder_data.description,
    )
    return {"success": True, "folder": folder_to_dict(folder)}

@router.get("/tree")
async def get_folder_tree(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """All folders as a nested tree, for the sidebar"""
    tree = await folder_service.load_tree(db, ctx.user_id)
    return {"success": True, "tree": tree.nested(folder_to_dict)}

@router.get("/shared-with-me")
async def get_shared_folders(
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Folders other users have shared with the caller"""
    rows = await sharing_service.list_shared_with_me(db, ctx.user_id, "folder")
    return {
        "success": True,
        "folders": [
            {
                "id": str(folder.id),
                "name": folder.name,
                "description": folder.description,
                "createdAt": folder.created_at.isoformat(),
                "updatedAt": folder.updated_at.isoformat() if folder.updated_at else None,
                "owner": user_summary(owner),
                "permission": share.permission,
            }
            for folder, owner, share in rows
        ],
    }

@router.get("/{folder_id}")
async def get_folder(
    folder_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Get a single folder with its breadcrumb path"""
    folder = await folder_service.get_folder(db, folder_id, ctx.user_id)
    tree = await folder_service.load_tree(db, ctx.user_id)
    return {
        "success": True,
        "folder": {
            **folder_to_dict(folder),
            "path": tree.path(folder.id),
            "breadcrumbs": [
                {"id": str(crumb.id), "name": crumb.name} for crumb in tree.breadcrumbs(folder.id)
            ],
        },
    }

@router.patch("/{folder_id}")
async def update_folder(
    folder_id: uuid.UUID,
    folder_data: FolderUpdate,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Rename folder"""
    folder = await folder_service.rename_folder(
        db, folder_id, folder_data.name, ctx.user_id, description=folder_data.description
    )
    return {"success": True, "folder": folder_to_dict(folder)}

@router.delete("/{folder_id}")
async def delete_folder(
    folder_id: uuid.UUID,
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Delete folder; refused while it still has files or subfolders"""
    await folder_service.delete_folder(db, folder_id, ctx.user_id)
    return {"success": True, "message": "Folder deleted successfully"}

add_share_routes(router, "folder")
