from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Literal
from app.api.v1.auth import RequestContext, get_request_context
from app.config import settings
from app.db.session import get_db
from app.services import search as search_service

router = APIRouter()

@router.get("")
async def search_drive(
    q: str = Query("", description="Search query"),
    type: Literal["file", "folder", "all"] = Query("all"),
    sort_by: Literal["name", "createdAt", "size"] = Query("name", alias="sortBy"),
    sort_order: Literal["asc", "desc"] = Query("asc", alias="sortOrder"),
    ctx: RequestContext = Depends(get_request_context),
    db: AsyncSession = Depends(get_db)
):
    """Search files and folders by name"""
    results = await search_service.search(
        db,
        ctx.user_id,
        q,
        resource_type=type,
        sort_by=sort_by,
        sort_order=sort_order,
        limit=settings.SEARCH_RESULT_LIMIT,
    )
    return {"success": True, "results": results}
