from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.v1.auth import get_current_user
from app.api.v1.serializers import user_detail, user_summary
from app.db.session import get_db
from app.models.user import User
from app.services import users as user_service

router = APIRouter()

@router.get("")
async def get_users(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List all users"""
    users = await user_service.list_users(db)
    return {
        "success": True,
        "users": [user_summary(user) for user in users],
        "count": len(users),
    }

@router.get("/me")
async def get_my_profile(current_user: User = Depends(get_current_user)):
    """Get current user profile"""
    return {"success": True, "user": user_detail(current_user)}

@router.get("/search")
async def search_users(
    q: str = "",
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Find users to share with, by email. Queries under 3 characters return nothing."""
    users = await user_service.search_users(db, q, exclude_id=current_user.id)
    return {"success": True, "users": [user_summary(user) for user in users]}
