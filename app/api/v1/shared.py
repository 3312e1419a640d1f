from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.v1.serializers import file_to_dict, folder_to_dict, user_summary
from app.core.rate_limit import DEFAULT_LIMIT, limiter
from app.db.session import get_db
from app.services import sharing as sharing_service

router = APIRouter()

@router.get("/{token}")
@limiter.limit(DEFAULT_LIMIT)
async def get_shared_resource(
    request: Request,
    token: str,
    db: AsyncSession = Depends(get_db)
):
    """Resolve a public link. No authentication; file views bump the download count."""
    resolved = await sharing_service.resolve_public_link(db, token)
    serialize = file_to_dict if resolved.resource_type == "file" else folder_to_dict

    return {
        "success": True,
        "resource": {
            **serialize(resolved.resource),
            "type": resolved.resource_type,
            "permission": resolved.link.permission,
        },
        "owner": user_summary(resolved.owner),
        "publicLink": {
            "token": resolved.link.token,
            "expiresAt": resolved.link.expires_at.isoformat() if resolved.link.expires_at else None,
            "downloadCount": resolved.link.download_count,
        },
    }
