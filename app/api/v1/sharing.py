"""Share endpoints, mounted under both ``/files/{id}`` and ``/folders/{id}``."""
from datetime import datetime
from typing import List, Literal
import uuid
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from app.api.v1.auth import RequestContext, get_request_context
from app.api.v1.serializers import public_link_to_dict, user_summary
from app.db.session import get_db
from app.models.share import ResourceRef, ResourceType
from app.services import sharing as sharing_service

Permission = Literal["view", "edit"]


class ShareUser(BaseModel):
    id: uuid.UUID
    permission: Permission = "view"
    expires_at: datetime | None = Field(None, alias="expiresAt")


class ShareRequest(BaseModel):
    users: List[ShareUser] = []
    create_public_link: bool = Field(False, alias="createPublicLink")
    public_permission: Permission = Field("view", alias="publicPermission")
    public_expires_at: datetime | None = Field(None, alias="publicExpiresAt")


def _share_to_dict(share, grantee) -> dict:
    return {
        "user": user_summary(grantee),
        "permission": share.permission,
        "expiresAt": share.expires_at.isoformat() if share.expires_at else None,
        "createdAt": share.created_at.isoformat() if share.created_at else None,
    }


def add_share_routes(router: APIRouter, resource_type: ResourceType) -> None:
    label = resource_type.capitalize()

    @router.post("/{resource_id}/share")
    async def share_resource(
        resource_id: uuid.UUID,
        body: ShareRequest,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db),
    ):
        ref = ResourceRef(resource_type, resource_id)
        await sharing_service.get_owned_resource(db, ref, ctx.user_id)

        grants = [
            sharing_service.Grant(user_id=user.id, permission=user.permission, expires_at=user.expires_at)
            for user in body.users
        ]
        if grants:
            await sharing_service.share_with_users(db, ref, ctx.user_id, grants)

        public_link = None
        if body.create_public_link:
            link = await sharing_service.create_public_link(
                db, ref, ctx.user_id, body.public_permission, body.public_expires_at
            )
            public_link = public_link_to_dict(link, ctx.base_url)

        return {
            "success": True,
            "message": f"{label} shared successfully",
            "publicLink": public_link,
        }

    @router.get("/{resource_id}/share")
    async def get_resource_shares(
        resource_id: uuid.UUID,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db),
    ):
        ref = ResourceRef(resource_type, resource_id)
        grants, public_link = await sharing_service.list_shares(db, ref, ctx.user_id)
        return {
            "shares": [_share_to_dict(share, grantee) for share, grantee in grants],
            "publicLink": public_link_to_dict(public_link, ctx.base_url),
        }

    @router.delete("/{resource_id}/share/public")
    async def revoke_public_links(
        resource_id: uuid.UUID,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db),
    ):
        ref = ResourceRef(resource_type, resource_id)
        revoked = await sharing_service.revoke_public_links(db, ref, ctx.user_id)
        return {"success": True, "revokedCount": revoked}

    @router.delete("/{resource_id}/share/{user_id}")
    async def revoke_share(
        resource_id: uuid.UUID,
        user_id: uuid.UUID,
        ctx: RequestContext = Depends(get_request_context),
        db: AsyncSession = Depends(get_db),
    ):
        ref = ResourceRef(resource_type, resource_id)
        await sharing_service.revoke_share(db, ref, ctx.user_id, user_id)
        return {"success": True, "message": "Share revoked"}
