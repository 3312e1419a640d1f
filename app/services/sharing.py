"""Sharing and authorization.

Only the owner of a file or folder can grant, revoke or create public links for
it. Per-user grants are unique per (resource, owner, grantee): sharing again
updates the permission in place. Public links are bearer tokens that need no
sign-in and may expire.
"""
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime
from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.errors import GoneError, NotFoundError, ValidationError
from app.db.base import as_utc_naive, utcnow
from app.models.file import File
from app.models.folder import Folder
from app.models.share import PublicLink, ResourceRef, ResourceType, Share
from app.models.user import User

logger = logging.getLogger(__name__)

PERMISSIONS = ("view", "edit")
RESOURCE_MODELS = {"file": File, "folder": Folder}


@dataclass
class Grant:
    user_id: uuid.UUID
    permission: str = "view"
    expires_at: datetime | None = None


@dataclass
class ResolvedLink:
    link: PublicLink
    resource: File | Folder
    resource_type: ResourceType
    owner: User | None


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def public_link_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/shared/{token}"


def _check_permission(permission: str) -> str:
    if permission not in PERMISSIONS:
        raise ValidationError(f"Permission must be one of: {', '.join(PERMISSIONS)}")
    return permission


def _not_expired(model):
    return or_(model.expires_at.is_(None), model.expires_at > utcnow())


async def load_resource(db: AsyncSession, ref: ResourceRef) -> File | Folder | None:
    model = RESOURCE_MODELS[ref.type]
    return await db.scalar(select(model).where(model.id == ref.id))


async def get_owned_resource(db: AsyncSession, ref: ResourceRef, owner_id: uuid.UUID) -> File | Folder:
    model = RESOURCE_MODELS[ref.type]
    resource = await db.scalar(select(model).where(model.id == ref.id, model.owner_id == owner_id))
    if resource is None:
        raise NotFoundError(f"{ref.type.capitalize()} not found")
    return resource


async def share_with_users(
    db: AsyncSession,
    ref: ResourceRef,
    owner_id: uuid.UUID,
    grants: list[Grant],
) -> list[Share]:
    """Create or update one grant per user.

    All grantees are checked before anything is written, so a bad entry leaves
    the existing grants untouched.
    """
    await get_owned_resource(db, ref, owner_id)

    for grant in grants:
        _check_permission(grant.permission)
        if grant.user_id == owner_id:
            raise ValidationError("You cannot share with yourself")

    grantee_ids = {grant.user_id for grant in grants}
    if grantee_ids:
        found = set((await db.execute(select(User.id).where(User.id.in_(grantee_ids)))).scalars().all())
        missing = grantee_ids - found
        if missing:
            raise NotFoundError(f"User {sorted(str(user_id) for user_id in missing)[0]} not found")

    shares = []
    for grant in grants:
        existing = await db.scalar(
            select(Share).where(
                ref.matches(Share),
                Share.owner_id == owner_id,
                Share.shared_with_id == grant.user_id,
            )
        )
        if existing:
            existing.permission = grant.permission
            existing.expires_at = as_utc_naive(grant.expires_at)
            shares.append(existing)
        else:
            share = Share(
                **ref.columns(),
                owner_id=owner_id,
                shared_with_id=grant.user_id,
                permission=grant.permission,
                expires_at=as_utc_naive(grant.expires_at),
            )
            db.add(share)
            shares.append(share)
        # A grant list may name the same user twice; the second entry must update the first
        await db.flush()

    await db.commit()
    logger.info(f"{ref.type} {ref.id} shared by {owner_id} with {len(grantee_ids)} user(s)")
    return shares


async def create_public_link(
    db: AsyncSession,
    ref: ResourceRef,
    owner_id: uuid.UUID,
    permission: str = "view",
    expires_at: datetime | None = None,
) -> PublicLink:
    await get_owned_resource(db, ref, owner_id)
    link = PublicLink(
        **ref.columns(),
        token=generate_token(),
        owner_id=owner_id,
        permission=_check_permission(permission),
        expires_at=as_utc_naive(expires_at),
    )
    db.add(link)
    await db.commit()
    await db.refresh(link)

    logger.info(f"Public link {link.id} created for {ref.type} {ref.id}")
    return link


async def list_shares(db: AsyncSession, ref: ResourceRef, caller_id: uuid.UUID) -> tuple[list, PublicLink | None]:
    """Grants on a resource with their grantees, plus the owner's latest public link.

    Visible to the owner and to current grantees; the public link only to the owner.
    """
    resource = await load_resource(db, ref)
    if resource is None:
        raise NotFoundError(f"{ref.type.capitalize()} not found")

    is_owner = resource.owner_id == caller_id
    if not is_owner:
        grant = await db.scalar(
            select(Share.id).where(
                ref.matches(Share), Share.shared_with_id == caller_id, _not_expired(Share)
            )
        )
        if grant is None:
            raise NotFoundError(f"{ref.type.capitalize()} not found")

    result = await db.execute(
        select(Share, User)
        .join(User, Share.shared_with_id == User.id)
        .where(ref.matches(Share), Share.owner_id == resource.owner_id)
        .order_by(Share.created_at)
    )
    grants = result.all()

    public_link = None
    if is_owner:
        public_link = await db.scalar(
            select(PublicLink)
            .where(ref.matches(PublicLink), PublicLink.owner_id == caller_id)
            .order_by(PublicLink.created_at.desc())
            .limit(1)
        )
    return grants, public_link


async def revoke_share(db: AsyncSession, ref: ResourceRef, owner_id: uuid.UUID, user_id: uuid.UUID) -> None:
    await get_owned_resource(db, ref, owner_id)
    result = await db.execute(
        delete(Share).where(ref.matches(Share), Share.owner_id == owner_id, Share.shared_with_id == user_id)
    )
    if not result.rowcount:
        raise NotFoundError("Share not found")
    await db.commit()


async def revoke_public_links(db: AsyncSession, ref: ResourceRef, owner_id: uuid.UUID) -> int:
    await get_owned_resource(db, ref, owner_id)
    result = await db.execute(
        delete(PublicLink).where(ref.matches(PublicLink), PublicLink.owner_id == owner_id)
    )
    await db.commit()
    return result.rowcount


async def resolve_public_link(db: AsyncSession, token: str) -> ResolvedLink:
    link = await db.scalar(select(PublicLink).where(PublicLink.token == token))
    if link is None:
        raise NotFoundError("Link not found")

    if link.expires_at is not None and utcnow() > link.expires_at:
        raise GoneError("Link has expired")

    ref = link.resource
    resource = await load_resource(db, ref)
    if resource is None:
        raise NotFoundError("Resource not found")

    owner = await db.scalar(select(User).where(User.id == link.owner_id))

    if ref.type == "file":
        await db.execute(
            update(PublicLink)
            .where(PublicLink.id == link.id)
            .values(download_count=PublicLink.download_count + 1)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        await db.refresh(link)

    return ResolvedLink(link=link, resource=resource, resource_type=ref.type, owner=owner)


async def list_shared_with_me(db: AsyncSession, user_id: uuid.UUID, resource_type: ResourceType) -> list:
    """(resource, owner, share) rows for unexpired grants to ``user_id``."""
    model = RESOURCE_MODELS[resource_type]
    foreign_key = Share.file_id if resource_type == "file" else Share.folder_id

    result = await db.execute(
        select(model, User, Share)
        .join(Share, and_(foreign_key == model.id, foreign_key.is_not(None)))
        .join(User, model.owner_id == User.id)
        .where(Share.shared_with_id == user_id, _not_expired(Share))
        .order_by(Share.created_at.desc())
    )
    return result.all()
