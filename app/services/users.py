"""Mapping between identity-provider subjects and internal user rows."""
import logging
import uuid
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from app.db.base import utcnow
from app.models.user import User
from app.services.validation import like_pattern

logger = logging.getLogger(__name__)

USER_SEARCH_MIN_LENGTH = 3
USER_SEARCH_LIMIT = 10


async def get_by_external_id(db: AsyncSession, external_id: str) -> User | None:
    return await db.scalar(select(User).where(User.external_id == external_id))


async def get_or_create_user(db: AsyncSession, external_id: str, claims: dict | None = None) -> User:
    """Internal user for an authenticated subject, created on first sight."""
    user = await get_by_external_id(db, external_id)
    if user:
        return user

    claims = claims or {}
    user = User(
        external_id=external_id,
        email=claims.get("email") or "",
        first_name=claims.get("given_name") or claims.get("first_name"),
        last_name=claims.get("family_name") or claims.get("last_name"),
        avatar_url=claims.get("picture") or claims.get("image_url"),
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        # Another request for the same subject created the row first
        await db.rollback()
        user = await get_by_external_id(db, external_id)
        if user is None:
            raise
        return user

    await db.refresh(user)
    logger.info(f"Created user {user.id} for subject {external_id}")
    return user


def _primary_email(data: dict) -> str | None:
    addresses = data.get("email_addresses") or []
    primary_id = data.get("primary_email_address_id")
    for address in addresses:
        if primary_id and address.get("id") == primary_id:
            return address.get("email_address")
    if addresses:
        return addresses[0].get("email_address")
    return None


async def upsert_from_identity(db: AsyncSession, data: dict) -> User | None:
    """Apply a ``user.created`` / ``user.updated`` identity event."""
    external_id = data.get("id")
    email = _primary_email(data)
    if not external_id or not email:
        logger.error(f"No email address found for user: {external_id}")
        return None

    user = await get_by_external_id(db, external_id)
    if user is None:
        user = User(external_id=external_id)
        db.add(user)

    user.email = email
    user.first_name = data.get("first_name")
    user.last_name = data.get("last_name")
    user.avatar_url = data.get("image_url")
    user.updated_at = utcnow()
    await db.commit()
    await db.refresh(user)

    logger.info(f"User {user.id} synced from identity provider")
    return user


async def delete_from_identity(db: AsyncSession, external_id: str) -> bool:
    result = await db.execute(delete(User).where(User.external_id == external_id))
    await db.commit()
    if result.rowcount:
        logger.info(f"User for subject {external_id} deleted")
    return bool(result.rowcount)


async def list_users(db: AsyncSession) -> list[User]:
    result = await db.execute(select(User).order_by(User.created_at))
    return list(result.scalars().all())


async def search_users(db: AsyncSession, query: str, exclude_id: uuid.UUID) -> list[User]:
    query = (query or "").strip()
    if len(query) < USER_SEARCH_MIN_LENGTH:
        return []
    result = await db.execute(
        select(User)
        .where(User.email.ilike(like_pattern(query), escape="\\"), User.id != exclude_id)
        .order_by(User.email)
        .limit(USER_SEARCH_LIMIT)
    )
    return list(result.scalars().all())
