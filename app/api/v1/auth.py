from dataclasses import dataclass
import uuid
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.core.errors import UnauthenticatedError
from app.core.security import decode_token
from app.db.session import get_db
from app.models.user import User
from app.services import users as user_service

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class RequestContext:
    """Everything a handler needs to know about the caller."""
    user: User
    base_url: str

    @property
    def user_id(self) -> uuid.UUID:
        return self.user.id


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to an internal user, creating it on first sight"""
    if credentials is None:
        raise UnauthenticatedError()

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise UnauthenticatedError("Could not validate credentials")

    external_id = payload.get("sub")
    if not external_id:
        raise UnauthenticatedError("Could not validate credentials")

    return await user_service.get_or_create_user(db, external_id, payload)


def request_base_url(request: Request) -> str:
    if settings.PUBLIC_BASE_URL:
        return settings.PUBLIC_BASE_URL.rstrip("/")
    host = request.headers.get("host") or request.url.netloc
    protocol = request.headers.get("x-forwarded-proto") or request.url.scheme or "http"
    return f"{protocol}://{host}"


async def get_request_context(
    request: Request,
    current_user: User = Depends(get_current_user),
) -> RequestContext:
    return RequestContext(user=current_user, base_url=request_base_url(request))
