"""Identity provider webhook: keeps the user table in step with the provider."""
import hmac
import logging
from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.core.errors import UnauthenticatedError
from app.db.session import get_db
from app.services import users as user_service

logger = logging.getLogger(__name__)

router = APIRouter()


class IdentityEvent(BaseModel):
    type: str
    data: dict = {}


def verify_webhook_secret(x_webhook_secret: str | None = Header(None)) -> None:
    expected = settings.IDENTITY_WEBHOOK_SECRET
    if not expected:
        # Unsigned events are only accepted outside production-like environments
        if settings.ENVIRONMENT in ("development", "test"):
            return
        raise UnauthenticatedError("Webhook secret is not configured")
    if not x_webhook_secret or not hmac.compare_digest(x_webhook_secret, expected):
        raise UnauthenticatedError("Invalid webhook signature")


@router.post("/identity", dependencies=[Depends(verify_webhook_secret)])
async def identity_webhook(event: IdentityEvent, db: AsyncSession = Depends(get_db)):
    logger.info(f"Webhook received: {event.type}")

    if event.type in ("user.created", "user.updated"):
        await user_service.upsert_from_identity(db, event.data)
    elif event.type == "user.deleted":
        external_id = event.data.get("id")
        if external_id:
            await user_service.delete_from_identity(db, external_id)
    else:
        logger.info(f"Unhandled webhook event type: {event.type}")

    return {"success": True, "message": "Webhook processed successfully"}
