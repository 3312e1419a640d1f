from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from app.config import settings


def decode_token(token: str) -> dict | None:
    """Verify an identity-provider bearer token and return its claims.

    Returns None for anything that does not verify (bad signature, expired,
    wrong audience or issuer, malformed).
    """
    options = {"verify_aud": settings.IDENTITY_JWT_AUDIENCE is not None}
    kwargs = {}
    if settings.IDENTITY_JWT_AUDIENCE:
        kwargs["audience"] = settings.IDENTITY_JWT_AUDIENCE
    if settings.IDENTITY_JWT_ISSUER:
        kwargs["issuer"] = settings.IDENTITY_JWT_ISSUER

    try:
        return jwt.decode(
            token,
            settings.IDENTITY_JWT_KEY,
            algorithms=[settings.IDENTITY_JWT_ALGORITHM],
            options=options,
            **kwargs,
        )
    except JWTError:
        return None


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a token the way the identity provider does (symmetric keys only).

    Used for local development and tests.
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=30))
    to_encode["exp"] = expire
    if settings.IDENTITY_JWT_AUDIENCE:
        to_encode.setdefault("aud", settings.IDENTITY_JWT_AUDIENCE)
    if settings.IDENTITY_JWT_ISSUER:
        to_encode.setdefault("iss", settings.IDENTITY_JWT_ISSUER)
    return jwt.encode(to_encode, settings.IDENTITY_JWT_KEY, algorithm=settings.IDENTITY_JWT_ALGORITHM)
