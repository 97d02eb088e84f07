import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.config import settings
from huddle.database import get_db
from huddle.models.profile import Profile

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Profile:
    """Resolve the bearer access token issued by the auth provider to a profile."""
    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or missing credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise unauthorized

    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
        )
    except JWTError:
        raise unauthorized

    if payload.get("type", "access") != "access":
        raise unauthorized

    try:
        profile_id = uuid.UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise unauthorized

    profile = await db.get(Profile, profile_id)
    if profile is None:
        raise unauthorized
    return profile
