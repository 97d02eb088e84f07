import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.errors import NotFound
from huddle.models.profile import Profile

logger = logging.getLogger(__name__)


async def get_profile(db: AsyncSession, profile_id: uuid.UUID) -> Profile:
    profile = await db.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


async def get_profile_by_username(db: AsyncSession, username: str) -> Profile:
    result = await db.execute(select(Profile).where(Profile.username == username))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFound("Profile not found")
    return profile


async def update_profile(
    db: AsyncSession,
    owner_id: uuid.UUID,
    full_name: str | None = None,
    bio: str | None = None,
    avatar_url: str | None = None,
) -> Profile:
    """Edit the owner's own profile. Fields left as None are unchanged; username never changes."""
    profile = await get_profile(db, owner_id)

    if full_name is not None:
        profile.full_name = full_name.strip()
    if bio is not None:
        profile.bio = bio
    if avatar_url is not None:
        profile.avatar_url = avatar_url

    await db.flush()
    await db.refresh(profile)
    logger.info("Profile %s updated", owner_id)
    return profile
