from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.database import get_db
from huddle.dependencies import get_current_user
from huddle.models.profile import Profile
from huddle.schemas.profile import ProfileDetail, ProfileResponse, ProfileUpdate
from huddle.services import profile_service

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileDetail)
async def get_me(user: Profile = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=ProfileDetail)
async def update_me(
    data: ProfileUpdate,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await profile_service.update_profile(
        db,
        user.id,
        full_name=data.full_name,
        bio=data.bio,
        avatar_url=data.avatar_url,
    )


@router.get("/{username}", response_model=ProfileResponse)
async def get_profile(
    username: str,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await profile_service.get_profile_by_username(db, username)
