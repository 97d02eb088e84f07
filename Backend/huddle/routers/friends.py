import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from huddle.database import get_db
from huddle.dependencies import get_current_user
from huddle.models.profile import Profile
from huddle.schemas.friendship import (
    FriendRequestCreate,
    FriendshipViewResponse,
    RelationResponse,
)
from huddle.services import friend_service

router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("", response_model=FriendshipViewResponse)
async def list_friendships(
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await friend_service.get_friendships(db, user.id)
    return FriendshipViewResponse.model_validate(view)


@router.get("/{profile_id}/relation", response_model=RelationResponse)
async def get_relation(
    profile_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    relation, edge_id = await friend_service.get_relation(db, user.id, profile_id)
    return RelationResponse(profile_id=profile_id, relation=relation, edge_id=edge_id)


@router.post("/requests", response_model=FriendshipViewResponse, status_code=201)
async def send_request(
    data: FriendRequestCreate,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await friend_service.send_request(db, user.id, data.friend_id)
    return FriendshipViewResponse.model_validate(view)


@router.post("/requests/{edge_id}/accept", response_model=FriendshipViewResponse)
async def accept_request(
    edge_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await friend_service.accept_request(db, user.id, edge_id)
    return FriendshipViewResponse.model_validate(view)


@router.post("/requests/{edge_id}/reject", response_model=FriendshipViewResponse)
async def reject_request(
    edge_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await friend_service.reject_request(db, user.id, edge_id)
    return FriendshipViewResponse.model_validate(view)


@router.post("/requests/{edge_id}/cancel", response_model=FriendshipViewResponse)
async def cancel_request(
    edge_id: uuid.UUID,
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await friend_service.cancel_request(db, user.id, edge_id)
    return FriendshipViewResponse.model_validate(view)


@router.delete("/{edge_id}", response_model=FriendshipViewResponse)
async def remove_friend(
    edge_id: uuid.UUID,
    confirm: bool = Query(False),
    user: Profile = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    view = await friend_service.remove_friend(db, user.id, edge_id, confirm=confirm)
    return FriendshipViewResponse.model_validate(view)
