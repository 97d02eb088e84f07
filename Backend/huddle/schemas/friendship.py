import uuid
from datetime import datetime

from pydantic import BaseModel

from huddle.schemas.profile import ProfileResponse
from huddle.services.friendship_resolver import Relation


class FriendRequestCreate(BaseModel):
    friend_id: uuid.UUID


class FriendshipEdgeResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    friend_id: uuid.UUID
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RelatedProfileResponse(BaseModel):
    profile: ProfileResponse
    relation: Relation
    edge: FriendshipEdgeResponse | None = None

    model_config = {"from_attributes": True}


class FriendshipViewResponse(BaseModel):
    incoming: list[RelatedProfileResponse] = []
    outgoing: list[RelatedProfileResponse] = []
    friends: list[RelatedProfileResponse] = []
    suggestions: list[RelatedProfileResponse] = []

    model_config = {"from_attributes": True}


class RelationResponse(BaseModel):
    profile_id: uuid.UUID
    relation: Relation
    edge_id: uuid.UUID | None = None
