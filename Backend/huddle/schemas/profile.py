import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ProfileResponse(BaseModel):
    id: uuid.UUID
    username: str
    full_name: str
    bio: str
    avatar_url: str

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    full_name: str | None = Field(default=None, max_length=255)
    bio: str | None = Field(default=None, max_length=1000)
    avatar_url: str | None = Field(default=None, max_length=1024)

    # username is immutable, so it is rejected rather than ignored
    model_config = {"extra": "forbid"}


class ProfileDetail(ProfileResponse):
    created_at: datetime
    updated_at: datetime
