# ruff: noqa: TC003
from __future__ import annotations

import uuid

from pydantic import BaseModel, EmailStr, Field

from timeoff_admin.models.enums import FeedType


class UpdateUserRequest(BaseModel):
    """Admin edit of a user's details; omitted fields stay unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    lastname: str | None = Field(default=None, max_length=255)
    email: EmailStr | None = None
    is_admin: bool | None = None
    activated: bool | None = None
    default_allowance: float | None = Field(default=None, ge=0)


class UserResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    email: str
    name: str
    lastname: str
    is_admin: bool
    activated: bool
    default_allowance: float


class UserFeedResponse(BaseModel):
    type: FeedType
    feed_token: str
    url: str


class UserFeedListResponse(BaseModel):
    items: list[UserFeedResponse]
