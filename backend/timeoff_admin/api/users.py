# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends

from timeoff_admin.api.deps import ActingAdminDep, RepositoryDep, require_admin
from timeoff_admin.schemas.user import UpdateUserRequest, UserFeedListResponse, UserResponse
from timeoff_admin.services import user as user_service

users_router = APIRouter(
    prefix="/users",
    tags=["users"],
    dependencies=[Depends(require_admin)],
)


@users_router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: uuid.UUID, repository: RepositoryDep, actor: ActingAdminDep) -> UserResponse:
    return await user_service.get_user(repository, actor, user_id)


@users_router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    payload: UpdateUserRequest,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> UserResponse:
    """Edit a user's details (admin only)."""
    return await user_service.update_user(repository, actor, user_id, payload)


@users_router.post("/{user_id}/feeds", response_model=UserFeedListResponse)
async def create_user_feeds(
    user_id: uuid.UUID,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> UserFeedListResponse:
    """Issue the user's calendar and team view feed tokens, reusing existing ones."""
    return await user_service.create_user_feeds(repository, actor, user_id)
