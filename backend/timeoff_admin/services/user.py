from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import status
from sqlalchemy.exc import IntegrityError

from timeoff_admin.exceptions import AppError, NotFoundError
from timeoff_admin.models.enums import FeedType
from timeoff_admin.models.user import User
from timeoff_admin.schemas.user import UserFeedListResponse, UserFeedResponse, UserResponse
from timeoff_admin.services.audit import capture_user_changes
from timeoff_admin.services.feed import ensure_user_feed

if TYPE_CHECKING:
    import uuid

    from timeoff_admin.repository import PolicyRepository
    from timeoff_admin.schemas.user import UpdateUserRequest

logger = logging.getLogger(__name__)


def _build_user_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user, from_attributes=True)


def feed_url(feed_token: str) -> str:
    return f"/feed/{feed_token}/ical.ics"


async def get_company_user(repository: PolicyRepository, company_id: uuid.UUID, user_id: uuid.UUID) -> User:
    """Get a user of the company or raise 404."""
    user = await repository.find_one(User, {"id": user_id, "company_id": company_id})
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return user


async def get_user(repository: PolicyRepository, actor: User, user_id: uuid.UUID) -> UserResponse:
    return _build_user_response(await get_company_user(repository, actor.company_id, user_id))


async def update_user(
    repository: PolicyRepository,
    actor: User,
    user_id: uuid.UUID,
    payload: UpdateUserRequest,
) -> UserResponse:
    """Apply an admin edit to a user and audit every changed attribute."""
    user = await get_company_user(repository, actor.company_id, user_id)
    attributes = {key: value for key, value in payload.model_dump(exclude_unset=True).items() if value is not None}
    if "email" in attributes:
        attributes["email"] = str(attributes["email"]).lower()

    await capture_user_changes(repository, by_user=actor, for_user=user, new_attributes=attributes)
    await repository.update(user, attributes)

    try:
        await repository.commit()
    except IntegrityError:
        await repository.rollback()
        raise AppError("Email is already in use", status_code=status.HTTP_409_CONFLICT) from None

    logger.info("User %s updated by %s: %s", user_id, actor.id, ", ".join(sorted(attributes)))
    return _build_user_response(user)


async def create_user_feeds(repository: PolicyRepository, actor: User, user_id: uuid.UUID) -> UserFeedListResponse:
    """Make sure the user has a personal and a team feed token."""
    user = await get_company_user(repository, actor.company_id, user_id)
    feeds = [await ensure_user_feed(repository, user, feed_type) for feed_type in FeedType]
    return UserFeedListResponse(
        items=[
            UserFeedResponse(type=FeedType(feed.type), feed_token=feed.feed_token, url=feed_url(feed.feed_token))
            for feed in feeds
        ]
    )
