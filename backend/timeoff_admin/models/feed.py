# ruff: noqa: TC003
import secrets
import uuid

from sqlmodel import Field

from timeoff_admin.models.base import TimestampMixin, UUIDBase
from timeoff_admin.models.enums import FeedType


def _token_factory() -> str:
    return secrets.token_urlsafe(24)


class UserFeed(UUIDBase, TimestampMixin, table=True):
    """Opaque token granting read-only access to a user's calendar feed."""

    __tablename__ = "user_feed"

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    feed_token: str = Field(default_factory=_token_factory, max_length=255, unique=True)
    type: str = Field(default=FeedType.CALENDAR, max_length=20)

    def is_calendar(self) -> bool:
        return self.type == FeedType.CALENDAR
