"""iCalendar feeds of absences, addressed by an opaque feed token."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import TYPE_CHECKING

from timeoff_admin.config import get_settings
from timeoff_admin.exceptions import NotFoundError
from timeoff_admin.models.company import Company
from timeoff_admin.models.enums import FeedType
from timeoff_admin.models.feed import UserFeed
from timeoff_admin.models.user import User
from timeoff_admin.services.calendar import get_bank_holiday_dates, resolve_leave_days

if TYPE_CHECKING:
    from collections.abc import Iterable

    from timeoff_admin.repository import PolicyRepository
    from timeoff_admin.services.calendar import LeaveDay

logger = logging.getLogger(__name__)

FEED_NOT_AVAILABLE = "N/A"
TEAM_VIEW_MONTHS = 7

# Tokens grant read access; logs only carry their first characters.
FEED_TOKEN_LOG_PREFIX = 6

_MORNING = (time(9, 0), time(13, 0))
_AFTERNOON = (time(13, 0), time(17, 0))
_FULL_DAY = (time(9, 0), time(17, 0))


@dataclass(frozen=True)
class CalendarEvent:
    uid: str
    start: datetime
    end: datetime
    summary: str


def event_window(is_leave_morning: bool, is_leave_afternoon: bool) -> tuple[time, time] | None:
    """Working hours covered by a day's leave, or None when not on leave."""
    if is_leave_morning and is_leave_afternoon:
        return _FULL_DAY
    if is_leave_afternoon:
        return _AFTERNOON
    if is_leave_morning:
        return _MORNING
    return None


def build_events(days: Iterable[LeaveDay], *, domain: str) -> list[CalendarEvent]:
    events = []
    for day in days:
        window = event_window(day.is_leave_morning, day.is_leave_afternoon)
        if window is None:
            continue
        start, end = window
        events.append(
            CalendarEvent(
                uid=f"{day.user.id}-{day.day.isoformat()}@{domain}",
                start=datetime.combine(day.day, start, tzinfo=UTC),
                end=datetime.combine(day.day, end, tzinfo=UTC),
                summary=f"{day.user.full_name()} is out of office",
            )
        )
    return events


def _escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace(";", "\\;").replace(",", "\\,").replace("\n", "\\n")


def _stamp(moment: datetime) -> str:
    return moment.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def render_calendar(name: str, events: Iterable[CalendarEvent], *, domain: str) -> str:
    """Serialise events as an iCalendar document."""
    dtstamp = _stamp(datetime.now(UTC))
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:-//{domain}//TimeOff//EN",
        f"NAME:{_escape(name)}",
        f"X-WR-CALNAME:{_escape(name)}",
    ]
    for event in events:
        lines.extend(
            [
                "BEGIN:VEVENT",
                f"UID:{event.uid}",
                f"DTSTAMP:{dtstamp}",
                f"DTSTART:{_stamp(event.start)}",
                f"DTEND:{_stamp(event.end)}",
                f"SUMMARY:{_escape(event.summary)}",
                "END:VEVENT",
            ]
        )
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines) + "\r\n"


def _add_months(day: date, months: int) -> date:
    month_index = day.month - 1 + months
    return date(day.year + month_index // 12, month_index % 12 + 1, 1)


def team_view_window(today: date) -> tuple[date, date]:
    """First day of the current month through the end of the seventh month."""
    start = today.replace(day=1)
    end = _add_months(start, TEAM_VIEW_MONTHS) - timedelta(days=1)
    return start, end


async def team_members(repository: PolicyRepository, user: User, company: Company) -> list[User]:
    if company.is_team_view_hidden and not user.is_admin:
        return [user]
    return await repository.find_all(
        User,
        {"company_id": company.id, "activated": True},
        order_by=("name", "lastname"),
    )


async def generate_feed(repository: PolicyRepository, token: str) -> str:
    """Build the iCalendar document for ``token``. Raises on any failure."""
    domain = get_settings().feed_domain

    feed = await repository.find_one(UserFeed, {"feed_token": token})
    if feed is None:
        msg = "Unknown token provided"
        raise NotFoundError(msg)
    user = await repository.find_one(User, {"id": feed.user_id})
    if user is None:
        msg = f"Feed {feed.id} points to a missing user"
        raise NotFoundError(msg)
    company = await repository.find_one(Company, {"id": user.company_id})
    if company is None:
        msg = f"User {user.id} has no company"
        raise NotFoundError(msg)

    today = company.get_today()
    holidays = await get_bank_holiday_dates(repository, company.id)

    days: list[LeaveDay] = []
    if feed.is_calendar():
        name = f"{user.full_name()} calendar"
        days = await resolve_leave_days(
            repository, user, date(today.year, 1, 1), date(today.year, 12, 31), holidays=holidays
        )
    else:
        name = f"{user.full_name()} team"
        start, end = team_view_window(today)
        for member in await team_members(repository, user, company):
            days.extend(await resolve_leave_days(repository, member, start, end, holidays=holidays))

    return render_calendar(name, build_events(days, domain=domain), domain=domain)


@dataclass(frozen=True)
class FeedDocument:
    body: str
    media_type: str = "text/calendar"
    status_code: int = 200


def feed_failure_response(token: str, exc: BaseException) -> FeedDocument:
    """Document served when a feed cannot be produced.

    Every failure is answered with the same literal body and a 200 status.
    """
    logger.warning("Feed for token %s... is not available: %s", token[:FEED_TOKEN_LOG_PREFIX], exc)
    return FeedDocument(body=FEED_NOT_AVAILABLE, media_type="text/plain")


async def render_feed(repository: PolicyRepository, token: str) -> FeedDocument:
    try:
        return FeedDocument(body=await generate_feed(repository, token))
    except Exception as exc:
        return feed_failure_response(token, exc)


async def ensure_user_feed(
    repository: PolicyRepository,
    user: User,
    feed_type: FeedType = FeedType.CALENDAR,
) -> UserFeed:
    """Return the user's feed of ``feed_type``, creating it on first use."""
    feed = await repository.find_one(UserFeed, {"user_id": user.id, "type": feed_type.value})
    if feed is None:
        feed = await repository.create(UserFeed, {"user_id": user.id, "type": feed_type.value})
        await repository.commit()
    return feed
