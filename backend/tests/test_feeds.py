"""Tests for iCalendar feeds."""

from __future__ import annotations

from datetime import date, time, timedelta
from typing import TYPE_CHECKING

from sqlalchemy import select

from timeoff_admin.models import Leave, UserFeed
from timeoff_admin.models.enums import DayPart, FeedType, LeaveStatus
from timeoff_admin.services.calendar import LeaveDay
from timeoff_admin.services.feed import (
    build_events,
    ensure_user_feed,
    event_window,
    render_feed,
    team_view_window,
)

if TYPE_CHECKING:
    import pytest
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

    from timeoff_admin.models import Company, LeaveType, User
    from timeoff_admin.repository import SqlPolicyRepository


def _first_weekday(start: date) -> date:
    day = start
    while day.weekday() >= 5:
        day += timedelta(days=1)
    return day


async def _add_leave(
    db_session: AsyncSession,
    user: User,
    leave_type: LeaveType,
    day: date,
    *,
    day_part: DayPart = DayPart.ALL,
) -> None:
    db_session.add(
        Leave(
            user_id=user.id,
            leave_type_id=leave_type.id,
            status=LeaveStatus.APPROVED,
            date_start=day,
            date_end=day,
            day_part_start=day_part,
            day_part_end=day_part,
        )
    )
    await db_session.commit()


# ---------------------------------------------------------------------------
# Event construction
# ---------------------------------------------------------------------------


def test_event_window() -> None:
    assert event_window(True, True) == (time(9, 0), time(17, 0))
    assert event_window(True, False) == (time(9, 0), time(13, 0))
    assert event_window(False, True) == (time(13, 0), time(17, 0))
    assert event_window(False, False) is None


def test_build_events_skips_days_without_leave(admin: User) -> None:
    days = [
        LeaveDay(user=admin, day=date(2026, 3, 2), is_leave_morning=True),
        LeaveDay(user=admin, day=date(2026, 3, 3)),
    ]
    (event,) = build_events(days, domain="timeoff.test")
    assert event.start.isoformat() == "2026-03-02T09:00:00+00:00"
    assert event.end.isoformat() == "2026-03-02T13:00:00+00:00"
    assert event.summary == "Ada Admin is out of office"
    assert event.uid == f"{admin.id}-2026-03-02@timeoff.test"


def test_team_view_window_spans_seven_months() -> None:
    assert team_view_window(date(2026, 10, 19)) == (date(2026, 10, 1), date(2027, 4, 30))
    assert team_view_window(date(2026, 1, 31)) == (date(2026, 1, 1), date(2026, 7, 31))


# ---------------------------------------------------------------------------
# Feed documents
# ---------------------------------------------------------------------------


async def test_unknown_token_renders_placeholder(repository: SqlPolicyRepository) -> None:
    document = await render_feed(repository, "no-such-token")
    assert document.body == "N/A"
    assert document.media_type == "text/plain"
    assert document.status_code == 200


async def test_unavailable_feed_log_omits_full_token(
    repository: SqlPolicyRepository,
    caplog: pytest.LogCaptureFixture,
) -> None:
    token = "secret-feed-token-0123456789"
    await render_feed(repository, token)
    assert "secret" in caplog.text
    assert token not in caplog.text


async def test_personal_feed_lists_half_day(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    admin: User,
    holiday_type: LeaveType,
) -> None:
    day = _first_weekday(date(company.get_today().year, 3, 1))
    await _add_leave(db_session, admin, holiday_type, day, day_part=DayPart.MORNING)
    feed = await ensure_user_feed(repository, admin)

    document = await render_feed(repository, feed.feed_token)
    assert document.media_type == "text/calendar"
    lines = document.body.split("\r\n")
    assert lines[0] == "BEGIN:VCALENDAR"
    assert "X-WR-CALNAME:Ada Admin calendar" in lines
    assert f"DTSTART:{day:%Y%m%d}T090000Z" in lines
    assert f"DTEND:{day:%Y%m%d}T130000Z" in lines
    assert "SUMMARY:Ada Admin is out of office" in lines
    assert lines.count("BEGIN:VEVENT") == 1


async def test_personal_feed_ignores_rejected_leaves(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    admin: User,
    holiday_type: LeaveType,
) -> None:
    day = _first_weekday(date(company.get_today().year, 3, 1))
    db_session.add(
        Leave(
            user_id=admin.id,
            leave_type_id=holiday_type.id,
            status=LeaveStatus.REJECTED,
            date_start=day,
            date_end=day,
        )
    )
    await db_session.commit()
    feed = await ensure_user_feed(repository, admin)

    document = await render_feed(repository, feed.feed_token)
    assert "BEGIN:VEVENT" not in document.body


async def test_team_feed_lists_colleagues(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    admin: User,
    employee: User,
    holiday_type: LeaveType,
) -> None:
    day = _first_weekday(company.get_today().replace(day=1))
    await _add_leave(db_session, admin, holiday_type, day)
    feed = await ensure_user_feed(repository, employee, FeedType.TEAMVIEW)

    document = await render_feed(repository, feed.feed_token)
    assert "X-WR-CALNAME:Bob Builder team" in document.body
    assert "SUMMARY:Ada Admin is out of office" in document.body


async def test_hidden_team_view_shows_only_own_absences(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    company: Company,
    admin: User,
    employee: User,
    holiday_type: LeaveType,
) -> None:
    company.is_team_view_hidden = True
    await db_session.commit()
    day = _first_weekday(company.get_today().replace(day=1))
    await _add_leave(db_session, admin, holiday_type, day)
    await _add_leave(db_session, employee, holiday_type, day)

    employee_feed = await ensure_user_feed(repository, employee, FeedType.TEAMVIEW)
    document = await render_feed(repository, employee_feed.feed_token)
    assert "SUMMARY:Bob Builder is out of office" in document.body
    assert "Ada Admin" not in document.body

    admin_feed = await ensure_user_feed(repository, admin, FeedType.TEAMVIEW)
    document = await render_feed(repository, admin_feed.feed_token)
    assert "SUMMARY:Bob Builder is out of office" in document.body
    assert "SUMMARY:Ada Admin is out of office" in document.body


async def test_ensure_user_feed_is_idempotent(
    repository: SqlPolicyRepository,
    db_session: AsyncSession,
    admin: User,
) -> None:
    first = await ensure_user_feed(repository, admin)
    second = await ensure_user_feed(repository, admin)
    assert first.feed_token == second.feed_token
    feeds = (await db_session.execute(select(UserFeed))).scalars().all()
    assert len(feeds) == 1


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------


async def test_feed_endpoint(
    async_client: AsyncClient,
    repository: SqlPolicyRepository,
    admin: User,
) -> None:
    feed = await ensure_user_feed(repository, admin)
    resp = await async_client.get(f"/feed/{feed.feed_token}/ical.ics")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/calendar")
    assert resp.text.startswith("BEGIN:VCALENDAR")


async def test_feed_endpoint_unknown_token(async_client: AsyncClient) -> None:
    resp = await async_client.get("/feed/unknown/ical.ics")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    assert resp.text == "N/A"
