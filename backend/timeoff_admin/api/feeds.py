# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter, Response

from timeoff_admin.api.deps import RepositoryDep
from timeoff_admin.services import feed as feed_service

feeds_router = APIRouter(tags=["feeds"])


@feeds_router.get("/feed/{token}/ical.ics", response_class=Response)
async def get_feed(token: str, repository: RepositoryDep) -> Response:
    """iCalendar feed addressed by its token; no other authentication applies."""
    document = await feed_service.render_feed(repository, token)
    return Response(content=document.body, media_type=document.media_type, status_code=document.status_code)
