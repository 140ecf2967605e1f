import logging
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import text

from timeoff_admin.config import get_settings
from timeoff_admin.db import SessionDep
from timeoff_admin.services.directory import InMemoryDirectoryAuthenticator, get_directory_authenticator

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])

HealthStatus = Literal["ok", "degraded"]


class HealthResponse(BaseModel):
    """Service status with the state of each backing collaborator."""

    status: HealthStatus
    version: str
    environment: str
    database: HealthStatus
    directory: Literal["in-memory", "configured"]


@router.get("/health", response_model=HealthResponse)
async def health(session: SessionDep) -> HealthResponse:
    """Degraded when the database does not answer; the directory is reported, never probed."""
    settings = get_settings()
    database: HealthStatus = "ok"

    try:
        await session.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database connectivity failed")
        database = "degraded"

    directory = get_directory_authenticator()
    return HealthResponse(
        status=database,
        version=settings.app_version,
        environment=settings.environment,
        database=database,
        directory="in-memory" if isinstance(directory, InMemoryDirectoryAuthenticator) else "configured",
    )
