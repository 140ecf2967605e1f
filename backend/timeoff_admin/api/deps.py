# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid
from typing import Annotated

from fastapi import Depends, Header, status

from timeoff_admin.db import SessionDep
from timeoff_admin.exceptions import AppError
from timeoff_admin.models.user import User
from timeoff_admin.repository import PolicyRepository, SqlPolicyRepository
from timeoff_admin.schemas.auth import AuthContext


async def get_auth_context(
    x_company_id: uuid.UUID = Header(),
    x_user_id: uuid.UUID = Header(),
    x_role: str = Header(default="employee"),
) -> AuthContext:
    """Extract dev auth context from request headers."""
    return AuthContext(company_id=x_company_id, user_id=x_user_id, role=x_role)


AuthDep = Annotated[AuthContext, Depends(get_auth_context)]


async def require_admin(
    auth: AuthDep,
) -> AuthContext:
    """Require admin role for the request."""
    if auth.role != "admin":
        raise AppError("Admin access required", status_code=status.HTTP_403_FORBIDDEN)
    return auth


AdminDep = Annotated[AuthContext, Depends(require_admin)]


def get_repository(session: SessionDep) -> PolicyRepository:
    """Repository bound to the request's session."""
    return SqlPolicyRepository(session)


RepositoryDep = Annotated[PolicyRepository, Depends(get_repository)]


async def get_acting_admin(auth: AdminDep, repository: RepositoryDep) -> User:
    """Load the administrator making the request."""
    user = await repository.find_one(User, {"id": auth.user_id, "company_id": auth.company_id})
    if user is None:
        raise AppError("Acting user not found in company", status_code=status.HTTP_403_FORBIDDEN)
    return user


ActingAdminDep = Annotated[User, Depends(get_acting_admin)]
