# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import JSONResponse

from timeoff_admin.api.deps import ActingAdminDep, AdminDep, RepositoryDep, require_admin
from timeoff_admin.db import SessionDep
from timeoff_admin.schemas.audit import AuditRecordListResponse
from timeoff_admin.schemas.general import GeneralSettingsResponse
from timeoff_admin.schemas.holiday import BankHolidaysForm
from timeoff_admin.schemas.leave_type import LeaveTypesForm
from timeoff_admin.schemas.outcome import SettingsOutcome
from timeoff_admin.schemas.settings import (
    AuthenticationSettingsResponse,
    CompanyProfileForm,
    CompanyRemovalForm,
    IntegrationApiForm,
    IntegrationApiResponse,
    LdapConfigurationForm,
    ScheduleForm,
)
from timeoff_admin.services import audit as audit_service
from timeoff_admin.services import settings as settings_service
from timeoff_admin.services.directory import DirectoryAuthenticator, get_directory_authenticator

settings_router = APIRouter(
    prefix="/settings",
    tags=["settings"],
    dependencies=[Depends(require_admin)],
)


# ---------------------------------------------------------------------------
# General settings
# ---------------------------------------------------------------------------


@settings_router.get("/general", response_model=GeneralSettingsResponse)
async def get_general_settings(repository: RepositoryDep, actor: ActingAdminDep) -> GeneralSettingsResponse:
    """Company profile, schedule, bank holidays, leave types and the choices offered for them."""
    return await settings_service.get_general_settings(repository, actor)


@settings_router.post("/company", response_model=SettingsOutcome)
async def update_company(
    payload: CompanyProfileForm,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> SettingsOutcome:
    return await settings_service.update_company(repository, actor, payload)


@settings_router.post("/carry-over-unused-allowance", response_model=SettingsOutcome)
async def carry_over_unused_allowance(repository: RepositoryDep, actor: ActingAdminDep) -> SettingsOutcome:
    return await settings_service.carry_over_unused_allowance(repository, actor)


@settings_router.post("/schedule", response_model=SettingsOutcome)
async def update_schedule(
    payload: ScheduleForm,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> SettingsOutcome:
    """Save the company schedule, or a user's own schedule when ``user_id`` is given."""
    return await settings_service.update_schedule(repository, actor, payload)


# ---------------------------------------------------------------------------
# Bank holidays
# ---------------------------------------------------------------------------


@settings_router.post("/bank-holidays", response_model=SettingsOutcome)
async def update_bank_holidays(
    payload: BankHolidaysForm,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> SettingsOutcome:
    return await settings_service.update_bank_holidays(repository, actor, payload)


@settings_router.post("/bank-holidays/import", response_model=SettingsOutcome)
async def import_bank_holidays(repository: RepositoryDep, actor: ActingAdminDep) -> SettingsOutcome:
    """Add the country's default bank holidays that the company does not have yet."""
    return await settings_service.import_bank_holidays(repository, actor)


@settings_router.post("/bank-holidays/delete/{index}", response_model=SettingsOutcome)
async def delete_bank_holiday(index: str, repository: RepositoryDep, actor: ActingAdminDep) -> SettingsOutcome:
    """Remove a bank holiday by its position in the date ordered list."""
    return await settings_service.delete_bank_holiday(repository, actor, index)


# ---------------------------------------------------------------------------
# Leave types
# ---------------------------------------------------------------------------


@settings_router.post("/leave-types", response_model=SettingsOutcome)
async def update_leave_types(
    payload: LeaveTypesForm,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> SettingsOutcome:
    return await settings_service.update_leave_types(repository, actor, payload)


@settings_router.post("/leave-types/delete/{leave_type_id}", response_model=SettingsOutcome)
async def delete_leave_type(
    leave_type_id: str,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> SettingsOutcome:
    return await settings_service.delete_leave_type(repository, actor, leave_type_id)


# ---------------------------------------------------------------------------
# Company integrations
# ---------------------------------------------------------------------------


@settings_router.get("/company/integration-api", response_model=IntegrationApiResponse)
async def get_integration_api(repository: RepositoryDep, actor: ActingAdminDep) -> IntegrationApiResponse:
    return await settings_service.get_integration_api(repository, actor)


@settings_router.post("/company/integration-api", response_model=SettingsOutcome)
async def update_integration_api(
    payload: IntegrationApiForm,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> SettingsOutcome:
    return await settings_service.update_integration_api(repository, actor, payload)


@settings_router.get("/company/authentication", response_model=AuthenticationSettingsResponse)
async def get_authentication(repository: RepositoryDep, actor: ActingAdminDep) -> AuthenticationSettingsResponse:
    return await settings_service.get_authentication(repository, actor)


@settings_router.post("/company/authentication", response_model=SettingsOutcome)
async def update_ldap_configuration(
    payload: LdapConfigurationForm,
    repository: RepositoryDep,
    actor: ActingAdminDep,
    authenticator: DirectoryAuthenticator = Depends(get_directory_authenticator),
) -> SettingsOutcome:
    """Save LDAP settings after checking them with the acting user's password."""
    return await settings_service.update_ldap_configuration(
        repository, actor, payload, authenticator=authenticator
    )


# ---------------------------------------------------------------------------
# Backup, removal and audit
# ---------------------------------------------------------------------------


@settings_router.get("/company/backup", response_model=None)
async def export_company_backup(repository: RepositoryDep, actor: ActingAdminDep) -> Response:
    """Download every absence of the company as CSV."""
    result = await settings_service.export_company_backup(repository, actor)
    if isinstance(result, SettingsOutcome):
        return JSONResponse(content=result.model_dump())
    return Response(
        content=result.content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@settings_router.post("/company/delete", response_model=SettingsOutcome)
async def remove_company(
    payload: CompanyRemovalForm,
    repository: RepositoryDep,
    actor: ActingAdminDep,
) -> SettingsOutcome:
    """Delete the company and all of its data; ``confirm_name`` must match its name."""
    return await settings_service.remove_company(repository, actor, payload)


@settings_router.get("/audit", response_model=AuditRecordListResponse)
async def query_audit_log(
    session: SessionDep,
    auth: AdminDep,
    entity_type: str | None = Query(default=None),
    entity_id: uuid.UUID | None = Query(default=None),
    by_user_id: uuid.UUID | None = Query(default=None),
    attribute: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=100),
) -> AuditRecordListResponse:
    """Query the company's audit trail with optional filters."""
    return await audit_service.query_audit_log(
        session,
        auth.company_id,
        entity_type=entity_type,
        entity_id=entity_id,
        by_user_id=by_user_id,
        attribute=attribute,
        offset=offset,
        limit=limit,
    )
